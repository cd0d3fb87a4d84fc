"""User-facing messages and error strings.

Validation and ledger messages are kept here so wording stays consistent
between the validators, the ledger and the command-line output.
"""

# Container number (ISO 6346)
ERROR_CONTAINER_LENGTH = "container number must be 11 characters, got {length}"
ERROR_CONTAINER_OWNER_CODE = "invalid owner code: first 4 characters must be uppercase letters"
ERROR_CONTAINER_CATEGORY = "invalid category identifier: 4th character must be U, J, or Z"
ERROR_CONTAINER_SERIAL = "invalid serial number: must be 6 digits followed by a check digit"
ERROR_CONTAINER_CHECK_DIGIT = "invalid check digit: expected {expected}, got {actual}"

# Weight
ERROR_WEIGHT_NOT_POSITIVE = "weight must be positive, got {weight}"
ERROR_WEIGHT_EXCEEDS_MAX = "weight {weight} lbs exceeds maximum allowed {max_weight} lbs"

# Hazmat
ERROR_HAZMAT_CLASS_REQUIRED = "hazmat class is required for hazardous materials"
ERROR_UN_NUMBER_REQUIRED = "UN number is required for hazardous materials"
ERROR_UN_NUMBER_FORMAT = "invalid UN number format: must be UN followed by 4 digits (e.g., UN1203)"
ERROR_HAZMAT_CLASS_FORMAT = "invalid hazmat class: must be 1-9 with optional subdivision (e.g., 3, 2.1)"

# Reefer
ERROR_REEFER_SETPOINT_REQUIRED = "temperature setpoint is required for reefer containers"
ERROR_REEFER_SETPOINT_RANGE = "temperature setpoint must be between {low}°C and {high}°C, got {value}°C"

# Coordinates
ERROR_LATITUDE_RANGE = "latitude must be between -90 and 90, got {value}"
ERROR_LONGITUDE_RANGE = "longitude must be between -180 and 180, got {value}"

# Dates
ERROR_LFD_BEFORE_ETA = "last free day cannot be before vessel ETA"
ERROR_PORT_CUTOFF_BEFORE_DOC_CUTOFF = "port cutoff cannot be before documentation cutoff"
ERROR_APPOINTMENT_IN_PAST = "appointment time cannot be in the past"
ERROR_APPOINTMENT_TOO_SOON = "appointment must be scheduled at least {hours} hours in advance"

# Invoice ledger
ERROR_INVALID_TRANSITION = "cannot move invoice from {current} to {target}"
ERROR_LINE_ITEMS_LOCKED = "line items can only be changed on DRAFT or PENDING invoices, invoice is {status}"
ERROR_SUBMIT_WITHOUT_LINE_ITEMS = "invoice needs at least one line item before it can be submitted"
ERROR_SEND_ZERO_TOTAL = "invoice total must be greater than zero before it can be sent"
ERROR_PAYMENT_NOT_ALLOWED = "payments cannot be recorded against a {status} invoice"
ERROR_PAYMENT_NOT_POSITIVE = "payment amount must be greater than zero, got {amount}"
ERROR_PAYMENT_EXCEEDS_BALANCE = "payment {amount} exceeds balance due {balance}"
ERROR_NEGATIVE_AMOUNT = "{field} cannot be negative, got {value}"
ERROR_LINE_ITEM_NOT_FOUND = "line item {line_item_id} is not on invoice {invoice_number}"
ERROR_NOT_OVERDUE = "invoice {invoice_number} is not past its due date {due_date}"
ERROR_DERIVED_STATUS = "{target} is set by {operation}, not by a direct transition"
ERROR_SUB_CENT_PAYMENT = "payment amount must be a whole number of cents, got {amount}"

# Configuration
ERROR_SCHEDULE_EMPTY = "tier schedule {name} has no tiers"
ERROR_SCHEDULE_BAD_RANGE = "tier schedule {name}: tier {index} ends (day {to_day}) before it starts (day {from_day})"
ERROR_SCHEDULE_UNBOUNDED_NOT_LAST = "tier schedule {name}: only the last tier may be unbounded (tier {index})"
ERROR_SCHEDULE_NOT_CONTIGUOUS = "tier schedule {name}: tier {index} starts on day {from_day}, expected day {expected}"
ERROR_SCHEDULE_FREE_DAYS = "tier schedule {name}: first tier starts on day {from_day} but {free_days} free days imply day {expected}"
ERROR_SCHEDULE_MISSING_SIZE = "no {charge} tier schedule configured for {size}ft containers"
ERROR_RULES_FILE_INVALID = "business rules file {path} is invalid: {error}"
