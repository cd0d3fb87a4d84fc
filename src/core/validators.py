"""Identifier and regulated-cargo validators.

All validators are pure and return a ``ValidationResult``; expected bad input
never raises. Checks that do not apply (a non-hazmat container, a dry box
without a setpoint) simply pass. Callers decide whether a failure blocks the
workflow (``result.raise_for_error()``) or is only logged.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from src.config.logging_config import get_logger
from src.config.messages import (
    ERROR_APPOINTMENT_IN_PAST,
    ERROR_APPOINTMENT_TOO_SOON,
    ERROR_CONTAINER_CATEGORY,
    ERROR_CONTAINER_CHECK_DIGIT,
    ERROR_CONTAINER_LENGTH,
    ERROR_CONTAINER_OWNER_CODE,
    ERROR_CONTAINER_SERIAL,
    ERROR_HAZMAT_CLASS_FORMAT,
    ERROR_HAZMAT_CLASS_REQUIRED,
    ERROR_LATITUDE_RANGE,
    ERROR_LFD_BEFORE_ETA,
    ERROR_LONGITUDE_RANGE,
    ERROR_PORT_CUTOFF_BEFORE_DOC_CUTOFF,
    ERROR_REEFER_SETPOINT_RANGE,
    ERROR_REEFER_SETPOINT_REQUIRED,
    ERROR_UN_NUMBER_FORMAT,
    ERROR_UN_NUMBER_REQUIRED,
    ERROR_WEIGHT_EXCEEDS_MAX,
    ERROR_WEIGHT_NOT_POSITIVE,
)
from src.core.exceptions import (
    CheckDigitError,
    RangeValidationError,
    StructuralValidationError,
    ValidationFailure,
)
from src.models.records import ContainerRecord, ShipmentDates
from src.models.schema import WeightRules

logger = get_logger(__name__)

CONTAINER_NUMBER_LENGTH = 11
CATEGORY_IDENTIFIERS = frozenset("UJZ")
REEFER_MIN_SETPOINT_C = -30.0
REEFER_MAX_SETPOINT_C = 30.0

# owner code (3 letters) plus category letter
_PREFIX_RE = re.compile(r"^[A-Z]{4}$")
_SERIAL_RE = re.compile(r"^[0-9]{6}$")
_CHECK_RE = re.compile(r"^[0-9]$")
_HAZMAT_CLASS_RE = re.compile(r"^[1-9](\.[1-9])?$")
_UN_NUMBER_RE = re.compile(r"^UN[0-9]{4}$")


def _letter_values():
    # ISO 6346: letters count up from A=10, skipping multiples of 11
    values = {}
    value = 10
    for letter in "ABCDEFGHIJKLMNOPQRSTUVWXYZ":
        if value % 11 == 0:
            value += 1
        values[letter] = value
        value += 1
    return values


LETTER_VALUES = _letter_values()


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one or more validation rules.

    Attributes:
        errors: Every failure found, in the order the rules ran
    """
    errors: Tuple[ValidationFailure, ...] = ()

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def failure(cls, error: ValidationFailure) -> "ValidationResult":
        return cls((error,))

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def error(self) -> Optional[ValidationFailure]:
        """First failure, or None when valid."""
        return self.errors[0] if self.errors else None

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(self.errors + other.errors)

    def raise_for_error(self) -> None:
        """Raise the first failure, for callers that want to block on it."""
        if self.errors:
            raise self.errors[0]

    def __bool__(self) -> bool:
        return self.ok


def compute_check_digit(prefix: str) -> int:
    """ISO 6346 check digit for the first 10 characters of a container number.

    Each character's value (letters from the ISO table, digits at face value)
    is weighted by 2**position; the check digit is ``(sum % 11) % 10``.

    Raises:
        ValueError: If ``prefix`` is not 10 characters of A-Z / 0-9
    """
    if len(prefix) != CONTAINER_NUMBER_LENGTH - 1:
        raise ValueError(f"expected 10 characters, got {len(prefix)}")

    total = 0
    for position, char in enumerate(prefix):
        if char in LETTER_VALUES:
            value = LETTER_VALUES[char]
        elif char.isdigit() and char.isascii():
            value = int(char)
        else:
            raise ValueError(f"invalid character in container number: {char!r}")
        total += value * (1 << position)

    return (total % 11) % 10


def validate_container_number(number: str) -> ValidationResult:
    """Validate an ISO 6346 container number such as ``CSQU3054383``.

    Layout: ``CSQ`` owner code, ``U`` category (U, J or Z), ``305438`` serial,
    ``3`` check digit. Structure is checked first; the check digit is only
    evaluated on a well-formed value.
    """
    field = "container_number"

    if len(number) != CONTAINER_NUMBER_LENGTH:
        return ValidationResult.failure(StructuralValidationError(
            ERROR_CONTAINER_LENGTH.format(length=len(number)),
            field=field, value=number, rule="container.length",
        ))
    if not _PREFIX_RE.match(number[0:4]):
        return ValidationResult.failure(StructuralValidationError(
            ERROR_CONTAINER_OWNER_CODE, field=field, value=number, rule="container.owner_code",
        ))
    if number[3] not in CATEGORY_IDENTIFIERS:
        return ValidationResult.failure(StructuralValidationError(
            ERROR_CONTAINER_CATEGORY, field=field, value=number, rule="container.category",
        ))
    if not _SERIAL_RE.match(number[4:10]) or not _CHECK_RE.match(number[10]):
        return ValidationResult.failure(StructuralValidationError(
            ERROR_CONTAINER_SERIAL, field=field, value=number, rule="container.serial",
        ))

    expected = compute_check_digit(number[:10])
    actual = int(number[10])
    if expected != actual:
        logger.debug(f"Check digit mismatch for {number}: expected {expected}, got {actual}")
        return ValidationResult.failure(CheckDigitError(
            ERROR_CONTAINER_CHECK_DIGIT.format(expected=expected, actual=actual),
            field=field, value=number, expected=expected, actual=actual,
        ))

    return ValidationResult.success()


def validate_weight(weight_lbs: int, rules: WeightRules) -> ValidationResult:
    """Gross weight must be positive and within the legal maximum."""
    if weight_lbs <= 0:
        return ValidationResult.failure(RangeValidationError(
            ERROR_WEIGHT_NOT_POSITIVE.format(weight=weight_lbs),
            field="weight_lbs", value=weight_lbs, rule="weight.positive",
        ))
    if weight_lbs > rules.max_gross_weight_lbs:
        return ValidationResult.failure(RangeValidationError(
            ERROR_WEIGHT_EXCEEDS_MAX.format(weight=weight_lbs, max_weight=rules.max_gross_weight_lbs),
            field="weight_lbs", value=weight_lbs, rule="weight.max_gross",
        ))
    return ValidationResult.success()


def is_overweight(weight_lbs: int, rules: WeightRules) -> bool:
    """True when the weight requires an overweight permit."""
    return weight_lbs > rules.overweight_threshold_lbs


def validate_hazmat(
    is_hazmat: bool,
    hazmat_class: Optional[str],
    un_number: Optional[str],
) -> ValidationResult:
    """Hazardous cargo needs both a DOT class and a UN number.

    Non-hazardous cargo passes regardless of the other two fields.
    """
    if not is_hazmat:
        return ValidationResult.success()

    if not hazmat_class:
        return ValidationResult.failure(StructuralValidationError(
            ERROR_HAZMAT_CLASS_REQUIRED, field="hazmat_class", value=hazmat_class,
            rule="hazmat.class_required",
        ))
    if not un_number:
        return ValidationResult.failure(StructuralValidationError(
            ERROR_UN_NUMBER_REQUIRED, field="un_number", value=un_number,
            rule="hazmat.un_number_required",
        ))
    if not _UN_NUMBER_RE.match(un_number):
        return ValidationResult.failure(StructuralValidationError(
            ERROR_UN_NUMBER_FORMAT, field="un_number", value=un_number,
            rule="hazmat.un_number_format",
        ))
    if not _HAZMAT_CLASS_RE.match(hazmat_class):
        return ValidationResult.failure(StructuralValidationError(
            ERROR_HAZMAT_CLASS_FORMAT, field="hazmat_class", value=hazmat_class,
            rule="hazmat.class_format",
        ))
    return ValidationResult.success()


def validate_reefer(is_reefer: bool, setpoint_c: Optional[float]) -> ValidationResult:
    """Reefers need a setpoint within [-30, 30] °C."""
    if not is_reefer:
        return ValidationResult.success()

    if setpoint_c is None:
        return ValidationResult.failure(StructuralValidationError(
            ERROR_REEFER_SETPOINT_REQUIRED, field="temperature_setpoint_c", value=None,
            rule="reefer.setpoint_required",
        ))
    if not (REEFER_MIN_SETPOINT_C <= setpoint_c <= REEFER_MAX_SETPOINT_C):
        return ValidationResult.failure(RangeValidationError(
            ERROR_REEFER_SETPOINT_RANGE.format(
                low=int(REEFER_MIN_SETPOINT_C), high=int(REEFER_MAX_SETPOINT_C), value=setpoint_c
            ),
            field="temperature_setpoint_c", value=setpoint_c, rule="reefer.setpoint_range",
        ))
    return ValidationResult.success()


def validate_coordinates(latitude: float, longitude: float) -> ValidationResult:
    if not (-90 <= latitude <= 90):
        return ValidationResult.failure(RangeValidationError(
            ERROR_LATITUDE_RANGE.format(value=latitude),
            field="latitude", value=latitude, rule="coordinates.latitude",
        ))
    if not (-180 <= longitude <= 180):
        return ValidationResult.failure(RangeValidationError(
            ERROR_LONGITUDE_RANGE.format(value=longitude),
            field="longitude", value=longitude, rule="coordinates.longitude",
        ))
    return ValidationResult.success()


def validate_shipment_dates(dates: ShipmentDates) -> ValidationResult:
    """Check date ordering; pairs with an unknown side are skipped.

    - last free day must not precede vessel ETA (imports)
    - port cutoff must not precede documentation cutoff (exports)
    """
    result = ValidationResult.success()

    if dates.vessel_eta is not None and dates.last_free_day is not None:
        if dates.last_free_day < dates.vessel_eta:
            result = result.merge(ValidationResult.failure(RangeValidationError(
                ERROR_LFD_BEFORE_ETA, field="last_free_day", value=dates.last_free_day,
                rule="dates.lfd_after_eta",
            )))

    if dates.port_cutoff is not None and dates.documentation_cutoff is not None:
        if dates.port_cutoff < dates.documentation_cutoff:
            result = result.merge(ValidationResult.failure(RangeValidationError(
                ERROR_PORT_CUTOFF_BEFORE_DOC_CUTOFF, field="port_cutoff", value=dates.port_cutoff,
                rule="dates.port_cutoff_after_doc_cutoff",
            )))

    return result


def validate_appointment_time(
    appointment: datetime,
    now: datetime,
    min_advance_hours: int = 0,
) -> ValidationResult:
    """An appointment must be in the future and respect the minimum lead time."""
    if appointment < now:
        return ValidationResult.failure(RangeValidationError(
            ERROR_APPOINTMENT_IN_PAST, field="appointment_time", value=appointment,
            rule="appointment.in_past",
        ))
    if min_advance_hours > 0 and appointment < now + timedelta(hours=min_advance_hours):
        return ValidationResult.failure(RangeValidationError(
            ERROR_APPOINTMENT_TOO_SOON.format(hours=min_advance_hours),
            field="appointment_time", value=appointment, rule="appointment.min_advance",
        ))
    return ValidationResult.success()


def validate_container(record: ContainerRecord, rules: WeightRules) -> ValidationResult:
    """Run every intake check for a container and collect all failures.

    Weight is only checked once the container has been weighed.
    """
    result = validate_container_number(record.container_number)
    if record.weight_lbs is not None:
        result = result.merge(validate_weight(record.weight_lbs, rules))
    result = result.merge(validate_hazmat(record.is_hazmat, record.hazmat_class, record.un_number))
    result = result.merge(validate_reefer(record.is_reefer, record.temperature_setpoint_c))

    if not result.ok:
        logger.info(
            f"Container {record.container_number} failed {len(result.errors)} check(s): "
            + ", ".join(error.rule for error in result.errors)
        )
    return result


def is_last_free_day_passed(last_free_day: Optional[date], as_of: date) -> bool:
    """True once demurrage exposure has started (the day after the LFD)."""
    return last_free_day is not None and as_of > last_free_day
