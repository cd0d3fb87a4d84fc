"""Typed exceptions for the charge and compliance rules engine.

Every error carries a machine-readable ``code``, a human-readable ``message``
and a ``details`` dictionary so callers can branch on type and report
structured data instead of parsing message strings.

Hierarchy::

    RulesEngineError
    +-- ValidationFailure
    |   +-- StructuralValidationError   (malformed identifier or format)
    |   +-- RangeValidationError        (value outside legal bounds)
    |   +-- CheckDigitError             (ISO 6346 mismatch)
    +-- InvalidStateError               (illegal invoice transition)
    +-- LineItemNotFoundError           (unknown line item id)
    +-- ConfigurationError              (malformed tier schedule or rules file)

Validators do not raise these for expected invalid input; they return them
inside a ``ValidationResult``. The invoice ledger and the rules loader raise.
"""

from typing import Any, Dict, Optional


class RulesEngineError(Exception):
    """Base class for all rules engine errors."""

    code: str = "RULES_ENGINE_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for API responses or log records."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationFailure(RulesEngineError):
    """A value failed a validation rule.

    Attributes:
        field: Name of the offending field (e.g. ``"container_number"``)
        value: The rejected value
        rule: Identifier of the violated rule (e.g. ``"container.check_digit"``)
    """

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str, value: Any = None, rule: str = ""):
        super().__init__(message, {"field": field, "value": value, "rule": rule})
        self.field = field
        self.value = value
        self.rule = rule


class StructuralValidationError(ValidationFailure):
    code = "STRUCTURAL_VALIDATION_ERROR"


class RangeValidationError(ValidationFailure):
    code = "RANGE_VALIDATION_ERROR"


class CheckDigitError(ValidationFailure):
    """ISO 6346 check digit does not match the computed value."""

    code = "CHECK_DIGIT_ERROR"

    def __init__(self, message: str, field: str, value: Any, expected: int, actual: int):
        super().__init__(message, field=field, value=value, rule="container.check_digit")
        self.expected = expected
        self.actual = actual
        self.details.update({"expected": expected, "actual": actual})


class InvalidStateError(RulesEngineError):
    """An invoice operation is not allowed in the invoice's current status."""

    code = "INVALID_STATE"

    def __init__(self, message: str, current_state: str, target_state: Optional[str] = None):
        super().__init__(
            message,
            {"current_state": current_state, "target_state": target_state},
        )
        self.current_state = current_state
        self.target_state = target_state


class LineItemNotFoundError(RulesEngineError):
    """The line item id is not on the invoice."""

    code = "LINE_ITEM_NOT_FOUND"

    def __init__(self, message: str, line_item_id: Any, invoice_number: str):
        super().__init__(message, {"line_item_id": str(line_item_id), "invoice_number": invoice_number})
        self.line_item_id = line_item_id
        self.invoice_number = invoice_number


class ConfigurationError(RulesEngineError):
    """Business rules (usually a tier schedule) are malformed."""

    code = "CONFIGURATION_ERROR"
