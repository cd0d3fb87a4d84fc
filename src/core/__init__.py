"""Core business logic modules."""

from src.core.aging import build_aging_report
from src.core.calculator import ChargeBreakdown, ChargeCalculator
from src.core.detention import DetentionResult, calculate_detention, calculate_multi_day_detention
from src.core.exceptions import (
    CheckDigitError,
    ConfigurationError,
    InvalidStateError,
    LineItemNotFoundError,
    RangeValidationError,
    RulesEngineError,
    StructuralValidationError,
    ValidationFailure,
)
from src.core.ledger import InvoiceLedger
from src.core.rules_loader import RuleLoader
from src.core.street_turns import StreetTurnMatcher, sort_by_urgency
from src.core.tiers import tiered_charge, validate_tier_schedule
from src.core.validators import ValidationResult, validate_container, validate_container_number

__all__ = [
    "build_aging_report",
    "ChargeBreakdown",
    "ChargeCalculator",
    "DetentionResult",
    "calculate_detention",
    "calculate_multi_day_detention",
    "CheckDigitError",
    "ConfigurationError",
    "InvalidStateError",
    "LineItemNotFoundError",
    "RangeValidationError",
    "RulesEngineError",
    "StructuralValidationError",
    "ValidationFailure",
    "InvoiceLedger",
    "RuleLoader",
    "StreetTurnMatcher",
    "sort_by_urgency",
    "tiered_charge",
    "validate_tier_schedule",
    "ValidationResult",
    "validate_container",
    "validate_container_number",
]
