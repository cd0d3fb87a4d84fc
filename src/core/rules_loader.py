"""Load business rules from disk or build them from settings."""

import json
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from src.config.logging_config import get_logger
from src.config.messages import ERROR_RULES_FILE_INVALID
from src.config.settings import Settings, get_settings
from src.core.exceptions import ConfigurationError
from src.core.tiers import shift_schedule, validate_business_rules
from src.models.schema import (
    BillingRules,
    BusinessRules,
    DemurrageRules,
    DetentionConfig,
    PerDiemRules,
    StreetTurnRules,
)

logger = get_logger(__name__)

PROJECT_DIR = Path(__file__).parent.parent.parent


class RuleLoader:
    """Builds the ``BusinessRules`` value the engine is constructed with.

    All methods are static. Every rule set that leaves this class has had
    its tier schedules validated.
    """

    @staticmethod
    def load_from_json(json_path: Union[str, Path]) -> BusinessRules:
        """
        Load business rules from a JSON file.

        Sections missing from the file keep their defaults.

        Args:
            json_path: Path to a JSON document shaped like ``BusinessRules``

        Returns:
            Validated BusinessRules

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: If the file is not valid JSON, does not match
                the schema, or contains a malformed tier schedule
        """
        json_path = Path(json_path)
        if not json_path.exists():
            raise FileNotFoundError(f"Business rules file not found: {json_path}")

        logger.info(f"Loading business rules from: {json_path}")

        try:
            with open(json_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            rules = BusinessRules.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigurationError(
                ERROR_RULES_FILE_INVALID.format(path=json_path, error=e),
                {"path": str(json_path)},
            ) from e

        validate_business_rules(rules)
        logger.info(f"Loaded business rules version {rules.version}")
        return rules

    @staticmethod
    def from_settings(settings: Settings) -> BusinessRules:
        """Default rules with the settings' overrides applied."""
        rules = BusinessRules.default()

        per_diem = rules.per_diem
        if settings.per_diem_free_days is not None:
            per_diem = PerDiemRules(
                free_days=settings.per_diem_free_days,
                rates={
                    size: shift_schedule(schedule, settings.per_diem_free_days)
                    for size, schedule in per_diem.rates.items()
                },
            )

        demurrage = rules.demurrage
        if settings.demurrage_free_days is not None:
            demurrage = DemurrageRules(
                free_days=settings.demurrage_free_days,
                rates={
                    size: shift_schedule(schedule, settings.demurrage_free_days)
                    for size, schedule in demurrage.rates.items()
                },
            )

        rules = rules.model_copy(update={
            "version": settings.rules_version,
            "weight": rules.weight.model_copy(update={
                "max_gross_weight_lbs": settings.max_gross_weight_lbs,
                "overweight_threshold_lbs": settings.overweight_threshold_lbs,
            }),
            "time": rules.time.model_copy(update={
                "min_appointment_advance_hours": settings.min_appointment_advance_hours,
            }),
            "detention": DetentionConfig(
                free_time_minutes=settings.detention_free_time_minutes,
                grace_period_minutes=settings.detention_grace_period_minutes,
                rate_per_hour=settings.detention_rate_per_hour,
                max_daily_charge=settings.detention_max_daily_charge,
            ),
            "per_diem": per_diem,
            "demurrage": demurrage,
            "billing": BillingRules(
                tax_rate=settings.tax_rate,
                allow_overpayment=settings.allow_overpayment,
                payment_terms=settings.payment_terms,
                currency=settings.currency,
            ),
            "street_turn": StreetTurnRules(
                same_terminal_savings=settings.street_turn_same_terminal_savings,
                different_terminal_savings=settings.street_turn_different_terminal_savings,
                require_type_match=settings.street_turn_require_type_match,
            ),
        })

        validate_business_rules(rules)
        return rules

    @staticmethod
    def get_default_path(settings: Optional[Settings] = None) -> Path:
        """Configured rules file path, resolved against the project root."""
        settings = settings or get_settings()
        return settings.get_business_rules_path(PROJECT_DIR)

    @staticmethod
    def load_default(settings: Optional[Settings] = None) -> BusinessRules:
        """
        Load the configured rules file, or build rules from settings.

        Args:
            settings: Settings to use; the cached settings when omitted

        Returns:
            Validated BusinessRules
        """
        settings = settings or get_settings()
        default_path = RuleLoader.get_default_path(settings)
        if default_path.exists():
            return RuleLoader.load_from_json(default_path)

        logger.warning(f"Business rules file {default_path} not found, using defaults with settings overrides")
        return RuleLoader.from_settings(settings)
