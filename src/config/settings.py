"""Centralized configuration management using Pydantic Settings.

Settings hold deployment overrides for the business rules (detention,
weight limits, free days, billing, street-turn savings) plus file paths
and the log level. Every value can be overridden via environment variables
or a ``.env`` file.

Settings are read when the rules are built (``RuleLoader.load_default``);
the engine itself only ever sees the resulting ``BusinessRules`` value.
"""

from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.models.schema import PaymentTerms


class Settings(BaseSettings):
    """Application settings with environment variable support.

    For example, DETENTION_RATE_PER_HOUR=90 overrides the default hourly
    detention rate.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ========== Rules File ==========
    business_rules_json: Path = Field(
        default=Path("config/business_rules.json"),
        description="Path to a BusinessRules JSON file; defaults are used when it is missing"
    )
    rules_version: str = Field(
        default="default",
        description="Version label stamped on rules built from settings"
    )

    # ========== Detention ==========
    detention_free_time_minutes: int = Field(default=120, ge=0)
    detention_grace_period_minutes: int = Field(default=15, ge=0)
    detention_rate_per_hour: Decimal = Field(default=Decimal("75.00"), ge=0)
    detention_max_daily_charge: Decimal = Field(default=Decimal("600.00"), ge=0)

    # ========== Weight ==========
    max_gross_weight_lbs: int = Field(default=67200, gt=0)
    overweight_threshold_lbs: int = Field(default=44000, gt=0)

    # ========== Scheduling ==========
    min_appointment_advance_hours: int = Field(default=2, ge=0)

    # ========== Free Days ==========
    per_diem_free_days: Optional[int] = Field(
        default=None, ge=0,
        description="Overrides per-diem free days; the tier tables are shifted to start after them"
    )
    demurrage_free_days: Optional[int] = Field(default=None, ge=0)

    # ========== Billing ==========
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=1)
    allow_overpayment: bool = Field(default=False)
    payment_terms: PaymentTerms = Field(default=PaymentTerms.NET30)
    currency: str = Field(default="USD")

    # ========== Street Turns ==========
    street_turn_same_terminal_savings: Decimal = Field(default=Decimal("200.00"), ge=0)
    street_turn_different_terminal_savings: Decimal = Field(default=Decimal("150.00"), ge=0)
    street_turn_require_type_match: bool = Field(default=False)

    # ========== Logging ==========
    log_level: str = Field(default="INFO")
    log_file: Optional[Path] = Field(default=None)

    def get_business_rules_path(self, project_dir: Path) -> Path:
        """Get absolute path to the business rules JSON file.

        Args:
            project_dir: Project root directory

        Returns:
            Absolute path to the rules file
        """
        if self.business_rules_json.is_absolute():
            return self.business_rules_json
        return project_dir / self.business_rules_json


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the process-wide settings instance, created on first call."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached instance so the next ``get_settings()`` re-reads the environment."""
    global _settings
    _settings = None
