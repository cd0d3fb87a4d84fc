"""Unit tests for loading business rules."""

import json
from decimal import Decimal

import pytest
from src.config.settings import Settings
from src.core.exceptions import ConfigurationError
from src.core.rules_loader import RuleLoader
from src.core.tiers import tiered_charge
from src.models.schema import BusinessRules, ContainerSize, PaymentTerms


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a rules file that does not exist yet."""
    return Settings(_env_file=None, business_rules_json=tmp_path / "business_rules.json")


class TestLoadFromJson:
    """Test loading rules files."""

    def test_round_trip(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(BusinessRules.default().model_dump_json(indent=2), encoding="utf-8")
        assert RuleLoader.load_from_json(path) == BusinessRules.default()

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({
            "version": "2024-Q2",
            "detention": {"rate_per_hour": "90.00"},
        }), encoding="utf-8")

        rules = RuleLoader.load_from_json(str(path))
        assert rules.version == "2024-Q2"
        assert rules.detention.rate_per_hour == Decimal("90.00")
        assert rules.detention.free_time_minutes == 120
        assert rules.per_diem.free_days == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuleLoader.load_from_json(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            RuleLoader.load_from_json(path)
        assert exc_info.value.details["path"] == str(path)

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"billing": {"tax_rate": "2"}}), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="invalid"):
            RuleLoader.load_from_json(path)

    def test_malformed_schedule(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({
            "demurrage": {"free_days": 0, "rates": {"20": [
                {"from_day": 1, "to_day": 5, "rate_per_day": "75"},
                {"from_day": 7, "to_day": 0, "rate_per_day": "150"},
            ]}},
        }), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="demurrage"):
            RuleLoader.load_from_json(path)


class TestFromSettings:
    """Test building rules from settings."""

    def test_defaults_match_business_rules(self, settings):
        assert RuleLoader.from_settings(settings) == BusinessRules.default()

    def test_overrides(self, tmp_path):
        settings = Settings(
            _env_file=None,
            detention_rate_per_hour="90",
            max_gross_weight_lbs=80000,
            tax_rate="0.05",
            payment_terms="NET45",
            street_turn_require_type_match=True,
            rules_version="west-coast",
        )
        rules = RuleLoader.from_settings(settings)
        assert rules.version == "west-coast"
        assert rules.detention.rate_per_hour == Decimal("90")
        assert rules.weight.max_gross_weight_lbs == 80000
        assert rules.weight.overweight_threshold_lbs == 44000
        assert rules.billing.tax_rate == Decimal("0.05")
        assert rules.billing.payment_terms is PaymentTerms.NET45
        assert rules.street_turn.require_type_match is True

    def test_free_days_override_shifts_tiers(self):
        settings = Settings(_env_file=None, per_diem_free_days=3, demurrage_free_days=2)
        rules = RuleLoader.from_settings(settings)
        assert rules.per_diem.free_days == 3
        assert rules.per_diem.rates[ContainerSize.TWENTY][0].from_day == 4
        # day 4 is now the first billable day
        assert tiered_charge(4, rules.per_diem.rates[ContainerSize.TWENTY]) == Decimal("25.00")
        assert rules.demurrage.rates[ContainerSize.TWENTY][0].from_day == 3


class TestLoadDefault:
    def test_falls_back_to_settings(self, settings):
        assert not settings.business_rules_json.exists()
        assert RuleLoader.load_default(settings) == BusinessRules.default()

    def test_prefers_file(self, settings):
        settings.business_rules_json.write_text(json.dumps({"version": "from-file"}), encoding="utf-8")
        assert RuleLoader.load_default(settings).version == "from-file"

    def test_relative_path_resolved_against_project(self):
        settings = Settings(_env_file=None)
        path = RuleLoader.get_default_path(settings)
        assert path.is_absolute()
        assert path.parts[-2:] == ("config", "business_rules.json")
