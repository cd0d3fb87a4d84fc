"""Integration tests for the complete billing workflow."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from src.core.aging import build_aging_report
from src.core.calculator import ChargeCalculator
from src.core.exceptions import InvalidStateError
from src.core.ledger import InvoiceLedger
from src.core.rules_loader import RuleLoader
from src.core.street_turns import StreetTurnMatcher, sort_by_urgency
from src.core.validators import validate_container
from src.config.settings import Settings
from src.models.invoice import AgingBucket
from src.models.schema import ActivityType, ChargeType, InvoiceStatus, MatchType, PaymentMethod
from src.models.utils import days_past_last_free_day
from tests.test_fixtures import FixedClock, create_container, create_export, create_import


class TestBillingWorkflow:
    """Container intake through payment and aging."""

    @pytest.fixture
    def rules(self, tmp_path):
        settings = Settings(_env_file=None, business_rules_json=tmp_path / "none.json", tax_rate="0.05")
        return RuleLoader.load_default(settings)

    @pytest.fixture
    def clock(self):
        return FixedClock(datetime(2024, 3, 20, 16, 0, tzinfo=timezone.utc))

    def test_hazmat_import_end_to_end(self, rules, clock):
        container = create_container(is_hazmat=True, hazmat_class="3", un_number="UN1203", weight_lbs=46000)
        validate_container(container, rules.weight).raise_for_error()

        calculator = ChargeCalculator(rules)
        days_past_lfd = days_past_last_free_day(date(2024, 3, 12), date(2024, 3, 14))
        quote = calculator.quote(
            container,
            miles=Decimal("42"),
            per_diem_days=8,
            days_past_lfd=days_past_lfd,
            detention_minutes=[200],
            activity=ActivityType.LIVE_UNLOAD,
        )

        ledger = InvoiceLedger(rules.billing, clock=clock)
        invoice = ledger.create_invoice("CUST-42")
        ledger.add_line_items(invoice, quote.to_line_items(container.container_number))

        # line haul 150.00 (minimum), fuel 22.50, hazmat 150.00, overweight 100.00,
        # demurrage 2 days @100, per diem 3 days @35, detention 65 min @75/h
        assert invoice.subtotal == Decimal("808.75")
        assert invoice.tax_amount == Decimal("40.44")
        assert invoice.total_amount == Decimal("849.19")

        ledger.submit(invoice)
        ledger.send(invoice)
        with pytest.raises(InvalidStateError):
            ledger.add_line_item(invoice, ChargeType.OTHER, "Late fee", 1, 1)

        ledger.record_payment(invoice, "500.00", PaymentMethod.CHECK, "CHK-1001")
        assert invoice.status is InvoiceStatus.PARTIAL

        clock.advance(days=40)
        ledger.mark_overdue(invoice)
        report = build_aging_report([invoice], as_of=clock.now)
        assert report.totals[AgingBucket.DAYS_1_30] == Decimal("349.19")

        ledger.record_payment(invoice, "349.19", PaymentMethod.WIRE, "WIRE-7")
        assert invoice.status is InvoiceStatus.PAID
        assert invoice.balance_due == Decimal("0")
        assert build_aging_report([invoice], as_of=clock.now).rows == []

    def test_street_turn_planning(self, rules):
        matcher = StreetTurnMatcher(rules.street_turn)
        imports = [
            create_import("IMP-1", terminal="APM", last_free_day=date(2024, 3, 22)),
            create_import("IMP-2", terminal="LBCT", last_free_day=date(2024, 3, 21)),
        ]
        exports = [create_export("EXP-1", terminal="APM")]

        candidates = sort_by_urgency(matcher.find_matches(imports, exports))
        assert [(c.import_reference, c.match_type) for c in candidates] == [
            ("IMP-2", MatchType.DIFFERENT_TERMINAL),
            ("IMP-1", MatchType.SAME_TERMINAL),
        ]
        assert sum(c.estimated_savings for c in candidates) == Decimal("350.00")
