"""Deterministic drayage charge calculator driven by the configured business rules."""

from decimal import Decimal
from typing import Dict, List, Optional

from src.config.logging_config import get_logger
from src.config.messages import ERROR_SCHEDULE_MISSING_SIZE
from src.core.detention import calculate_detention
from src.core.exceptions import ConfigurationError
from src.core.tiers import tiered_charge, validate_business_rules
from src.core.validators import is_overweight
from src.models.invoice import InvoiceLineItem
from src.models.records import ContainerRecord
from src.models.schema import ActivityType, BusinessRules, ChargeType, ContainerSize, TierRate
from src.models.utils import ZERO, round_money, to_decimal

logger = get_logger(__name__)

HUNDRED = Decimal("100")
FLAT_CHARGE_TYPES = frozenset({ChargeType.DETENTION, ChargeType.DEMURRAGE, ChargeType.PER_DIEM})


class ChargeBreakdown:
    """Result of a charge calculation.

    Container for the charges computed for one move or container, including
    the total, per-charge-type amounts and a detailed breakdown that can be
    turned into invoice line items.

    Attributes:
        components: Charge type -> accumulated (unrounded) amount
        total: Sum of all component amounts (unrounded)
        breakdown: One dictionary per charge, in the order they were added
        currency: Currency code of every amount
    """

    def __init__(self, currency: str = "USD"):
        """Initialize an empty breakdown."""
        self.components: Dict[ChargeType, Decimal] = {}
        self.total: Decimal = ZERO
        self.breakdown: List[Dict] = []
        self.currency = currency

    def add_component(
        self,
        charge_type: ChargeType,
        amount: Decimal,
        description: str,
        quantity: Decimal = Decimal("1"),
        unit_price: Optional[Decimal] = None,
        details: Optional[Dict] = None,
    ):
        """Add a charge to the breakdown.

        Amounts for an existing charge type are accumulated. Zero amounts are
        skipped so that free days or dwell inside free time add no lines.

        Args:
            charge_type: Charge category
            amount: Unrounded amount
            description: Line description
            quantity: Informational quantity (days, hours, miles)
            unit_price: Informational unit price; defaults to ``amount``
            details: Extra data (schedule, billable minutes, rate)
        """
        if amount == 0:
            return

        self.components[charge_type] = self.components.get(charge_type, ZERO) + amount
        self.total += amount
        self.breakdown.append({
            "charge_type": charge_type,
            "description": description,
            "quantity": quantity,
            "unit_price": amount if unit_price is None else unit_price,
            "amount": amount,
            "details": details or {},
        })

    def merge(self, other: "ChargeBreakdown") -> "ChargeBreakdown":
        """Append every charge from ``other`` to this breakdown."""
        for entry in other.breakdown:
            self.add_component(
                charge_type=entry["charge_type"],
                amount=entry["amount"],
                description=entry["description"],
                quantity=entry["quantity"],
                unit_price=entry["unit_price"],
                details=entry["details"],
            )
        return self

    def to_line_items(self, container_number: Optional[str] = None) -> List[InvoiceLineItem]:
        """Convert the breakdown into invoice line items (amounts rounded to cents).

        Detention and tiered charges become flat items whose amount is the
        calculator output; the rest are quantity * unit_price items.
        """
        items = []
        for entry in self.breakdown:
            is_flat = entry["charge_type"] in FLAT_CHARGE_TYPES
            quantity = to_decimal(entry["quantity"])
            unit_price = round_money(entry["unit_price"])
            amount = round_money(entry["amount"]) if is_flat else round_money(quantity * unit_price)
            items.append(InvoiceLineItem(
                charge_type=entry["charge_type"],
                description=entry["description"],
                quantity=quantity,
                unit_price=unit_price,
                amount=amount,
                is_flat=is_flat,
                container_number=container_number,
            ))
        return items

    def to_dict(self) -> Dict:
        """Convert the breakdown to a dictionary with amounts rounded to cents.

        Returns:
            Dictionary with keys:
                - total: Rounded total
                - components: Charge type value -> rounded amount
                - breakdown: List of breakdown dictionaries
                - currency: Currency code
        """
        return {
            "total": round_money(self.total),
            "components": {
                charge_type.value: round_money(amount)
                for charge_type, amount in self.components.items()
            },
            "breakdown": [
                {**entry, "charge_type": entry["charge_type"].value, "amount": round_money(entry["amount"])}
                for entry in self.breakdown
            ],
            "currency": self.currency,
        }


class ChargeCalculator:
    """Turns operational facts into charges using one ``BusinessRules`` set.

    Every tier schedule is validated when the calculator is built, so a
    malformed table fails once at startup instead of mispricing each invoice.
    Inputs are assumed to be pre-validated; only the ``days <= 0`` and
    free-time guards apply here.
    """

    def __init__(self, rules: BusinessRules):
        """
        Initialize calculator.

        Args:
            rules: Business rules to price with

        Raises:
            ConfigurationError: If any tier schedule is malformed
        """
        validate_business_rules(rules)
        self.rules = rules

    def _schedule(self, charge: str, schedules: Dict[ContainerSize, List[TierRate]], size: ContainerSize) -> List[TierRate]:
        schedule = schedules.get(size)
        if schedule is None:
            raise ConfigurationError(
                ERROR_SCHEDULE_MISSING_SIZE.format(charge=charge, size=size.value),
                {"charge": charge, "size": size.value},
            )
        return schedule

    def per_diem(self, size: ContainerSize, days: int) -> ChargeBreakdown:
        """Per-diem for equipment out ``days`` days (free days are built into the tiers)."""
        result = ChargeBreakdown(self.rules.billing.currency)
        schedule = self._schedule("per-diem", self.rules.per_diem.rates, size)
        amount = tiered_charge(days, schedule)
        logger.debug(f"Per-diem {size.value}ft x {days} days = {amount}")

        billable_days = max(days - self.rules.per_diem.free_days, 0)
        result.add_component(
            ChargeType.PER_DIEM,
            amount,
            description=f"Per diem {size.value}ft - {billable_days} billable day(s) of {days}",
            quantity=Decimal(billable_days),
            unit_price=amount / billable_days if billable_days else amount,
            details={"days": days, "free_days": self.rules.per_diem.free_days},
        )
        return result

    def demurrage(self, size: ContainerSize, days_past_lfd: int) -> ChargeBreakdown:
        """Demurrage for ``days_past_lfd`` days beyond the last free day."""
        result = ChargeBreakdown(self.rules.billing.currency)
        schedule = self._schedule("demurrage", self.rules.demurrage.rates, size)
        amount = tiered_charge(days_past_lfd, schedule)
        logger.debug(f"Demurrage {size.value}ft x {days_past_lfd} days = {amount}")

        result.add_component(
            ChargeType.DEMURRAGE,
            amount,
            description=f"Demurrage {size.value}ft - {days_past_lfd} day(s) past LFD",
            quantity=Decimal(max(days_past_lfd, 0)),
            unit_price=amount / days_past_lfd if days_past_lfd > 0 else amount,
            details={"days": days_past_lfd},
        )
        return result

    def detention(
        self,
        actual_minutes: int,
        activity: Optional[ActivityType] = None,
        free_minutes_override: int = 0,
    ) -> ChargeBreakdown:
        """Detention for one day segment of dwell.

        Args:
            actual_minutes: Minutes the equipment was held
            activity: Stop activity; selects the free-time allowance when no
                explicit override is given
            free_minutes_override: Free minutes to use instead of the default
        """
        result = ChargeBreakdown(self.rules.billing.currency)
        if not free_minutes_override and activity is not None:
            free_minutes_override = self.rules.time.free_time_for(activity)

        detention = calculate_detention(actual_minutes, free_minutes_override, self.rules.detention)
        logger.debug(
            f"Detention {actual_minutes} min (free override {free_minutes_override}) "
            f"-> {detention.billable_minutes} billable min, {detention.charge}"
        )

        hours = Decimal(detention.billable_minutes) / 60
        result.add_component(
            ChargeType.DETENTION,
            detention.charge,
            description=f"Detention - {detention.billable_minutes} billable minute(s)",
            quantity=round_money(hours),
            unit_price=self.rules.detention.rate_per_hour,
            details={
                "billable_minutes": detention.billable_minutes,
                "capped": detention.charge == self.rules.detention.max_daily_charge,
            },
        )
        return result

    def line_haul(self, miles: Decimal) -> ChargeBreakdown:
        """Line haul (subject to the minimum charge) plus the fuel surcharge."""
        rates = self.rules.rates
        result = ChargeBreakdown(self.rules.billing.currency)
        miles = to_decimal(miles)

        by_distance = miles * rates.base_rate_per_mile
        if by_distance >= rates.minimum_charge:
            result.add_component(
                ChargeType.LINE_HAUL,
                by_distance,
                description=f"Line haul - {miles} mi",
                quantity=miles,
                unit_price=rates.base_rate_per_mile,
            )
            line_haul = by_distance
        else:
            result.add_component(
                ChargeType.LINE_HAUL,
                rates.minimum_charge,
                description="Line haul - minimum charge",
                details={"miles": miles, "minimum_applied": True},
            )
            line_haul = rates.minimum_charge

        fuel = line_haul * rates.fuel_surcharge_percent / HUNDRED
        result.add_component(
            ChargeType.FUEL_SURCHARGE,
            fuel,
            description=f"Fuel surcharge {rates.fuel_surcharge_percent}%",
            details={"percent": rates.fuel_surcharge_percent},
        )
        return result

    def accessorials(self, container: ContainerRecord) -> ChargeBreakdown:
        """Flat hazmat, overweight and reefer fees for a container."""
        rates = self.rules.rates
        result = ChargeBreakdown(self.rules.billing.currency)

        if container.is_hazmat:
            result.add_component(
                ChargeType.HAZMAT,
                rates.hazmat_charge,
                description=f"Hazmat class {container.hazmat_class} {container.un_number}",
            )
        if container.weight_lbs is not None and is_overweight(container.weight_lbs, self.rules.weight):
            result.add_component(
                ChargeType.OVERWEIGHT,
                rates.overweight_charge,
                description=f"Overweight - {container.weight_lbs} lbs",
            )
        if container.is_reefer:
            result.add_component(
                ChargeType.REEFER,
                rates.reefer_charge,
                description=f"Reefer - setpoint {container.temperature_setpoint_c}°C",
            )
        return result

    def quote(
        self,
        container: ContainerRecord,
        miles: Decimal,
        per_diem_days: int = 0,
        days_past_lfd: int = 0,
        detention_minutes: Optional[List[int]] = None,
        activity: Optional[ActivityType] = None,
    ) -> ChargeBreakdown:
        """All charges for one container move.

        Args:
            container: Container being moved
            miles: Loaded miles for the line haul
            per_diem_days: Days the equipment was out
            days_past_lfd: Days picked up after the last free day
            detention_minutes: Dwell minutes, one entry per day segment
            activity: Stop activity for detention free time
        """
        result = ChargeBreakdown(self.rules.billing.currency)
        result.merge(self.line_haul(miles))
        result.merge(self.accessorials(container))
        result.merge(self.demurrage(container.size, days_past_lfd))
        result.merge(self.per_diem(container.size, per_diem_days))
        for minutes in detention_minutes or []:
            result.merge(self.detention(minutes, activity=activity))

        logger.info(
            f"Quoted {container.container_number}: {len(result.breakdown)} charge(s), "
            f"total {round_money(result.total)} {result.currency}"
        )
        return result
