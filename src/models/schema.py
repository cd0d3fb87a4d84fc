"""Drayage business-rule schema - enums and configuration models for the rules engine."""

from decimal import Decimal
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class ContainerSize(str, Enum):
    """Nominal container length in feet.

    Tier schedules for per-diem and demurrage are keyed by size.
    """
    TWENTY = "20"
    FORTY = "40"
    FORTY_FIVE = "45"


class ContainerType(str, Enum):
    """Equipment type of a container."""
    DRY = "DRY"
    REEFER = "REEFER"
    HIGH_CUBE = "HIGH_CUBE"
    OPEN_TOP = "OPEN_TOP"
    FLAT_RACK = "FLAT_RACK"
    TANK = "TANK"


class CustomsStatus(str, Enum):
    """Customs clearance status of an import container."""
    PENDING = "PENDING"
    HOLD = "HOLD"
    RELEASED = "RELEASED"


class ChargeType(str, Enum):
    """Closed set of charge categories that can appear on an invoice line.

    Attributes:
        LINE_HAUL: Base move charge (per mile, subject to a minimum)
        FUEL_SURCHARGE: Percentage of line haul
        DETENTION: Carrier equipment held beyond free time (hourly, capped)
        DEMURRAGE: Terminal/steamship line storage past the last free day (tiered)
        PER_DIEM: Drayage company's own daily equipment charge (tiered)
        CHASSIS: Chassis rental
        STORAGE: Yard storage
        REDELIVERY: Second delivery attempt
        DRY_RUN: Truck dispatched but load not available
        WAITING: Driver waiting time
        OVERWEIGHT: Overweight permit/handling fee
        HAZMAT: Hazardous materials fee
        REEFER: Refrigerated container fee
        PREPULL: Pre-pull from terminal to yard
        OTHER: Anything not covered above
    """
    LINE_HAUL = "LINE_HAUL"
    FUEL_SURCHARGE = "FUEL_SURCHARGE"
    DETENTION = "DETENTION"
    DEMURRAGE = "DEMURRAGE"
    PER_DIEM = "PER_DIEM"
    CHASSIS = "CHASSIS"
    STORAGE = "STORAGE"
    REDELIVERY = "REDELIVERY"
    DRY_RUN = "DRY_RUN"
    WAITING = "WAITING"
    OVERWEIGHT = "OVERWEIGHT"
    HAZMAT = "HAZMAT"
    REEFER = "REEFER"
    PREPULL = "PREPULL"
    OTHER = "OTHER"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle states. PAID and VOID are terminal."""
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    SENT = "SENT"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    VOID = "VOID"


class PaymentMethod(str, Enum):
    CHECK = "CHECK"
    ACH = "ACH"
    WIRE = "WIRE"
    CREDIT_CARD = "CREDIT_CARD"
    CASH = "CASH"
    OTHER = "OTHER"


class PaymentTerms(str, Enum):
    """Invoice payment terms; the value's day count drives the due date."""
    DUE_ON_RECEIPT = "DUE_ON_RECEIPT"
    NET15 = "NET15"
    NET30 = "NET30"
    NET45 = "NET45"
    NET60 = "NET60"

    @property
    def days(self) -> int:
        if self is PaymentTerms.DUE_ON_RECEIPT:
            return 0
        return int(self.value[3:])


class MatchType(str, Enum):
    """Whether a street turn keeps both legs at one terminal."""
    SAME_TERMINAL = "SAME_TERMINAL"
    DIFFERENT_TERMINAL = "DIFFERENT_TERMINAL"


class ActivityType(str, Enum):
    """Stop activity, used to pick the free-time allowance for detention."""
    LIVE_LOAD = "LIVE_LOAD"
    LIVE_UNLOAD = "LIVE_UNLOAD"
    DROP_HOOK = "DROP_HOOK"
    TERMINAL_GATE = "TERMINAL_GATE"
    OTHER = "OTHER"


class TierRate(BaseModel):
    """One tier of a day-indexed rate schedule.

    Attributes:
        from_day: First day billed at this rate (inclusive, 1-based)
        to_day: Last day billed at this rate (inclusive); 0 means unbounded
        rate_per_day: Charge for each day that falls inside the tier
    """
    from_day: int = Field(ge=1, description="First day of the tier (inclusive)")
    to_day: int = Field(ge=0, description="Last day of the tier (inclusive), 0 = unbounded")
    rate_per_day: Decimal = Field(ge=0, description="Rate per day in this tier")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {"from_day": 6, "to_day": 10, "rate_per_day": "25.00"}
        },
    )

    @property
    def is_unbounded(self) -> bool:
        return self.to_day == 0


def _tiers(*rows) -> List[TierRate]:
    return [
        TierRate(from_day=from_day, to_day=to_day, rate_per_day=Decimal(rate))
        for from_day, to_day, rate in rows
    ]


DEFAULT_PER_DIEM_TIERS: Dict[ContainerSize, List[TierRate]] = {
    ContainerSize.TWENTY: _tiers((6, 10, "25.00"), (11, 20, "35.00"), (21, 0, "50.00")),
    ContainerSize.FORTY: _tiers((6, 10, "35.00"), (11, 20, "50.00"), (21, 0, "75.00")),
    ContainerSize.FORTY_FIVE: _tiers((6, 10, "40.00"), (11, 20, "60.00"), (21, 0, "85.00")),
}

DEFAULT_DEMURRAGE_TIERS: Dict[ContainerSize, List[TierRate]] = {
    ContainerSize.TWENTY: _tiers(
        (1, 5, "75.00"), (6, 10, "150.00"), (11, 20, "300.00"), (21, 0, "500.00")
    ),
    ContainerSize.FORTY: _tiers(
        (1, 5, "100.00"), (6, 10, "200.00"), (11, 20, "400.00"), (21, 0, "750.00")
    ),
    ContainerSize.FORTY_FIVE: _tiers(
        (1, 5, "125.00"), (6, 10, "250.00"), (11, 20, "500.00"), (21, 0, "1000.00")
    ),
}


def _copy_tiers(table: Dict[ContainerSize, List[TierRate]]) -> Dict[ContainerSize, List[TierRate]]:
    """Fresh per-size lists; TierRate itself is frozen."""
    return {size: list(tiers) for size, tiers in table.items()}


class WeightRules(BaseModel):
    """Weight limits in pounds."""
    max_gross_weight_lbs: int = Field(default=67200, gt=0, description="Maximum legal gross weight")
    overweight_threshold_lbs: int = Field(default=44000, gt=0, description="Weight above which an overweight permit is required")
    tare_weight_20ft_lbs: int = Field(default=4850)
    tare_weight_40ft_lbs: int = Field(default=8400)
    tare_weight_45ft_lbs: int = Field(default=10200)
    max_payload_lbs: int = Field(default=58000)


class DistanceRules(BaseModel):
    """Speed and dwell assumptions, carried for collaborators that plan routes."""
    average_speed_mph: float = Field(default=45.0)
    drayage_average_speed_mph: float = Field(default=35.0)
    highway_speed_mph: float = Field(default=55.0)
    terminal_dwell_minutes: int = Field(default=30)
    warehouse_dwell_minutes: int = Field(default=45)


class TimeRules(BaseModel):
    """Appointment windows and free-time allowances (minutes unless noted)."""
    min_appointment_advance_hours: int = Field(default=2, ge=0)
    appointment_window_minutes: int = Field(default=30)
    default_free_time_minutes: int = Field(default=30, ge=0)
    live_load_free_time_minutes: int = Field(default=120, ge=0)
    live_unload_free_time_minutes: int = Field(default=120, ge=0)
    drop_hook_free_time_minutes: int = Field(default=30, ge=0)
    terminal_free_time_minutes: int = Field(default=60, ge=0)

    def free_time_for(self, activity: ActivityType) -> int:
        """Free time allowance for a stop activity.

        Args:
            activity: Stop activity type

        Returns:
            Free time in minutes; unknown activities fall back to the default
        """
        allowances = {
            ActivityType.LIVE_LOAD: self.live_load_free_time_minutes,
            ActivityType.LIVE_UNLOAD: self.live_unload_free_time_minutes,
            ActivityType.DROP_HOOK: self.drop_hook_free_time_minutes,
            ActivityType.TERMINAL_GATE: self.terminal_free_time_minutes,
        }
        return allowances.get(activity, self.default_free_time_minutes)


class RateRules(BaseModel):
    """Line-haul and accessorial pricing."""
    base_rate_per_mile: Decimal = Field(default=Decimal("3.50"), ge=0)
    minimum_charge: Decimal = Field(default=Decimal("150.00"), ge=0)
    fuel_surcharge_percent: Decimal = Field(default=Decimal("15.0"), ge=0)
    hazmat_charge: Decimal = Field(default=Decimal("150.00"), ge=0)
    overweight_charge: Decimal = Field(default=Decimal("100.00"), ge=0)
    reefer_charge: Decimal = Field(default=Decimal("75.00"), ge=0)


class DetentionConfig(BaseModel):
    """Detention (equipment dwell) charge configuration.

    Attributes:
        free_time_minutes: Free time before detention starts
        grace_period_minutes: Extra minutes granted on top of free time
        rate_per_hour: Hourly detention rate, billed proportionally
        max_daily_charge: Cap applied to a single day's detention charge
    """
    free_time_minutes: int = Field(default=120, ge=0)
    grace_period_minutes: int = Field(default=15, ge=0)
    rate_per_hour: Decimal = Field(default=Decimal("75.00"), ge=0)
    max_daily_charge: Decimal = Field(default=Decimal("600.00"), ge=0)

    model_config = ConfigDict(frozen=True)


class PerDiemRules(BaseModel):
    """Per-diem (own equipment) tiers by container size."""
    free_days: int = Field(default=5, ge=0)
    rates: Dict[ContainerSize, List[TierRate]] = Field(
        default_factory=lambda: _copy_tiers(DEFAULT_PER_DIEM_TIERS)
    )


class DemurrageRules(BaseModel):
    """Demurrage (terminal storage past LFD) tiers by container size."""
    free_days: int = Field(default=0, ge=0)
    rates: Dict[ContainerSize, List[TierRate]] = Field(
        default_factory=lambda: _copy_tiers(DEFAULT_DEMURRAGE_TIERS)
    )


class BillingRules(BaseModel):
    """Invoice ledger settings."""
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=1, description="Tax rate as a fraction (0.0825 = 8.25%)")
    allow_overpayment: bool = Field(default=False)
    payment_terms: PaymentTerms = Field(default=PaymentTerms.NET30)
    currency: str = Field(default="USD")


class StreetTurnRules(BaseModel):
    """Street-turn matching settings.

    Same-terminal matches avoid both the empty return and the empty pickup, so
    they are credited with a higher flat saving than cross-terminal matches.
    """
    same_terminal_savings: Decimal = Field(default=Decimal("200.00"), ge=0)
    different_terminal_savings: Decimal = Field(default=Decimal("150.00"), ge=0)
    require_type_match: bool = Field(default=False)


class BusinessRules(BaseModel):
    """Complete configuration consumed by the rules engine.

    Built once at startup (``BusinessRules.default()`` or ``RuleLoader``) and
    passed explicitly to the calculators, the ledger and the matcher.
    """
    weight: WeightRules = Field(default_factory=WeightRules)
    distance: DistanceRules = Field(default_factory=DistanceRules)
    time: TimeRules = Field(default_factory=TimeRules)
    rates: RateRules = Field(default_factory=RateRules)
    detention: DetentionConfig = Field(default_factory=DetentionConfig)
    per_diem: PerDiemRules = Field(default_factory=PerDiemRules)
    demurrage: DemurrageRules = Field(default_factory=DemurrageRules)
    billing: BillingRules = Field(default_factory=BillingRules)
    street_turn: StreetTurnRules = Field(default_factory=StreetTurnRules)
    version: str = Field(default="default", description="Rule set version label")

    @classmethod
    def default(cls) -> "BusinessRules":
        """Rule set with the platform's standard defaults."""
        return cls()
