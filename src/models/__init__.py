"""Data models for the drayage rules engine."""

from src.models.schema import (
    ActivityType,
    BillingRules,
    BusinessRules,
    ChargeType,
    ContainerSize,
    ContainerType,
    CustomsStatus,
    DetentionConfig,
    InvoiceStatus,
    MatchType,
    PaymentMethod,
    PaymentTerms,
    StreetTurnRules,
    TierRate,
    WeightRules,
)
from src.models.records import (
    ContainerRecord,
    ExportCandidate,
    ImportCandidate,
    ShipmentDates,
    StreetTurnCandidate,
)
from src.models.invoice import (
    AgingBucket,
    AgingRow,
    AgingSummary,
    Invoice,
    InvoiceLineItem,
    Payment,
)

__all__ = [
    # Rule configuration
    "ActivityType",
    "BillingRules",
    "BusinessRules",
    "ChargeType",
    "ContainerSize",
    "ContainerType",
    "CustomsStatus",
    "DetentionConfig",
    "InvoiceStatus",
    "MatchType",
    "PaymentMethod",
    "PaymentTerms",
    "StreetTurnRules",
    "TierRate",
    "WeightRules",
    # Operational records
    "ContainerRecord",
    "ExportCandidate",
    "ImportCandidate",
    "ShipmentDates",
    "StreetTurnCandidate",
    # Billing
    "AgingBucket",
    "AgingRow",
    "AgingSummary",
    "Invoice",
    "InvoiceLineItem",
    "Payment",
]
