"""Invoice, line item and payment models.

These are plain data holders. All arithmetic and every status change goes
through ``src.core.ledger.InvoiceLedger`` so the ledger invariants are
re-established after each mutation.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from src.models.schema import ChargeType, InvoiceStatus, PaymentMethod, PaymentTerms
from src.models.utils import ZERO

TERMINAL_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.VOID})


class InvoiceLineItem(BaseModel):
    """A single charge on an invoice.

    For ordinary items ``amount == round2(quantity * unit_price)``. Items built
    from the detention or tiered calculators are flagged ``is_flat``: their
    amount is the (rounded) calculator output and quantity/unit_price only
    describe it.

    Attributes:
        id: Line item identifier
        charge_type: Charge category
        description: Human-readable description
        quantity: Billed quantity (miles, hours, days, each)
        unit_price: Price per unit
        amount: Line amount in invoice currency, rounded to cents
        is_flat: True when amount is a calculator output, not quantity * unit_price
        container_number: Container the charge relates to (optional)
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    charge_type: ChargeType
    description: str
    quantity: Decimal = Field(ge=0)
    unit_price: Decimal = Field(ge=0)
    amount: Decimal = Field(ge=0)
    is_flat: bool = False
    container_number: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Payment(BaseModel):
    """A payment received against an invoice. Immutable once recorded."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    invoice_id: uuid.UUID
    amount: Decimal = Field(gt=0)
    method: PaymentMethod
    reference_number: str = ""
    payment_date: date

    model_config = ConfigDict(frozen=True)


class Invoice(BaseModel):
    """Customer invoice with derived totals.

    Attributes:
        subtotal: Sum of line item amounts
        tax_rate: Tax rate as a fraction
        tax_amount: round2(subtotal * tax_rate)
        total_amount: subtotal + tax_amount
        paid_amount: Sum of payment amounts
        balance_due: total_amount - paid_amount (negative only when overpaid
            and overpayment is allowed)
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    invoice_number: str
    customer_id: str
    status: InvoiceStatus = InvoiceStatus.DRAFT

    invoice_date: date
    due_date: date
    sent_date: Optional[datetime] = None
    paid_date: Optional[datetime] = None
    void_reason: Optional[str] = None

    payment_terms: PaymentTerms = PaymentTerms.NET30
    currency: str = "USD"

    subtotal: Decimal = ZERO
    tax_rate: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total_amount: Decimal = ZERO
    paid_amount: Decimal = ZERO
    balance_due: Decimal = ZERO

    line_items: List[InvoiceLineItem] = Field(default_factory=list)
    payments: List[Payment] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def overpaid_amount(self) -> Decimal:
        """Credit carried by the invoice when payments exceed the total."""
        return max(-self.balance_due, ZERO)

    def is_overdue(self, as_of: Union[date, datetime]) -> bool:
        """Whether the invoice is past due as of the given moment.

        Read-only projection: the stored status is never changed here. An
        external scheduled job persists OVERDUE through the ledger.
        """
        if self.status in TERMINAL_STATUSES:
            return False
        if isinstance(as_of, datetime):
            as_of = as_of.date()
        return as_of > self.due_date


class AgingBucket(str, Enum):
    """Accounts-receivable aging buckets by days past due."""
    CURRENT = "current"
    DAYS_1_30 = "1-30"
    DAYS_31_60 = "31-60"
    DAYS_61_90 = "61-90"
    OVER_90 = "90+"


class AgingRow(BaseModel):
    """One open invoice in an aging report."""
    invoice_id: uuid.UUID
    invoice_number: str
    customer_id: str
    due_date: date
    days_past_due: int
    bucket: AgingBucket
    balance_due: Decimal


class AgingSummary(BaseModel):
    """Open balances grouped by aging bucket.

    Attributes:
        as_of: Date the report was computed for
        rows: Open invoices, most overdue first
        totals: Bucket -> summed balance (every bucket present)
        total_outstanding: Sum of all open balances
    """
    as_of: date
    rows: List[AgingRow] = Field(default_factory=list)
    totals: Dict[AgingBucket, Decimal] = Field(default_factory=dict)
    total_outstanding: Decimal = ZERO
