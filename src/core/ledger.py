"""Invoice ledger: line-item and payment arithmetic plus the invoice state machine.

The ledger is the only code path that mutates an ``Invoice``. After every
operation it re-derives the totals so that

    subtotal     == sum(line_items.amount)
    tax_amount   == round2(subtotal * tax_rate)
    total_amount == subtotal + tax_amount
    paid_amount  == sum(payments.amount)
    balance_due  == total_amount - paid_amount

The ledger holds no lock. Callers must serialize mutations of one invoice
(row lock or optimistic version check in the store) to avoid lost updates.
"""

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Dict, FrozenSet, Iterable, Optional

from src.config.logging_config import get_logger
from src.config.messages import (
    ERROR_DERIVED_STATUS,
    ERROR_INVALID_TRANSITION,
    ERROR_LINE_ITEM_NOT_FOUND,
    ERROR_LINE_ITEMS_LOCKED,
    ERROR_NEGATIVE_AMOUNT,
    ERROR_NOT_OVERDUE,
    ERROR_PAYMENT_EXCEEDS_BALANCE,
    ERROR_PAYMENT_NOT_ALLOWED,
    ERROR_PAYMENT_NOT_POSITIVE,
    ERROR_SEND_ZERO_TOTAL,
    ERROR_SUB_CENT_PAYMENT,
    ERROR_SUBMIT_WITHOUT_LINE_ITEMS,
)
from src.core.exceptions import InvalidStateError, LineItemNotFoundError, RangeValidationError
from src.models.invoice import Invoice, InvoiceLineItem, Payment
from src.models.schema import BillingRules, ChargeType, InvoiceStatus, PaymentMethod, PaymentTerms
from src.models.utils import TWO_PLACES, ZERO, Number, round_money, sum_money, to_decimal

logger = get_logger(__name__)

S = InvoiceStatus

ALLOWED_TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    S.DRAFT: frozenset({S.PENDING, S.VOID}),
    S.PENDING: frozenset({S.SENT, S.VOID}),
    S.SENT: frozenset({S.PARTIAL, S.PAID, S.OVERDUE, S.VOID}),
    S.PARTIAL: frozenset({S.PAID, S.OVERDUE, S.VOID}),
    S.OVERDUE: frozenset({S.PARTIAL, S.PAID, S.VOID}),
    S.PAID: frozenset(),
    S.VOID: frozenset(),
}

EDITABLE_STATUSES = frozenset({S.DRAFT, S.PENDING})
PAYABLE_STATUSES = frozenset({S.SENT, S.PARTIAL, S.OVERDUE})

# Statuses only the ledger itself may set, keyed to the operation that sets them
DERIVED_STATUSES: Dict[InvoiceStatus, str] = {
    S.PARTIAL: "record_payment",
    S.PAID: "record_payment",
    S.OVERDUE: "mark_overdue",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def recompute_totals(invoice: Invoice) -> Invoice:
    """Re-derive every total from the invoice's line items and payments."""
    invoice.subtotal = sum_money(item.amount for item in invoice.line_items)
    invoice.tax_amount = round_money(invoice.subtotal * invoice.tax_rate)
    invoice.total_amount = invoice.subtotal + invoice.tax_amount
    invoice.paid_amount = sum_money(payment.amount for payment in invoice.payments)
    invoice.balance_due = invoice.total_amount - invoice.paid_amount
    return invoice


def can_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


class InvoiceLedger:
    """Owns invoice arithmetic and lifecycle.

    States: DRAFT -> PENDING -> SENT -> {PARTIAL -> PAID, OVERDUE}; any
    non-terminal state -> VOID. PAID and VOID are terminal.

    Args:
        rules: Billing rules (tax rate, overpayment allowance, default terms)
        clock: Returns the current UTC time; injectable for tests
    """

    def __init__(self, rules: BillingRules, clock: Optional[Callable[[], datetime]] = None):
        self.rules = rules
        self.clock = clock or _utcnow

    # ------------------------------------------------------------------ create

    def create_invoice(
        self,
        customer_id: str,
        invoice_number: Optional[str] = None,
        invoice_date: Optional[date] = None,
        payment_terms: Optional[PaymentTerms] = None,
        tax_rate: Optional[Number] = None,
    ) -> Invoice:
        """Open a new DRAFT invoice; the due date follows from the payment terms."""
        invoice_date = invoice_date or self.clock().date()
        payment_terms = payment_terms or self.rules.payment_terms
        tax_rate = self.rules.tax_rate if tax_rate is None else to_decimal(tax_rate)
        if tax_rate < 0:
            raise RangeValidationError(
                ERROR_NEGATIVE_AMOUNT.format(field="tax_rate", value=tax_rate),
                field="tax_rate", value=tax_rate, rule="invoice.tax_rate",
            )

        invoice = Invoice(
            invoice_number=invoice_number or f"INV-{uuid.uuid4().hex[:8].upper()}",
            customer_id=customer_id,
            invoice_date=invoice_date,
            due_date=invoice_date + timedelta(days=payment_terms.days),
            payment_terms=payment_terms,
            currency=self.rules.currency,
            tax_rate=tax_rate,
        )
        logger.info(f"Created invoice {invoice.invoice_number} for customer {customer_id}")
        return recompute_totals(invoice)

    # -------------------------------------------------------------- line items

    def _require_editable(self, invoice: Invoice) -> None:
        if invoice.status not in EDITABLE_STATUSES:
            raise InvalidStateError(
                ERROR_LINE_ITEMS_LOCKED.format(status=invoice.status.value),
                current_state=invoice.status.value,
            )

    @staticmethod
    def _require_non_negative(field: str, value: Decimal) -> None:
        if value < 0:
            raise RangeValidationError(
                ERROR_NEGATIVE_AMOUNT.format(field=field, value=value),
                field=field, value=value, rule=f"line_item.{field}",
            )

    def add_line_item(
        self,
        invoice: Invoice,
        charge_type: ChargeType,
        description: str,
        quantity: Number,
        unit_price: Number,
        container_number: Optional[str] = None,
    ) -> Invoice:
        """Add a quantity * unit_price charge; amount is rounded to cents."""
        self._require_editable(invoice)
        quantity = to_decimal(quantity)
        unit_price = to_decimal(unit_price)
        self._require_non_negative("quantity", quantity)
        self._require_non_negative("unit_price", unit_price)

        item = InvoiceLineItem(
            charge_type=charge_type,
            description=description,
            quantity=quantity,
            unit_price=unit_price,
            amount=round_money(quantity * unit_price),
            container_number=container_number,
        )
        invoice.line_items.append(item)
        return recompute_totals(invoice)

    def add_flat_line_item(
        self,
        invoice: Invoice,
        charge_type: ChargeType,
        description: str,
        amount: Number,
        quantity: Number = 1,
        unit_price: Optional[Number] = None,
        container_number: Optional[str] = None,
    ) -> Invoice:
        """Add a calculator-priced charge (detention, tiered per-diem/demurrage).

        ``amount`` is the calculator output; quantity and unit_price only
        describe it.
        """
        self._require_editable(invoice)
        amount = to_decimal(amount)
        quantity = to_decimal(quantity)
        self._require_non_negative("amount", amount)
        self._require_non_negative("quantity", quantity)
        unit_price = amount if unit_price is None else to_decimal(unit_price)
        self._require_non_negative("unit_price", unit_price)

        item = InvoiceLineItem(
            charge_type=charge_type,
            description=description,
            quantity=quantity,
            unit_price=round_money(unit_price),
            amount=round_money(amount),
            is_flat=True,
            container_number=container_number,
        )
        invoice.line_items.append(item)
        return recompute_totals(invoice)

    def add_line_items(self, invoice: Invoice, items: Iterable[InvoiceLineItem]) -> Invoice:
        """Attach prebuilt line items (e.g. ``ChargeBreakdown.to_line_items()``).

        Non-flat items are re-priced from quantity and unit price so the
        line-item invariant holds regardless of how they were built. Flat
        items keep their amount, rounded to cents.
        """
        self._require_editable(invoice)
        for item in items:
            if item.is_flat:
                amount = item.amount
            else:
                amount = item.quantity * item.unit_price
            invoice.line_items.append(item.model_copy(update={"amount": round_money(amount)}))
        return recompute_totals(invoice)

    def remove_line_item(self, invoice: Invoice, line_item_id: uuid.UUID) -> Invoice:
        """Drop a line item by id.

        Raises:
            LineItemNotFoundError: No line item with that id on the invoice
        """
        self._require_editable(invoice)
        remaining = [item for item in invoice.line_items if item.id != line_item_id]
        if len(remaining) == len(invoice.line_items):
            raise LineItemNotFoundError(
                ERROR_LINE_ITEM_NOT_FOUND.format(
                    line_item_id=line_item_id, invoice_number=invoice.invoice_number
                ),
                line_item_id=line_item_id,
                invoice_number=invoice.invoice_number,
            )
        invoice.line_items = remaining
        return recompute_totals(invoice)

    # ------------------------------------------------------------- transitions

    def transition(self, invoice: Invoice, target: InvoiceStatus) -> Invoice:
        """Move an invoice to ``target`` if the state machine allows it.

        PARTIAL and PAID follow from ``record_payment`` and OVERDUE from
        ``mark_overdue``; they cannot be targeted here.

        Raises:
            InvalidStateError: Derived-status targets, or backward, repeated
                or terminal-state moves
        """
        if target in DERIVED_STATUSES:
            raise InvalidStateError(
                ERROR_DERIVED_STATUS.format(target=target.value, operation=DERIVED_STATUSES[target]),
                current_state=invoice.status.value,
                target_state=target.value,
            )
        return self._apply_transition(invoice, target)

    def _apply_transition(self, invoice: Invoice, target: InvoiceStatus) -> Invoice:
        if not can_transition(invoice.status, target):
            raise InvalidStateError(
                ERROR_INVALID_TRANSITION.format(current=invoice.status.value, target=target.value),
                current_state=invoice.status.value,
                target_state=target.value,
            )
        logger.info(f"Invoice {invoice.invoice_number}: {invoice.status.value} -> {target.value}")
        invoice.status = target
        return invoice

    def submit(self, invoice: Invoice) -> Invoice:
        """DRAFT -> PENDING; requires at least one line item."""
        if invoice.status is S.DRAFT and not invoice.line_items:
            raise InvalidStateError(
                ERROR_SUBMIT_WITHOUT_LINE_ITEMS,
                current_state=invoice.status.value,
                target_state=S.PENDING.value,
            )
        return self.transition(invoice, S.PENDING)

    def send(self, invoice: Invoice) -> Invoice:
        """PENDING -> SENT; requires a positive total. Stamps ``sent_date``."""
        if invoice.status is S.PENDING and invoice.total_amount <= 0:
            raise InvalidStateError(
                ERROR_SEND_ZERO_TOTAL,
                current_state=invoice.status.value,
                target_state=S.SENT.value,
            )
        self.transition(invoice, S.SENT)
        invoice.sent_date = self.clock()
        return invoice

    def void(self, invoice: Invoice, reason: str = "") -> Invoice:
        """Void from any non-terminal state; amounts are frozen from here on."""
        self.transition(invoice, S.VOID)
        invoice.void_reason = reason or None
        return invoice

    def mark_overdue(self, invoice: Invoice) -> Invoice:
        """Persist OVERDUE for an invoice past its due date.

        Meant for the scheduled job that sweeps open invoices; reading
        ``Invoice.is_overdue`` never changes status on its own.
        """
        now = self.clock()
        if not invoice.is_overdue(now):
            raise InvalidStateError(
                ERROR_NOT_OVERDUE.format(invoice_number=invoice.invoice_number, due_date=invoice.due_date),
                current_state=invoice.status.value,
                target_state=S.OVERDUE.value,
            )
        return self._apply_transition(invoice, S.OVERDUE)

    # ---------------------------------------------------------------- payments

    def record_payment(
        self,
        invoice: Invoice,
        amount: Number,
        method: PaymentMethod,
        reference_number: str = "",
        payment_date: Optional[date] = None,
    ) -> Payment:
        """Record a payment and settle the invoice status.

        The invoice becomes PAID when nothing is left to pay, otherwise
        PARTIAL.

        Raises:
            InvalidStateError: Invoice is not SENT, PARTIAL or OVERDUE
            RangeValidationError: Non-positive or sub-cent amount, or more
                than the balance due when overpayment is not allowed
        """
        if invoice.status not in PAYABLE_STATUSES:
            raise InvalidStateError(
                ERROR_PAYMENT_NOT_ALLOWED.format(status=invoice.status.value),
                current_state=invoice.status.value,
            )

        amount = to_decimal(amount)
        if amount <= 0:
            raise RangeValidationError(
                ERROR_PAYMENT_NOT_POSITIVE.format(amount=amount),
                field="amount", value=amount, rule="payment.positive",
            )
        if amount != amount.quantize(TWO_PLACES):
            raise RangeValidationError(
                ERROR_SUB_CENT_PAYMENT.format(amount=amount),
                field="amount", value=amount, rule="payment.whole_cents",
            )
        if amount > invoice.balance_due and not self.rules.allow_overpayment:
            raise RangeValidationError(
                ERROR_PAYMENT_EXCEEDS_BALANCE.format(amount=amount, balance=invoice.balance_due),
                field="amount", value=amount, rule="payment.exceeds_balance",
            )

        now = self.clock()
        payment = Payment(
            invoice_id=invoice.id,
            amount=amount,
            method=method,
            reference_number=reference_number,
            payment_date=payment_date or now.date(),
        )
        invoice.payments.append(payment)
        recompute_totals(invoice)

        if invoice.balance_due <= ZERO:
            self._apply_transition(invoice, S.PAID)
            invoice.paid_date = now
        elif invoice.status is not S.PARTIAL:
            self._apply_transition(invoice, S.PARTIAL)

        logger.info(
            f"Payment {amount} ({method.value}) on invoice {invoice.invoice_number}; "
            f"balance {invoice.balance_due}, status {invoice.status.value}"
        )
        return payment
