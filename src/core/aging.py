"""Accounts-receivable aging of open invoices."""

from datetime import date, datetime
from typing import Iterable, Union

from src.config.logging_config import get_logger
from src.models.invoice import AgingBucket, AgingRow, AgingSummary, Invoice
from src.models.schema import InvoiceStatus
from src.models.utils import ZERO, sum_money

logger = get_logger(__name__)

EXCLUDED_STATUSES = frozenset({InvoiceStatus.DRAFT, InvoiceStatus.VOID, InvoiceStatus.PAID})


def aging_bucket(days_past_due: int) -> AgingBucket:
    if days_past_due <= 0:
        return AgingBucket.CURRENT
    if days_past_due <= 30:
        return AgingBucket.DAYS_1_30
    if days_past_due <= 60:
        return AgingBucket.DAYS_31_60
    if days_past_due <= 90:
        return AgingBucket.DAYS_61_90
    return AgingBucket.OVER_90


def build_aging_report(invoices: Iterable[Invoice], as_of: Union[date, datetime]) -> AgingSummary:
    """Bucket open receivables by days past due.

    Invoices that were never issued (DRAFT), are settled (PAID) or cancelled
    (VOID), or carry no balance are left out.

    Args:
        invoices: Invoices to age
        as_of: Reporting date

    Returns:
        AgingSummary with one row per open invoice and per-bucket totals
    """
    if isinstance(as_of, datetime):
        as_of = as_of.date()

    rows = []
    for invoice in invoices:
        if invoice.status in EXCLUDED_STATUSES or invoice.balance_due <= ZERO:
            continue
        days_past_due = (as_of - invoice.due_date).days
        rows.append(AgingRow(
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            customer_id=invoice.customer_id,
            due_date=invoice.due_date,
            days_past_due=days_past_due,
            bucket=aging_bucket(days_past_due),
            balance_due=invoice.balance_due,
        ))

    rows.sort(key=lambda row: row.days_past_due, reverse=True)
    totals = {
        bucket: sum_money(row.balance_due for row in rows if row.bucket is bucket)
        for bucket in AgingBucket
    }

    summary = AgingSummary(
        as_of=as_of,
        rows=rows,
        totals=totals,
        total_outstanding=sum_money(row.balance_due for row in rows),
    )
    logger.info(f"Aging as of {as_of}: {len(rows)} open invoice(s), {summary.total_outstanding} outstanding")
    return summary
