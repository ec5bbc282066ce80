import logging
from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Iterable

from textile_ledger.models.ledger_entry import LedgerEntry
from textile_ledger.repositories import entry_repo
from textile_ledger.schemas.entry import EntryFilters, SummaryStats, SummaryResponse
from textile_ledger.utils.bill_status import ZERO, to_money
from textile_ledger.utils.constants import LedgerEntryType, LedgerEntryStatus, BillType, PAYMENT_TOLERANCE

logger = logging.getLogger(__name__)

RECENT_TRANSACTION_DAYS = 7

MONEY_FIELDS = (
    "total_receivables", "total_payables", "total_bank_balance",
    "total_inventory_value", "overdue_amount",
)


def _naive(value: datetime):
    if value is not None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


def _is_sale_bill(entry: LedgerEntry) -> bool:
    return BillType.SALE in (entry.reference or "").upper()


def calculate_summary(entries: Iterable[LedgerEntry], now: datetime = None) -> SummaryStats:
    """
    Dashboard statistics over a set of entries.

    Payables and receivables add up what is still outstanding, bank and
    inventory add up the full amount. Bills due before the end of today that
    are neither settled nor cancelled count as overdue.
    """
    now = _naive(now) or datetime.now()
    end_of_today = now.replace(hour=23, minute=59, second=59, microsecond=999999)
    recent_cutoff = end_of_today - timedelta(days=RECENT_TRANSACTION_DAYS)

    totals = {field: ZERO for field in MONEY_FIELDS}
    counts = {
        "overdue_bills": 0, "bills_total": 0, "paid_bills": 0,
        "transactions_total": 0, "recent_transactions": 0,
        "cheques_total": 0, "pending_cheques": 0,
        "inventory_items": 0, "bank_accounts": 0,
    }

    for entry in entries:
        remaining = to_money(entry.remaining_amount)
        amount = to_money(entry.amount)

        if entry.entry_type == LedgerEntryType.PAYABLE:
            totals["total_payables"] += remaining
        elif entry.entry_type == LedgerEntryType.RECEIVABLE:
            totals["total_receivables"] += remaining

        elif entry.entry_type == LedgerEntryType.BILL:
            counts["bills_total"] += 1
            if entry.status in LedgerEntryStatus.SETTLED:
                counts["paid_bills"] += 1

            if _is_sale_bill(entry):
                totals["total_receivables"] += remaining
            else:
                totals["total_payables"] += remaining

            due_date = _naive(entry.due_date)
            if (due_date is not None
                    and due_date < end_of_today
                    and entry.status not in LedgerEntryStatus.SETTLED
                    and entry.status != LedgerEntryStatus.CANCELLED
                    and remaining > PAYMENT_TOLERANCE):
                counts["overdue_bills"] += 1
                totals["overdue_amount"] += remaining

        elif entry.entry_type == LedgerEntryType.TRANSACTION:
            counts["transactions_total"] += 1
            entry_date = _naive(entry.entry_date)
            if entry_date is not None and entry_date >= recent_cutoff:
                counts["recent_transactions"] += 1

        elif entry.entry_type == LedgerEntryType.CHEQUE:
            counts["cheques_total"] += 1
            if entry.status == LedgerEntryStatus.PENDING:
                counts["pending_cheques"] += 1

        elif entry.entry_type == LedgerEntryType.INVENTORY:
            counts["inventory_items"] += 1
            totals["total_inventory_value"] += amount

        elif entry.entry_type == LedgerEntryType.BANK:
            counts["bank_accounts"] += 1
            totals["total_bank_balance"] += amount

    totals = {field: max(ZERO, value) for field, value in totals.items()}
    return SummaryStats(**totals, **counts)


def get_summary(db: Session, filters: EntryFilters) -> SummaryResponse:
    """
    Statistics over every entry matching the filters.

    A database failure is not fatal here: the dashboard gets zeroed stats and
    a partial-data flag instead of an error.
    """
    try:
        entries = entry_repo.get_all_matching(db, filters)
    except SQLAlchemyError:
        logger.exception("Failed to load entries for summary statistics")
        db.rollback()
        return SummaryResponse(
            summary=SummaryStats(),
            partial_data=True,
            message="Summary statistics are unavailable, showing empty values"
        )

    return SummaryResponse(summary=calculate_summary(entries))
