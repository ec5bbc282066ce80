import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Tuple

from textile_ledger.config import settings
from textile_ledger.models.ledger_entry import LedgerEntry, LedgerTransaction
from textile_ledger.repositories import entry_repo
from textile_ledger.schemas.common import PaginationMeta, resolve_pagination
from textile_ledger.schemas.entry import (
    EntryCreateRequest,
    EntryFilters,
    EntryListResponse,
    EntryPaymentRequest,
    EntryResponse
)
from textile_ledger.services.summary_service import calculate_summary
from textile_ledger.utils.bill_status import (
    calculate_remaining_amount,
    cancel_bill_status,
    next_bill_status,
    to_money
)
from textile_ledger.utils.constants import LedgerEntryType, LedgerEntryStatus
from textile_ledger.utils.exceptions import (
    BusinessRuleError,
    ConflictingKhataTagError,
    EntryNotFoundError,
    PaymentExceedsRemainingError
)
from textile_ledger.utils.khata_tags import format_khata_tag, has_khata_tag, khata_tag_ids

logger = logging.getLogger(__name__)


def _tag_reference(reference: str, khata_id: int) -> str:
    if has_khata_tag(reference, khata_id):
        return reference
    tag = format_khata_tag(khata_id)
    return f"{reference} ({tag})" if reference else tag


def _tag_notes(notes: str, khata_id: int) -> str:
    if has_khata_tag(notes, khata_id):
        return notes
    # Kept apart from the user's text so Vendor:/Customer: extraction still works
    tag = f"[System: {format_khata_tag(khata_id)}]"
    return f"{notes}\n\n{tag}" if notes else tag


def _prefix_party(notes: str, prefix: str, name: str) -> str:
    line = f"{prefix}: {name.strip()}"
    return f"{line}\n---\n{notes}" if notes else line


def create_entry(db: Session, request: EntryCreateRequest) -> LedgerEntry:
    """
    Create a ledger entry scoped to a khata.

    The khata is written both to the khata_id column and as a khata:<id> tag
    in reference and notes, so tag-based readers keep seeing the entry.
    Remaining amount starts at the full amount.
    """
    khata_id = request.khata_id or settings.DEFAULT_KHATA_ID
    reference = request.reference.strip() if request.reference else None
    notes = request.notes.strip() if request.notes else None

    foreign_tags = (khata_tag_ids(reference) | khata_tag_ids(notes)) - {khata_id}
    if foreign_tags:
        raise ConflictingKhataTagError(
            f"Entry for khata {khata_id} cannot carry "
            + ", ".join(format_khata_tag(tag) for tag in sorted(foreign_tags))
        )

    reference = _tag_reference(reference, khata_id)
    notes = _tag_notes(notes, khata_id)

    vendor_id = None
    customer_id = None
    if request.entry_type == LedgerEntryType.PAYABLE:
        if request.vendor_id:
            vendor_id = request.vendor_id
        else:
            notes = _prefix_party(notes, "Vendor", request.vendor_name)
    elif request.entry_type == LedgerEntryType.RECEIVABLE:
        if request.customer_id:
            customer_id = request.customer_id
        else:
            notes = _prefix_party(notes, "Customer", request.customer_name)

    fields = dict(
        entry_type=request.entry_type,
        description=request.description,
        amount=request.amount,
        remaining_amount=request.amount,
        status=LedgerEntryStatus.PENDING,
        reference=reference,
        notes=notes,
        khata_id=khata_id,
        due_date=request.due_date,
        vendor_id=vendor_id,
        customer_id=customer_id
    )
    if request.entry_date:
        fields["entry_date"] = request.entry_date

    try:
        entry = entry_repo.create_entry(db, **fields)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(entry)
    logger.info("Created %s entry %s in khata %s", entry.entry_type, entry.id, khata_id)
    return entry


def get_entry(db: Session, entry_id: int) -> LedgerEntry:
    entry = entry_repo.get_entry_by_id(db, entry_id)
    if not entry:
        raise EntryNotFoundError(f"Ledger entry {entry_id} not found")
    return entry


def list_entries(
    db: Session,
    filters: EntryFilters,
    page: int = 1,
    limit: int = None,
    skip: int = None,
    order_by: str = "entry_date",
    order: str = "desc"
) -> EntryListResponse:
    offset, limit = resolve_pagination(page, limit, skip)
    entries, total = entry_repo.list_entries(db, filters, offset=offset, limit=limit, order_by=order_by, order=order)

    logger.debug("Listed %d of %d entries (offset=%d)", len(entries), total, offset)
    return EntryListResponse(
        entries=[EntryResponse.model_validate(entry) for entry in entries],
        pagination=PaginationMeta.build(total=total, page=offset // limit + 1, limit=limit),
        summary=calculate_summary(entries)
    )


def record_entry_payment(db: Session, entry_id: int, request: EntryPaymentRequest) -> Tuple[LedgerTransaction, LedgerEntry]:
    """
    Record a payment against an entry.

    The payment row and the entry's new remaining amount and status are
    committed together; a payment larger than what is outstanding is rejected.
    """
    entry = entry_repo.get_entry_with_lock(db, entry_id)
    if not entry:
        raise EntryNotFoundError(f"Ledger entry {entry_id} not found")
    if entry.entry_type == LedgerEntryType.KHATA:
        raise BusinessRuleError("Cannot record a payment against a khata")

    amount = to_money(request.amount)
    remaining = to_money(entry.remaining_amount)
    new_remaining = calculate_remaining_amount(remaining, amount)
    new_status = next_bill_status(entry.status, entry.amount, to_money(entry.amount) - new_remaining)

    if amount > remaining:
        raise PaymentExceedsRemainingError(
            f"Transaction amount {amount} exceeds the remaining amount {remaining}",
            remaining_amount=remaining
        )

    try:
        transaction = entry_repo.create_entry_transaction(
            db,
            ledger_entry_id=entry.id,
            amount=amount,
            payment_mode=request.payment_mode,
            transaction_date=request.transaction_date,
            cheque_number=request.cheque_number.strip() if request.cheque_number else None,
            bank_name=request.bank_name.strip() if request.bank_name else None,
            reference_number=request.reference_number.strip() if request.reference_number else None,
            notes=request.notes.strip() if request.notes else None
        )
        entry.remaining_amount = new_remaining
        entry.status = new_status
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(transaction)
    db.refresh(entry)
    logger.info("Recorded payment of %s on entry %s, status now %s", amount, entry.id, entry.status)
    return transaction, entry


def cancel_entry(db: Session, entry_id: int) -> LedgerEntry:
    entry = entry_repo.get_entry_with_lock(db, entry_id)
    if not entry:
        raise EntryNotFoundError(f"Ledger entry {entry_id} not found")

    entry.status = cancel_bill_status(entry.status)
    db.commit()
    db.refresh(entry)
    return entry
