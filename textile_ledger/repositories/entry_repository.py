from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional, Set, Tuple

from textile_ledger.models.ledger_entry import LedgerEntry, LedgerTransaction
from textile_ledger.schemas.entry import EntryFilters
from textile_ledger.utils.constants import LedgerEntryType
from textile_ledger.utils.khata_tags import has_any_khata_tag, khata_tag_pattern

ORDERABLE_COLUMNS = {
    "entry_date": LedgerEntry.entry_date,
    "due_date": LedgerEntry.due_date,
    "amount": LedgerEntry.amount,
    "remaining_amount": LedgerEntry.remaining_amount,
    "created_at": LedgerEntry.created_at,
    "id": LedgerEntry.id,
}


def khata_filter(khata_id: int):
    """
    Predicate matching entries that belong to a khata.

    An entry belongs when its khata_id column is set to the khata, or when its
    reference or notes carry the exact khata:<id> tag (khata:1 does not match khata:10).
    """
    pattern = khata_tag_pattern(khata_id)
    return or_(
        LedgerEntry.khata_id == khata_id,
        LedgerEntry.reference.regexp_match(pattern),
        LedgerEntry.notes.regexp_match(pattern),
    )


def build_filter_clauses(filters: EntryFilters) -> list:
    clauses = []

    if filters.entry_type:
        clauses.append(LedgerEntry.entry_type == filters.entry_type)
    if filters.khata_id is not None:
        clauses.append(khata_filter(filters.khata_id))
    if filters.status:
        clauses.append(LedgerEntry.status == filters.status)
    if filters.start_date:
        clauses.append(LedgerEntry.entry_date >= filters.start_date)
    if filters.end_date:
        clauses.append(LedgerEntry.entry_date <= filters.end_date)
    if filters.vendor_id is not None:
        clauses.append(LedgerEntry.vendor_id == filters.vendor_id)
    if filters.customer_id is not None:
        clauses.append(LedgerEntry.customer_id == filters.customer_id)
    if filters.min_amount is not None:
        clauses.append(LedgerEntry.amount >= filters.min_amount)
    if filters.max_amount is not None:
        clauses.append(LedgerEntry.amount <= filters.max_amount)
    if filters.search:
        term = f"%{filters.search.strip()}%"
        clauses.append(or_(LedgerEntry.description.ilike(term), LedgerEntry.reference.ilike(term)))

    return clauses


def create_entry(db: Session, **fields) -> LedgerEntry:
    """Add a ledger entry to the session. The caller commits."""
    entry = LedgerEntry(**fields)
    db.add(entry)
    db.flush()
    return entry


def get_entry_by_id(db: Session, entry_id: int) -> Optional[LedgerEntry]:
    return db.query(LedgerEntry).filter(LedgerEntry.id == entry_id).first()


def get_entry_with_lock(db: Session, entry_id: int) -> Optional[LedgerEntry]:
    """
    Fetch an entry and LOCK it for the current transaction.

    Uses SELECT ... FOR UPDATE so two payments cannot both read the same remaining amount.
    """
    return db.query(LedgerEntry).filter(LedgerEntry.id == entry_id).with_for_update().first()


def get_references(db: Session, prefix: str) -> Set[str]:
    """All entry references starting with ``prefix`` (e.g. BILL-)."""
    rows = db.query(LedgerEntry.reference).filter(LedgerEntry.reference.startswith(prefix)).all()
    return {row.reference for row in rows}


def list_entries(
    db: Session,
    filters: EntryFilters,
    offset: int = 0,
    limit: int = 50,
    order_by: str = "entry_date",
    order: str = "desc"
) -> Tuple[List[LedgerEntry], int]:
    """Return one page of matching entries plus the total match count."""
    clauses = build_filter_clauses(filters)
    column = ORDERABLE_COLUMNS.get(order_by, LedgerEntry.entry_date)
    ordering = column.asc() if order == "asc" else column.desc()

    query = db.query(LedgerEntry).filter(*clauses)
    total = query.count()
    entries = (
        query.options(selectinload(LedgerEntry.transactions))
        .order_by(ordering, LedgerEntry.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return entries, total


def get_all_matching(db: Session, filters: EntryFilters) -> List[LedgerEntry]:
    return db.query(LedgerEntry).filter(*build_filter_clauses(filters)).all()


def get_untagged_entries(db: Session) -> List[LedgerEntry]:
    """
    Non-KHATA entries carrying no khata: tag in either notes or reference.

    The tag test runs in Python: LIKE and REGEXP ignore case under the default
    SQLite and MySQL collations, so "Khata:" would pass for a tag in SQL.
    """
    candidates = db.query(LedgerEntry).filter(
        LedgerEntry.entry_type != LedgerEntryType.KHATA
    ).order_by(LedgerEntry.id).all()
    return [
        entry for entry in candidates
        if not (has_any_khata_tag(entry.reference) or has_any_khata_tag(entry.notes))
    ]


def list_khatas(db: Session) -> List[LedgerEntry]:
    return db.query(LedgerEntry).filter(
        LedgerEntry.entry_type == LedgerEntryType.KHATA
    ).order_by(LedgerEntry.description.asc()).all()


def get_khata_by_id(db: Session, khata_id: int) -> Optional[LedgerEntry]:
    return db.query(LedgerEntry).filter(
        LedgerEntry.id == khata_id,
        LedgerEntry.entry_type == LedgerEntryType.KHATA
    ).first()


def create_entry_transaction(
    db: Session,
    ledger_entry_id: int,
    amount,
    payment_mode: str,
    transaction_date=None,
    cheque_number: str = None,
    bank_name: str = None,
    reference_number: str = None,
    notes: str = None
) -> LedgerTransaction:
    """Add a payment row for a ledger entry. The caller commits."""
    transaction = LedgerTransaction(
        ledger_entry_id=ledger_entry_id,
        amount=amount,
        payment_mode=payment_mode,
        cheque_number=cheque_number,
        bank_name=bank_name,
        reference_number=reference_number,
        notes=notes
    )
    if transaction_date:
        transaction.transaction_date = transaction_date
    db.add(transaction)
    db.flush()
    return transaction
