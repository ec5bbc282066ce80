import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import List, Tuple

from textile_ledger.models.accounting import Bill, Khata, Party, Transaction
from textile_ledger.repositories import bill_repo, book_repo
from textile_ledger.schemas.bill import (
    BillCreateRequest,
    BillFilters,
    BillPaymentRequest,
    LedgerKhataCreateRequest,
    PartyCreateRequest
)
from textile_ledger.utils.bill_status import (
    calculate_remaining_amount,
    cancel_bill_status,
    next_bill_status,
    to_money
)
from textile_ledger.utils.constants import BillType, TransactionType
from textile_ledger.utils.exceptions import (
    BillNotFoundError,
    DuplicateRecordError,
    KhataNotFoundError,
    PartyNotFoundError,
    PaymentExceedsRemainingError
)

logger = logging.getLogger(__name__)

# Money comes in for these, goes out for everything else
RECEIVABLE_BILL_TYPES = (BillType.SALE, BillType.INCOME)


def create_ledger_khata(db: Session, request: LedgerKhataCreateRequest) -> Khata:
    try:
        khata = book_repo.create_khata(db, request.name.strip(), request.description)
    except IntegrityError:
        db.rollback()
        raise DuplicateRecordError(f"A khata named '{request.name.strip()}' already exists")

    logger.info("Created ledger khata %s (%s)", khata.id, khata.name)
    return khata


def list_ledger_khatas(db: Session) -> List[Khata]:
    return book_repo.list_khatas(db)


def _require_khata(db: Session, khata_id: int) -> Khata:
    khata = book_repo.get_khata_by_id(db, khata_id)
    if not khata:
        raise KhataNotFoundError(f"Khata {khata_id} not found")
    return khata


def create_party(db: Session, request: PartyCreateRequest) -> Party:
    _require_khata(db, request.khata_id)

    fields = request.model_dump()
    fields["name"] = fields["name"].strip()
    try:
        party = book_repo.create_party(db, **fields)
    except IntegrityError:
        db.rollback()
        raise DuplicateRecordError(f"Party '{fields['name']}' already exists in khata {request.khata_id}")

    logger.info("Created %s party %s in khata %s", party.type, party.id, party.khata_id)
    return party


def list_parties(db: Session, khata_id: int = None, party_type: str = None, search: str = None,
                 offset: int = 0, limit: int = 50) -> Tuple[List[Party], int]:
    return book_repo.list_parties(
        db,
        khata_id=khata_id,
        party_type=party_type.strip().upper() if party_type else None,
        search=search,
        offset=offset,
        limit=limit
    )


def generate_bill_number(db: Session, bill_type: str, khata_id: int) -> str:
    """
    Next free bill number for a khata, e.g. SALE-1-0007.

    Starts from the khata's bill count and steps forward past numbers already taken.
    """
    sequence = bill_repo.count_bills_for_khata(db, khata_id) + 1
    bill_number = f"{bill_type}-{khata_id}-{sequence:04d}"
    while bill_repo.get_bill_by_number(db, bill_number):
        sequence += 1
        bill_number = f"{bill_type}-{khata_id}-{sequence:04d}"
    return bill_number


def create_bill(db: Session, request: BillCreateRequest) -> Bill:
    _require_khata(db, request.khata_id)
    if request.party_id is not None and not book_repo.get_party_by_id(db, request.party_id):
        raise PartyNotFoundError(f"Party {request.party_id} not found")

    bill_number = request.bill_number.strip() if request.bill_number else None
    if not bill_number:
        bill_number = generate_bill_number(db, request.bill_type, request.khata_id)

    try:
        bill = bill_repo.create_bill(
            db,
            bill_number=bill_number,
            khata_id=request.khata_id,
            bill_type=request.bill_type,
            amount=to_money(request.amount),
            bill_date=request.bill_date,
            party_id=request.party_id,
            due_date=request.due_date,
            description=request.description
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateRecordError(f"Bill number {bill_number} already exists")

    db.refresh(bill)
    logger.info("Created bill %s for %s", bill.bill_number, bill.amount)
    return bill


def get_bill(db: Session, bill_id: int) -> Bill:
    bill = bill_repo.get_bill_by_id(db, bill_id)
    if not bill:
        raise BillNotFoundError(f"Bill {bill_id} not found")
    return bill


def list_bills(db: Session, filters: BillFilters, offset: int = 0, limit: int = 50) -> Tuple[List[Bill], int]:
    return bill_repo.list_bills(db, filters, offset=offset, limit=limit)


def default_transaction_type(bill_type: str) -> str:
    if bill_type in RECEIVABLE_BILL_TYPES:
        return TransactionType.CASH_RECEIPT
    return TransactionType.CASH_PAYMENT


def record_bill_payment(db: Session, bill_id: int, request: BillPaymentRequest) -> Tuple[Transaction, Bill]:
    """
    Record a payment against a bill.

    Steps:
    1. Lock the bill row
    2. Check the status transition and the remaining amount
    3. Create the ledger transaction bound to the bill
    4. Add to paid_amount and move the status forward
    5. Commit everything at once
    """
    bill = bill_repo.get_bill_with_lock(db, bill_id)
    if not bill:
        raise BillNotFoundError(f"Bill {bill_id} not found")

    amount = to_money(request.amount)
    paid_after = to_money(bill.paid_amount) + amount
    # Raises for cancelled bills before anything else is checked
    new_status = next_bill_status(bill.status, bill.amount, paid_after)

    remaining = calculate_remaining_amount(bill.amount, bill.paid_amount)
    if amount > remaining:
        raise PaymentExceedsRemainingError(
            f"Payment amount {amount} exceeds the remaining amount {remaining}",
            remaining_amount=remaining
        )

    try:
        transaction = bill_repo.create_transaction(
            db,
            khata_id=bill.khata_id,
            amount=amount,
            description=request.description or f"Payment for bill {bill.bill_number}",
            transaction_type=request.transaction_type or default_transaction_type(bill.bill_type),
            bill_id=bill.id,
            party_id=bill.party_id,
            transaction_date=request.transaction_date
        )
        bill.paid_amount = paid_after
        bill.status = new_status
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(transaction)
    db.refresh(bill)
    logger.info("Recorded payment of %s on bill %s, status now %s", amount, bill.bill_number, bill.status)
    return transaction, bill


def cancel_bill(db: Session, bill_id: int) -> Bill:
    bill = bill_repo.get_bill_with_lock(db, bill_id)
    if not bill:
        raise BillNotFoundError(f"Bill {bill_id} not found")

    bill.status = cancel_bill_status(bill.status)
    db.commit()
    db.refresh(bill)
    logger.info("Cancelled bill %s", bill.bill_number)
    return bill
