from sqlalchemy.orm import Session, selectinload
from typing import List, Optional, Tuple

from textile_ledger.models.accounting import Bill, Transaction
from textile_ledger.schemas.bill import BillFilters
from textile_ledger.utils.constants import BillStatus


def create_bill(
    db: Session,
    bill_number: str,
    khata_id: int,
    bill_type: str,
    amount,
    bill_date=None,
    party_id: Optional[int] = None,
    due_date=None,
    description: Optional[str] = None
) -> Bill:
    """Add a bill to the session with nothing paid yet. The caller commits."""
    bill = Bill(
        bill_number=bill_number,
        khata_id=khata_id,
        party_id=party_id,
        bill_type=bill_type,
        amount=amount,
        paid_amount=0,
        due_date=due_date,
        description=description,
        status=BillStatus.PENDING
    )
    if bill_date:
        bill.bill_date = bill_date
    db.add(bill)
    db.flush()
    return bill


def get_bill_by_id(db: Session, bill_id: int) -> Optional[Bill]:
    return db.query(Bill).filter(Bill.id == bill_id).first()


def get_bill_with_lock(db: Session, bill_id: int) -> Optional[Bill]:
    """
    Fetch a bill and LOCK it for the current transaction.

    The lock is held until db.commit() or db.rollback(). Ignored by SQLite.
    """
    return db.query(Bill).filter(Bill.id == bill_id).with_for_update().first()


def get_bill_by_number(db: Session, bill_number: str) -> Optional[Bill]:
    return db.query(Bill).filter(Bill.bill_number == bill_number).first()


def count_bills_for_khata(db: Session, khata_id: int) -> int:
    return db.query(Bill).filter(Bill.khata_id == khata_id).count()


def list_bills(db: Session, filters: BillFilters, offset: int = 0, limit: int = 10) -> Tuple[List[Bill], int]:
    query = db.query(Bill)

    if filters.khata_id is not None:
        query = query.filter(Bill.khata_id == filters.khata_id)
    if filters.party_id is not None:
        query = query.filter(Bill.party_id == filters.party_id)
    if filters.bill_type:
        query = query.filter(Bill.bill_type == filters.bill_type)
    if filters.status:
        query = query.filter(Bill.status == filters.status)
    if filters.start_date:
        query = query.filter(Bill.bill_date >= filters.start_date)
    if filters.end_date:
        query = query.filter(Bill.bill_date <= filters.end_date)

    total = query.count()
    bills = (
        query.options(selectinload(Bill.party))
        .order_by(Bill.bill_date.desc(), Bill.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return bills, total


def get_all_bills(db: Session) -> List[Bill]:
    """Every bill with its party loaded, oldest first."""
    return db.query(Bill).options(selectinload(Bill.party)).order_by(Bill.id).all()


def create_transaction(
    db: Session,
    khata_id: int,
    amount,
    description: str,
    transaction_type: str,
    bill_id: Optional[int] = None,
    party_id: Optional[int] = None,
    transaction_date=None
) -> Transaction:
    """Add a ledger-schema transaction to the session. The caller commits."""
    transaction = Transaction(
        khata_id=khata_id,
        party_id=party_id,
        bill_id=bill_id,
        amount=amount,
        description=description,
        transaction_type=transaction_type
    )
    if transaction_date:
        transaction.transaction_date = transaction_date
    db.add(transaction)
    db.flush()
    return transaction


def get_all_transactions(db: Session) -> List[Transaction]:
    return db.query(Transaction).options(selectinload(Transaction.party)).order_by(Transaction.id).all()
