from datetime import datetime
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from textile_ledger.database import get_ledger_db
from textile_ledger.services import bill_service
from textile_ledger.schemas.common import PaginationMeta, resolve_pagination
from textile_ledger.schemas.bill import (
    BillCreateRequest,
    BillFilters,
    BillListResponse,
    BillPaymentRequest,
    BillPaymentResponse,
    BillResponse,
    BillTransactionResponse,
    LedgerKhataCreateRequest,
    LedgerKhataResponse,
    PartyCreateRequest,
    PartyListResponse,
    PartyResponse
)

router = APIRouter()

@router.get("/khatas", response_model=List[LedgerKhataResponse])
def list_ledger_khatas(db: Session = Depends(get_ledger_db)):
    return bill_service.list_ledger_khatas(db)


@router.post("/khatas", response_model=LedgerKhataResponse, status_code=status.HTTP_201_CREATED)
def create_ledger_khata(request: LedgerKhataCreateRequest, db: Session = Depends(get_ledger_db)):
    return bill_service.create_ledger_khata(db, request)


@router.get("/parties", response_model=PartyListResponse)
def list_parties(
    khata_id: Optional[int] = Query(None),
    type: Optional[str] = Query(None, description="VENDOR, CUSTOMER, EMPLOYEE or OTHER"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    pageSize: Optional[int] = Query(None, ge=1, include_in_schema=False),
    skip: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_ledger_db)
):
    offset, limit = resolve_pagination(page, limit or pageSize, skip)
    parties, total = bill_service.list_parties(
        db, khata_id=khata_id, party_type=type, search=search, offset=offset, limit=limit
    )
    return PartyListResponse(
        parties=[PartyResponse.model_validate(p) for p in parties],
        pagination=PaginationMeta.build(total=total, page=offset // limit + 1, limit=limit)
    )


@router.post("/parties", response_model=PartyResponse, status_code=status.HTTP_201_CREATED)
def create_party(request: PartyCreateRequest, db: Session = Depends(get_ledger_db)):
    return bill_service.create_party(db, request)


@router.get("/bills", response_model=BillListResponse)
def list_bills(
    khata_id: Optional[int] = Query(None),
    party_id: Optional[int] = Query(None),
    bill_type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    pageSize: Optional[int] = Query(None, ge=1, include_in_schema=False),
    skip: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_ledger_db)
):
    filters = BillFilters(
        khata_id=khata_id,
        party_id=party_id,
        bill_type=bill_type,
        status=status,
        start_date=start_date,
        end_date=end_date
    )
    offset, limit = resolve_pagination(page, limit or pageSize, skip)
    bills, total = bill_service.list_bills(db, filters, offset=offset, limit=limit)
    return BillListResponse(
        bills=[BillResponse.model_validate(b) for b in bills],
        pagination=PaginationMeta.build(total=total, page=offset // limit + 1, limit=limit)
    )


@router.post("/bills", response_model=BillResponse, status_code=201)
def create_bill(request: BillCreateRequest, db: Session = Depends(get_ledger_db)):
    """
    Create a bill.
    When no bill_number is given one is generated as <billType>-<khataId>-<nnnn>.
    """
    return bill_service.create_bill(db, request)


@router.get("/bills/{bill_id}", response_model=BillResponse)
def get_bill(bill_id: int, db: Session = Depends(get_ledger_db)):
    return bill_service.get_bill(db, bill_id)


@router.post("/bills/{bill_id}/payments", response_model=BillPaymentResponse, status_code=201)
def record_bill_payment(bill_id: int, request: BillPaymentRequest, db: Session = Depends(get_ledger_db)):
    """
    Record a payment against a bill.
    The bill moves PENDING -> PARTIAL -> PAID as payments add up to its amount.
    """
    transaction, bill = bill_service.record_bill_payment(db, bill_id, request)
    return BillPaymentResponse(
        transaction=BillTransactionResponse.model_validate(transaction),
        bill=BillResponse.model_validate(bill)
    )


@router.post("/bills/{bill_id}/cancel", response_model=BillResponse)
def cancel_bill(bill_id: int, db: Session = Depends(get_ledger_db)):
    return bill_service.cancel_bill(db, bill_id)
