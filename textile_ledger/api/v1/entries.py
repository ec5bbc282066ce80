from datetime import datetime
from decimal import Decimal
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from textile_ledger.database import get_db
from textile_ledger.services import entry_service, summary_service
from textile_ledger.schemas.entry import (
    EntryCreateRequest,
    EntryFilters,
    EntryListResponse,
    EntryPaymentRequest,
    EntryPaymentResponse,
    EntryResponse,
    EntryTransactionResponse,
    SummaryResponse
)

router = APIRouter()


def entry_filters(
    type: Optional[str] = Query(None, description="Entry type, e.g. BILL or PAYABLE"),
    khata_id: Optional[int] = Query(None),
    khataId: Optional[int] = Query(None, include_in_schema=False),
    status: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    vendor_id: Optional[int] = Query(None),
    customer_id: Optional[int] = Query(None),
    min_amount: Optional[Decimal] = Query(None),
    max_amount: Optional[Decimal] = Query(None),
    search: Optional[str] = Query(None)
) -> EntryFilters:
    return EntryFilters(
        entry_type=type,
        khata_id=khata_id if khata_id is not None else khataId,
        status=status,
        start_date=start_date,
        end_date=end_date,
        vendor_id=vendor_id,
        customer_id=customer_id,
        min_amount=min_amount,
        max_amount=max_amount,
        search=search
    )


@router.get("", response_model=EntryListResponse)
def list_entries(
    filters: EntryFilters = Depends(entry_filters),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    pageSize: Optional[int] = Query(None, ge=1, include_in_schema=False),
    skip: Optional[int] = Query(None, ge=0),
    order_by: str = Query("entry_date"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db)
):
    """
    List ledger entries.

    Filter by khata with khata_id (or khataId); an entry belongs to a khata
    when it carries the khata:<id> tag or its khata_id column matches.
    """
    return entry_service.list_entries(
        db,
        filters,
        page=page,
        limit=limit or pageSize,
        skip=skip,
        order_by=order_by,
        order=order
    )


@router.post("", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
def create_entry(request: EntryCreateRequest, db: Session = Depends(get_db)):
    return entry_service.create_entry(db, request)


@router.get("/summary", response_model=SummaryResponse)
def get_summary(filters: EntryFilters = Depends(entry_filters), db: Session = Depends(get_db)):
    """Dashboard statistics; partialData is true when they could not be computed."""
    return summary_service.get_summary(db, filters)


@router.get("/{entry_id}", response_model=EntryResponse)
def get_entry(entry_id: int, db: Session = Depends(get_db)):
    return entry_service.get_entry(db, entry_id)


@router.post("/{entry_id}/payments", response_model=EntryPaymentResponse, status_code=status.HTTP_201_CREATED)
def record_payment(entry_id: int, request: EntryPaymentRequest, db: Session = Depends(get_db)):
    """
    Record a payment against an entry.
    The remaining amount goes down and the status moves PENDING -> PARTIAL -> PAID.
    """
    transaction, entry = entry_service.record_entry_payment(db, entry_id, request)
    return EntryPaymentResponse(
        transaction=EntryTransactionResponse.model_validate(transaction),
        entry=EntryResponse.model_validate(entry)
    )


@router.post("/{entry_id}/cancel", response_model=EntryResponse)
def cancel_entry(entry_id: int, db: Session = Depends(get_db)):
    return entry_service.cancel_entry(db, entry_id)
