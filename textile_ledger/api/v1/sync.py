from fastapi import APIRouter, Depends
from typing import Optional
from sqlalchemy.orm import Session

from textile_ledger.database import get_db, get_ledger_db
from textile_ledger.services import sync_service
from textile_ledger.schemas.sync import BackfillCounts, BackfillRequest, SyncReport

router = APIRouter()

@router.post("", response_model=SyncReport)
def run_sync(
    request: Optional[BackfillRequest] = None,
    db: Session = Depends(get_db),
    ledger_db: Session = Depends(get_ledger_db)
):
    """
    Copy ledger bills and transactions into ledger entries, then tag untagged
    entries with the default khata. Safe to run repeatedly.
    """
    return sync_service.run_full_sync(db, ledger_db, khata_id=request.khata_id if request else None)


@router.post("/backfill", response_model=BackfillCounts)
def run_backfill(
    request: Optional[BackfillRequest] = None,
    db: Session = Depends(get_db)
):
    return sync_service.backfill_default_khata(db, khata_id=request.khata_id if request else None)
