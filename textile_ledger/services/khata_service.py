import logging
from sqlalchemy.orm import Session
from typing import List

from textile_ledger.models.ledger_entry import LedgerEntry
from textile_ledger.repositories import entry_repo
from textile_ledger.schemas.khata import KhataCreateRequest
from textile_ledger.utils.exceptions import KhataNotFoundError
from textile_ledger.utils.constants import (
    LedgerEntryType,
    LedgerEntryStatus,
    DEFAULT_KHATA_NAME,
    DEFAULT_KHATA_DESCRIPTION
)

logger = logging.getLogger(__name__)


def _create_khata_entry(db: Session, name: str, description: str = None) -> LedgerEntry:
    khata = entry_repo.create_entry(
        db,
        entry_type=LedgerEntryType.KHATA,
        description=name,
        notes=description,
        amount=0,
        remaining_amount=0,
        status=LedgerEntryStatus.PENDING
    )
    db.commit()
    db.refresh(khata)
    return khata


def ensure_default_khata(db: Session) -> LedgerEntry:
    """Return the first khata, creating the main account book when there is none."""
    khatas = entry_repo.list_khatas(db)
    if khatas:
        return khatas[0]

    logger.info("No khatas found, creating default khata")
    return _create_khata_entry(db, DEFAULT_KHATA_NAME, DEFAULT_KHATA_DESCRIPTION)


def list_khatas(db: Session) -> List[LedgerEntry]:
    ensure_default_khata(db)
    return entry_repo.list_khatas(db)


def create_khata(db: Session, request: KhataCreateRequest) -> LedgerEntry:
    khata = _create_khata_entry(db, request.name, request.description.strip() if request.description else None)
    logger.info("Created khata %s (%s)", khata.id, khata.description)
    return khata


def get_khata(db: Session, khata_id: int) -> LedgerEntry:
    khata = entry_repo.get_khata_by_id(db, khata_id)
    if not khata:
        raise KhataNotFoundError(f"Khata {khata_id} not found")
    return khata
