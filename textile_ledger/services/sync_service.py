"""
Mirrors ledger-schema bills and transactions into the primary ledger_entries
table, and tags untagged entries with the default khata.

Every row is written and committed on its own. A row that fails is rolled
back, logged and counted, and the run moves on to the next one; there is no
atomicity across rows or across the two databases. Re-running is safe because
rows whose reference is already present are skipped, but two runs started at
the same time can both insert the same row.
"""
import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session

from textile_ledger.config import settings
from textile_ledger.models.accounting import Bill, Party, Transaction
from textile_ledger.models.ledger_entry import DESCRIPTION_LENGTH, REFERENCE_LENGTH
from textile_ledger.repositories import bill_repo, entry_repo
from textile_ledger.schemas.sync import BackfillCounts, SyncCounts, SyncReport
from textile_ledger.utils.bill_status import calculate_remaining_amount, to_money
from textile_ledger.utils.constants import (
    LedgerEntryType,
    LedgerEntryStatus,
    PartyType,
    BILL_REFERENCE_PREFIX,
    TRANSACTION_REFERENCE_PREFIX
)
from textile_ledger.utils.khata_tags import append_khata_tag, clip_text, format_khata_tag, has_any_khata_tag

logger = logging.getLogger(__name__)


def bill_reference(bill: Bill) -> str:
    return f"{BILL_REFERENCE_PREFIX}{bill.bill_number}"


def transaction_reference(transaction: Transaction) -> str:
    return f"{TRANSACTION_REFERENCE_PREFIX}{transaction.id}"


def sync_notes(khata_id: int, party_id: int = None) -> str:
    synced_at = datetime.now(timezone.utc).isoformat()
    return f"{format_khata_tag(khata_id)}\nparty:{party_id or 'none'}\nauto-sync:{synced_at}"


def _party_links(party: Party) -> dict:
    if party is None:
        return {"vendor_id": None, "customer_id": None}
    return {"vendor_id": party.vendor_id, "customer_id": party.customer_id}


def _party_links_by_type(party: Party) -> dict:
    links = {"vendor_id": None, "customer_id": None}
    if party is None:
        return links
    if party.type == PartyType.VENDOR:
        links["vendor_id"] = party.vendor_id
    elif party.type == PartyType.CUSTOMER:
        links["customer_id"] = party.customer_id
    return links


def sync_bills(db: Session, ledger_db: Session) -> SyncCounts:
    """Create a BILL entry for every ledger bill that has no BILL-<number> entry yet."""
    counts = SyncCounts()
    existing = entry_repo.get_references(db, BILL_REFERENCE_PREFIX)

    for bill in bill_repo.get_all_bills(ledger_db):
        reference = bill_reference(bill)
        if reference in existing:
            counts.skipped += 1
            continue

        try:
            entry_repo.create_entry(
                db,
                entry_type=LedgerEntryType.BILL,
                description=clip_text(bill.description, DESCRIPTION_LENGTH) or f"Bill {bill.bill_number}",
                amount=to_money(bill.amount),
                remaining_amount=calculate_remaining_amount(bill.amount, bill.paid_amount),
                status=bill.status,
                entry_date=bill.bill_date,
                due_date=bill.due_date,
                reference=reference,
                notes=sync_notes(bill.khata_id, bill.party_id),
                khata_id=bill.khata_id,
                **_party_links(bill.party)
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to sync bill %s", bill.bill_number)
            counts.failed += 1
            continue

        existing.add(reference)
        counts.created += 1

    logger.info("Bill sync: %d created, %d skipped, %d failed", counts.created, counts.skipped, counts.failed)
    return counts


def sync_transactions(db: Session, ledger_db: Session) -> SyncCounts:
    """Create a TRANSACTION entry for every ledger transaction that has no TXN-<id> entry yet."""
    counts = SyncCounts()
    existing = entry_repo.get_references(db, TRANSACTION_REFERENCE_PREFIX)

    for transaction in bill_repo.get_all_transactions(ledger_db):
        reference = transaction_reference(transaction)
        if reference in existing:
            counts.skipped += 1
            continue

        try:
            entry_repo.create_entry(
                db,
                entry_type=LedgerEntryType.TRANSACTION,
                description=clip_text(transaction.description, DESCRIPTION_LENGTH),
                amount=to_money(transaction.amount),
                remaining_amount=0,
                status=LedgerEntryStatus.COMPLETED,
                entry_date=transaction.transaction_date,
                reference=reference,
                notes=sync_notes(transaction.khata_id, transaction.party_id),
                khata_id=transaction.khata_id,
                **_party_links_by_type(transaction.party)
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to sync transaction %s", transaction.id)
            counts.failed += 1
            continue

        existing.add(reference)
        counts.created += 1

    logger.info("Transaction sync: %d created, %d skipped, %d failed", counts.created, counts.skipped, counts.failed)
    return counts


def backfill_default_khata(db: Session, khata_id: int = None) -> BackfillCounts:
    """
    Tag every non-KHATA entry that mentions no khata at all with ``khata_id``.

    The tag goes at the end of both reference and notes, and the khata_id
    column is filled in when it is empty. A long reference is shortened so
    the tag still fits the column.
    """
    khata_id = khata_id or settings.DEFAULT_KHATA_ID
    entries = entry_repo.get_untagged_entries(db)
    counts = BackfillCounts(scanned=len(entries))

    for entry in entries:
        entry_id = entry.id
        # Attributes reload after each commit; another writer may have tagged it meanwhile
        if has_any_khata_tag(entry.reference) or has_any_khata_tag(entry.notes):
            continue
        try:
            entry.reference = append_khata_tag(entry.reference, khata_id, separator=" ", max_length=REFERENCE_LENGTH)
            entry.notes = append_khata_tag(entry.notes, khata_id)
            if entry.khata_id is None:
                entry.khata_id = khata_id
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to backfill khata for entry %s", entry_id)
            counts.failed += 1
            continue

        counts.updated += 1

    logger.info("Backfill to khata %s: %d of %d entries updated, %d failed",
                khata_id, counts.updated, counts.scanned, counts.failed)
    return counts


def run_full_sync(db: Session, ledger_db: Session, khata_id: int = None) -> SyncReport:
    """Bills, then transactions, then the default-khata backfill."""
    logger.info("Starting full ledger sync")
    report = SyncReport(
        bills=sync_bills(db, ledger_db),
        transactions=sync_transactions(db, ledger_db),
        backfill=backfill_default_khata(db, khata_id)
    )
    logger.info("Full ledger sync finished with %d changes", report.total_changes)
    return report
