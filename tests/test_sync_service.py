from datetime import datetime
from decimal import Decimal

from textile_ledger.models import Bill, LedgerEntry, Transaction
from textile_ledger.repositories import entry_repo
from textile_ledger.schemas.entry import EntryFilters
from textile_ledger.services import sync_service
from textile_ledger.utils.khata_tags import has_any_khata_tag


def _add_ledger_transaction(ledger_session, khata, party=None, amount="250.00"):
    transaction = Transaction(
        khata_id=khata.id,
        party_id=party.id if party else None,
        amount=Decimal(amount),
        description="Cash received",
        transaction_type="CASH_RECEIPT",
        transaction_date=datetime(2024, 3, 5)
    )
    ledger_session.add(transaction)
    ledger_session.commit()
    ledger_session.refresh(transaction)
    return transaction


def test_sync_bills_creates_mirrored_entry(db_session, ledger_session, sample_bill):
    """A ledger bill becomes a BILL entry referenced as BILL-<billNumber>"""
    # Arrange
    sample_bill.paid_amount = Decimal("250.00")
    sample_bill.status = "PARTIAL"
    ledger_session.commit()

    # Act
    counts = sync_service.sync_bills(db_session, ledger_session)

    # Assert
    assert counts.created == 1
    assert counts.skipped == 0
    assert counts.failed == 0

    entry = db_session.query(LedgerEntry).filter(LedgerEntry.reference == "BILL-0001").one()
    assert entry.entry_type == "BILL"
    assert entry.amount == Decimal("1000.00")
    assert entry.remaining_amount == Decimal("750.00")
    assert entry.status == "PARTIAL"
    assert entry.description == "Cotton yarn"
    assert entry.khata_id == sample_bill.khata_id
    assert entry.vendor_id == 7
    assert entry.customer_id is None
    assert entry.notes.startswith(f"khata:{sample_bill.khata_id}\nparty:{sample_bill.party_id}\nauto-sync:")


def test_sync_bills_is_idempotent(db_session, ledger_session, sample_bill):
    # Act
    first = sync_service.sync_bills(db_session, ledger_session)
    second = sync_service.sync_bills(db_session, ledger_session)

    # Assert
    assert first.created == 1
    assert second.created == 0
    assert second.skipped == 1
    assert db_session.query(LedgerEntry).count() == 1


def test_sync_bills_clips_long_description(db_session, ledger_session, sample_bill):
    """Bill descriptions are free text; the mirrored entry keeps the first 255 characters"""
    # Arrange
    sample_bill.description = "Grey cloth, 60 bales " * 15
    ledger_session.commit()
    assert len(sample_bill.description) == 315

    # Act
    counts = sync_service.sync_bills(db_session, ledger_session)

    # Assert
    assert counts.created == 1
    assert counts.failed == 0
    entry = db_session.query(LedgerEntry).filter(LedgerEntry.reference == "BILL-0001").one()
    assert len(entry.description) <= 255
    assert sample_bill.description.startswith(entry.description)


def test_sync_bills_skips_existing_reference(db_session, ledger_session, sample_bill, make_entry):
    """An entry already carrying BILL-0001 counts as the mirror, whatever its type"""
    make_entry(entry_type="PAYABLE", reference="BILL-0001")

    counts = sync_service.sync_bills(db_session, ledger_session)

    assert counts.created == 0
    assert counts.skipped == 1
    assert db_session.query(LedgerEntry).count() == 1


def test_sync_bills_continues_after_a_failing_row(db_session, ledger_session, sample_bill, monkeypatch):
    # Arrange
    second = Bill(
        bill_number="0002",
        khata_id=sample_bill.khata_id,
        bill_type="SALE",
        amount=Decimal("50.00"),
        paid_amount=Decimal("0.00"),
        status="PENDING",
        bill_date=datetime(2024, 3, 2)
    )
    ledger_session.add(second)
    ledger_session.commit()

    real_create_entry = entry_repo.create_entry

    def failing_create_entry(db, **fields):
        if fields["reference"] == "BILL-0001":
            raise RuntimeError("simulated write failure")
        return real_create_entry(db, **fields)

    monkeypatch.setattr(entry_repo, "create_entry", failing_create_entry)

    # Act
    counts = sync_service.sync_bills(db_session, ledger_session)

    # Assert
    assert counts.failed == 1
    assert counts.created == 1
    assert [e.reference for e in db_session.query(LedgerEntry).all()] == ["BILL-0002"]


def test_sync_transactions(db_session, ledger_session, sample_khata, sample_customer):
    # Arrange
    transaction = _add_ledger_transaction(ledger_session, sample_khata, sample_customer)

    # Act
    first = sync_service.sync_transactions(db_session, ledger_session)
    second = sync_service.sync_transactions(db_session, ledger_session)

    # Assert
    assert first.created == 1
    assert second.skipped == 1
    entry = db_session.query(LedgerEntry).filter(LedgerEntry.reference == f"TXN-{transaction.id}").one()
    assert entry.entry_type == "TRANSACTION"
    assert entry.status == "COMPLETED"
    assert entry.remaining_amount == Decimal("0.00")
    assert entry.amount == Decimal("250.00")
    assert entry.customer_id == 9
    assert entry.vendor_id is None


def test_backfill_tags_every_untagged_entry(db_session, make_entry):
    """After a backfill no non-khata entry is left without a khata tag"""
    # Arrange
    no_text = make_entry()
    with_text = make_entry(reference="INV-7", notes="cash")
    tagged = make_entry(reference="INV-8 khata:2")
    khata = make_entry(entry_type="KHATA", description="Main Account Book", amount=0, remaining_amount=0)

    # Act
    counts = sync_service.backfill_default_khata(db_session)

    # Assert
    assert counts.scanned == 2
    assert counts.updated == 2
    assert counts.failed == 0
    assert entry_repo.get_untagged_entries(db_session) == []

    db_session.refresh(no_text)
    db_session.refresh(with_text)
    db_session.refresh(tagged)
    db_session.refresh(khata)
    assert no_text.reference == "khata:1"
    assert no_text.notes == "khata:1"
    assert no_text.khata_id == 1
    assert with_text.reference == "INV-7 khata:1"
    assert with_text.notes == "cash\nkhata:1"
    assert tagged.reference == "INV-8 khata:2"
    assert not has_any_khata_tag(khata.reference)


def test_backfill_tags_entries_mentioning_khata_in_other_case(db_session, make_entry):
    """Only the lower-case khata: token is a tag; "Khata:" in plain text is not"""
    # Arrange
    moved = make_entry(reference="INV-7", notes="Moved from old Khata: Main ledger")
    shouting = make_entry(reference="KHATA: 2 (old book)")

    # Act
    counts = sync_service.backfill_default_khata(db_session, khata_id=1)

    # Assert
    assert counts.scanned == 2
    assert counts.updated == 2
    db_session.refresh(moved)
    db_session.refresh(shouting)
    for entry in (moved, shouting):
        assert has_any_khata_tag(entry.reference)
        assert has_any_khata_tag(entry.notes)
        assert entry.khata_id == 1

    visible = entry_repo.get_all_matching(db_session, EntryFilters(khata_id=1))
    assert {e.id for e in visible} == {moved.id, shouting.id}


def test_backfill_keeps_reference_within_column_length(db_session, make_entry):
    # Arrange
    entry = make_entry(reference="R" * 255)

    # Act
    counts = sync_service.backfill_default_khata(db_session, khata_id=12)

    # Assert
    assert counts.updated == 1
    db_session.refresh(entry)
    assert len(entry.reference) == 255
    assert entry.reference.endswith("R khata:12")


def test_backfill_is_idempotent(db_session, make_entry):
    make_entry(reference="INV-7")

    first = sync_service.backfill_default_khata(db_session, khata_id=3)
    second = sync_service.backfill_default_khata(db_session, khata_id=3)

    assert first.updated == 1
    assert second.scanned == 0
    assert second.updated == 0


def test_run_full_sync(db_session, ledger_session, sample_bill, make_entry):
    # Arrange
    _add_ledger_transaction(ledger_session, sample_bill.party.khata, sample_bill.party)
    make_entry(reference="manual")

    # Act
    report = sync_service.run_full_sync(db_session, ledger_session)

    # Assert
    assert report.bills.created == 1
    assert report.transactions.created == 1
    assert report.backfill.updated == 1
    assert report.total_changes == 3
    # Mirrored rows already carry a khata tag in their notes
    assert entry_repo.get_untagged_entries(db_session) == []
