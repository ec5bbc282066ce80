import pytest
from decimal import Decimal

from textile_ledger.models import LedgerEntry
from textile_ledger.services import entry_service, khata_service
from textile_ledger.schemas.entry import EntryCreateRequest, EntryFilters, EntryPaymentRequest
from textile_ledger.schemas.khata import KhataCreateRequest
from textile_ledger.utils.exceptions import (
    BusinessRuleError,
    ConflictingKhataTagError,
    EntryNotFoundError,
    InvalidStatusTransitionError,
    PaymentExceedsRemainingError
)


def test_create_entry_tags_reference_and_notes(db_session):
    """A new entry carries its khata in the column and in both text fields"""
    # Arrange
    request = EntryCreateRequest(
        entry_type="cheque",
        description="Cheque from Noor Fabrics",
        amount=Decimal("2500.00"),
        khata_id=4,
        reference="CHQ-118",
        notes="post dated"
    )

    # Act
    entry = entry_service.create_entry(db_session, request)

    # Assert
    assert entry.entry_type == "CHEQUE"
    assert entry.khata_id == 4
    assert entry.reference == "CHQ-118 (khata:4)"
    assert entry.notes == "post dated\n\n[System: khata:4]"
    assert entry.remaining_amount == Decimal("2500.00")
    assert entry.status == "PENDING"


def test_create_entry_defaults_to_default_khata(db_session):
    request = EntryCreateRequest(entry_type="BANK", description="HBL current account", amount=Decimal("10000"))

    entry = entry_service.create_entry(db_session, request)

    assert entry.khata_id == 1
    assert entry.reference == "khata:1"
    assert entry.notes == "[System: khata:1]"


def test_create_payable_with_manual_vendor_name(db_session):
    request = EntryCreateRequest(
        entry_type="PAYABLE",
        description="Yarn on credit",
        amount=Decimal("800"),
        vendor_name="Ali Thread House"
    )

    entry = entry_service.create_entry(db_session, request)

    assert entry.notes.startswith("Vendor: Ali Thread House\n---\n")
    assert entry.party == "Ali Thread House"
    assert entry.vendor_id is None


def test_payable_requires_vendor():
    with pytest.raises(ValueError):
        EntryCreateRequest(entry_type="PAYABLE", description="Yarn", amount=Decimal("10"))


def test_khata_entries_cannot_be_created_as_entries():
    with pytest.raises(ValueError):
        EntryCreateRequest(entry_type="KHATA", description="Book", amount=Decimal("1"))


def test_get_entry_not_found(db_session):
    with pytest.raises(EntryNotFoundError):
        entry_service.get_entry(db_session, 999)


def test_payment_scenario_partial_then_paid(db_session, make_entry):
    """1000 -> pay 400 -> PARTIAL with 600 left -> pay 600 -> PAID with nothing left"""
    # Arrange
    entry = make_entry(entry_type="BILL", amount=Decimal("1000.00"), remaining_amount=Decimal("1000.00"))

    # Act - first payment
    _, entry = entry_service.record_entry_payment(
        db_session, entry.id, EntryPaymentRequest(amount=Decimal("400"), payment_mode="cash")
    )

    # Assert
    assert entry.status == "PARTIAL"
    assert entry.remaining_amount == Decimal("600.00")

    # Act - second payment
    transaction, entry = entry_service.record_entry_payment(
        db_session, entry.id,
        EntryPaymentRequest(amount=Decimal("600"), payment_mode="CHEQUE", cheque_number="000123")
    )

    # Assert
    assert entry.status == "PAID"
    assert entry.remaining_amount == Decimal("0.00")
    assert transaction.cheque_number == "000123"
    assert len(entry.transactions) == 2


def test_payment_exceeding_remaining_is_rejected(db_session, make_entry):
    entry = make_entry(amount=Decimal("100.00"), remaining_amount=Decimal("100.00"))

    with pytest.raises(PaymentExceedsRemainingError) as exc_info:
        entry_service.record_entry_payment(
            db_session, entry.id, EntryPaymentRequest(amount=Decimal("150"), payment_mode="CASH")
        )

    assert exc_info.value.remaining_amount == Decimal("100.00")
    db_session.refresh(entry)
    assert entry.remaining_amount == Decimal("100.00")
    assert entry.transactions == []


def test_payment_on_cancelled_entry_is_rejected(db_session, make_entry):
    entry = make_entry(status="CANCELLED")

    with pytest.raises(InvalidStatusTransitionError):
        entry_service.record_entry_payment(
            db_session, entry.id, EntryPaymentRequest(amount=Decimal("10"), payment_mode="CASH")
        )


def test_payment_on_khata_is_rejected(db_session, make_entry):
    khata = make_entry(entry_type="KHATA", description="Main Account Book", amount=0, remaining_amount=0)

    with pytest.raises(BusinessRuleError):
        entry_service.record_entry_payment(
            db_session, khata.id, EntryPaymentRequest(amount=Decimal("10"), payment_mode="CASH")
        )


def test_cheque_payment_requires_cheque_number():
    with pytest.raises(ValueError):
        EntryPaymentRequest(amount=Decimal("10"), payment_mode="CHEQUE")


def test_cancel_entry(db_session, make_entry):
    entry = make_entry()

    cancelled = entry_service.cancel_entry(db_session, entry.id)

    assert cancelled.status == "CANCELLED"
    with pytest.raises(InvalidStatusTransitionError):
        entry_service.cancel_entry(db_session, entry.id)


def test_list_entries_pagination_and_summary(db_session, make_entry):
    # Arrange
    for i in range(5):
        make_entry(entry_type="BANK", description=f"Account {i}", amount=Decimal("100.00"), khata_id=1)

    # Act
    result = entry_service.list_entries(db_session, EntryFilters(khata_id=1), page=2, limit=2)

    # Assert
    assert result.pagination.total == 5
    assert result.pagination.page == 2
    assert result.pagination.pages == 3
    assert len(result.entries) == 2
    # Summary covers the returned page
    assert result.summary.bank_accounts == 2
    assert result.summary.total_bank_balance == Decimal("200.00")


def test_list_khatas_creates_default_once(db_session):
    first = khata_service.list_khatas(db_session)
    second = khata_service.list_khatas(db_session)

    assert [k.description for k in first] == ["Main Account Book"]
    assert [k.id for k in second] == [first[0].id]


def test_create_khata(db_session):
    khata = khata_service.create_khata(db_session, KhataCreateRequest(name="  Dyeing Khata ", description="dyeing unit"))

    assert khata.entry_type == "KHATA"
    assert khata.description == "Dyeing Khata"
    assert khata.notes == "dyeing unit"
    assert khata_service.get_khata(db_session, khata.id).id == khata.id


def test_create_entry_keeps_existing_tag(db_session):
    request = EntryCreateRequest(
        entry_type="INVENTORY",
        description="Grey cloth stock",
        amount=Decimal("12000"),
        khata_id=3,
        reference="STK-4 khata:3"
    )

    entry = entry_service.create_entry(db_session, request)

    assert entry.reference == "STK-4 khata:3"


def test_create_entry_rejects_tag_for_another_khata(db_session):
    """Text tagged for khata 2 cannot be filed under khata 1"""
    # Arrange
    request = EntryCreateRequest(
        entry_type="BANK",
        description="Meezan savings",
        amount=Decimal("500"),
        khata_id=1,
        reference="MZN-3 khata:2"
    )

    # Act / Assert
    with pytest.raises(ConflictingKhataTagError):
        entry_service.create_entry(db_session, request)
    assert db_session.query(LedgerEntry).count() == 0
