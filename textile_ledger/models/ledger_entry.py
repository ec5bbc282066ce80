from sqlalchemy import (
    Column, Integer, String, DateTime, Numeric,
    ForeignKey, Index, Text, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from textile_ledger.database import Base
from textile_ledger.utils.constants import LedgerEntryType
from textile_ledger.utils.khata_tags import parse_khata_id, extract_party_name

DESCRIPTION_LENGTH = 255
REFERENCE_LENGTH = 255

class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # KHATA, BILL, TRANSACTION, CHEQUE, INVENTORY, BANK, PAYABLE, RECEIVABLE
    entry_type = Column(String(20), nullable=False, index=True)

    # For KHATA rows this is the khata name
    description = Column(String(DESCRIPTION_LENGTH), nullable=False)
    entry_date = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    due_date = Column(DateTime, nullable=True)

    amount = Column(Numeric(precision=12, scale=2), nullable=False, default=0)
    remaining_amount = Column(Numeric(precision=12, scale=2), nullable=False, default=0)
    status = Column(String(20), nullable=False, server_default="PENDING", index=True)

    # Free text; carries khata:<id>, BILL-<n>, TXN-<id> tags
    reference = Column(String(REFERENCE_LENGTH), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    # Explicit khata column, written together with the khata:<id> tag
    khata_id = Column(Integer, nullable=True, index=True)

    vendor_id = Column(Integer, nullable=True, index=True)
    customer_id = Column(Integer, nullable=True, index=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    transactions = relationship(
        "LedgerTransaction",
        back_populates="ledger_entry",
        order_by="LedgerTransaction.transaction_date.desc()",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(
            "entry_type IN ('KHATA', 'BILL', 'TRANSACTION', 'CHEQUE', 'INVENTORY', 'BANK', 'PAYABLE', 'RECEIVABLE')",
            name="chk_entry_type_valid"
        ),
        Index("idx_ledger_type_date", "entry_type", "entry_date"),
        {"mysql_engine": "InnoDB"},
    )

    @property
    def resolved_khata_id(self):
        """Khata column if set, otherwise the first khata:<id> tag in reference or notes."""
        if self.khata_id is not None:
            return self.khata_id
        return parse_khata_id(self.reference) or parse_khata_id(self.notes)

    @property
    def party(self) -> str:
        for text in (self.notes, self.reference):
            for prefix in ("Vendor", "Customer"):
                name = extract_party_name(text, prefix)
                if name:
                    return name
        if self.entry_type == LedgerEntryType.PAYABLE:
            return "Manual vendor"
        if self.entry_type == LedgerEntryType.RECEIVABLE:
            return "Manual customer"
        return ""


class LedgerTransaction(Base):
    """A payment or receipt recorded against a ledger entry."""
    __tablename__ = "ledger_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ledger_entry_id = Column(Integer, ForeignKey("ledger_entries.id"), nullable=False, index=True)

    amount = Column(Numeric(precision=12, scale=2), nullable=False)
    # CASH, CHEQUE, ONLINE
    payment_mode = Column(String(20), nullable=False)
    transaction_date = Column(DateTime, nullable=False, server_default=func.now())

    cheque_number = Column(String(50), nullable=True)
    bank_name = Column(String(100), nullable=True)
    reference_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    ledger_entry = relationship("LedgerEntry", back_populates="transactions")

    __table_args__ = (
        CheckConstraint("payment_mode IN ('CASH', 'CHEQUE', 'ONLINE')", name="chk_payment_mode_valid"),
        {"mysql_engine": "InnoDB"},
    )
