"""Models of the separate "ledger" schema (LEDGER_DATABASE_URL)."""
from sqlalchemy import (
    Column, Integer, String, DateTime, Numeric,
    ForeignKey, Index, Text, CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from textile_ledger.database import LedgerBase
from textile_ledger.utils.bill_status import calculate_remaining_amount

class Khata(LedgerBase):
    __tablename__ = "khatas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = ({"mysql_engine": "InnoDB"},)


class Party(LedgerBase):
    __tablename__ = "parties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(150), nullable=False)
    # VENDOR, CUSTOMER, EMPLOYEE, OTHER
    type = Column(String(20), nullable=False)
    khata_id = Column(Integer, ForeignKey("khatas.id"), nullable=False, index=True)

    contact = Column(String(100), nullable=True)
    phone_number = Column(String(30), nullable=True)
    email = Column(String(150), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)

    # Links back to the vendor/customer tables of the primary schema
    vendor_id = Column(Integer, nullable=True)
    customer_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    khata = relationship("Khata", backref="parties")

    __table_args__ = (
        UniqueConstraint("khata_id", "name", name="uq_party_khata_name"),
        CheckConstraint("type IN ('VENDOR', 'CUSTOMER', 'EMPLOYEE', 'OTHER')", name="chk_party_type_valid"),
        {"mysql_engine": "InnoDB"},
    )


class Bill(LedgerBase):
    __tablename__ = "bills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bill_number = Column(String(50), unique=True, nullable=False, index=True)
    khata_id = Column(Integer, ForeignKey("khatas.id"), nullable=False, index=True)
    party_id = Column(Integer, ForeignKey("parties.id"), nullable=True, index=True)

    bill_date = Column(DateTime, nullable=False, server_default=func.now())
    due_date = Column(DateTime, nullable=True)

    amount = Column(Numeric(precision=12, scale=2), nullable=False)
    paid_amount = Column(Numeric(precision=12, scale=2), nullable=False, default=0)
    description = Column(Text, nullable=True)

    # PURCHASE, SALE, EXPENSE, INCOME, OTHER
    bill_type = Column(String(20), nullable=False)
    # PENDING, PARTIAL, PAID, CANCELLED
    status = Column(String(20), nullable=False, server_default="PENDING", index=True)

    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    party = relationship("Party", backref="bills")
    transactions = relationship(
        "Transaction",
        back_populates="bill",
        order_by="Transaction.transaction_date.desc()",
    )

    __table_args__ = (
        CheckConstraint("status IN ('PENDING', 'PARTIAL', 'PAID', 'CANCELLED')", name="chk_bill_status_valid"),
        CheckConstraint("bill_type IN ('PURCHASE', 'SALE', 'EXPENSE', 'INCOME', 'OTHER')", name="chk_bill_type_valid"),
        Index("idx_bill_khata_status", "khata_id", "status"),
        {"mysql_engine": "InnoDB"},
    )

    @property
    def remaining_amount(self):
        return calculate_remaining_amount(self.amount, self.paid_amount)

    @property
    def party_name(self):
        return self.party.name if self.party else None


class Transaction(LedgerBase):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    khata_id = Column(Integer, ForeignKey("khatas.id"), nullable=False, index=True)
    party_id = Column(Integer, ForeignKey("parties.id"), nullable=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=True, index=True)

    amount = Column(Numeric(precision=12, scale=2), nullable=False)
    description = Column(String(255), nullable=False)
    transaction_type = Column(String(30), nullable=False)
    transaction_date = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    created_at = Column(DateTime, server_default=func.now())

    party = relationship("Party")
    bill = relationship("Bill", back_populates="transactions")

    __table_args__ = ({"mysql_engine": "InnoDB"},)
