from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List
from datetime import datetime

from textile_ledger.schemas.common import PaginationMeta, check_choice
from textile_ledger.utils.constants import LedgerEntryType, PaymentMode

# KHATA rows are created through the khata endpoints only
CREATABLE_ENTRY_TYPES = tuple(t for t in LedgerEntryType.ALL if t != LedgerEntryType.KHATA)


class EntryFilters(BaseModel):
    entry_type: Optional[str] = None
    khata_id: Optional[int] = None
    status: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    vendor_id: Optional[int] = None
    customer_id: Optional[int] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    search: Optional[str] = None

    @field_validator("entry_type")
    @classmethod
    def known_entry_type(cls, v):
        # Unknown types are ignored rather than rejected
        if v and v.strip().upper() in LedgerEntryType.ALL:
            return v.strip().upper()
        return None

    @field_validator("status")
    @classmethod
    def upper_status(cls, v):
        return v.strip().upper() if v else None


class EntryCreateRequest(BaseModel):
    entry_type: str
    description: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., gt=0)
    khata_id: Optional[int] = Field(None, gt=0)
    reference: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    entry_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    vendor_id: Optional[int] = None
    vendor_name: Optional[str] = Field(None, max_length=150)
    customer_id: Optional[int] = None
    customer_name: Optional[str] = Field(None, max_length=150)

    @field_validator("entry_type")
    @classmethod
    def valid_entry_type(cls, v):
        return check_choice(v, CREATABLE_ENTRY_TYPES, "entry_type")

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v):
        if not v.strip():
            raise ValueError("description is required")
        return v.strip()

    @model_validator(mode="after")
    def party_for_payables_and_receivables(self):
        if self.entry_type == LedgerEntryType.PAYABLE and not (self.vendor_id or self.vendor_name):
            raise ValueError("vendor_id or vendor_name is required for payables")
        if self.entry_type == LedgerEntryType.RECEIVABLE and not (self.customer_id or self.customer_name):
            raise ValueError("customer_id or customer_name is required for receivables")
        return self


class EntryPaymentRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)
    payment_mode: str
    transaction_date: Optional[datetime] = None
    cheque_number: Optional[str] = Field(None, max_length=50)
    bank_name: Optional[str] = Field(None, max_length=100)
    reference_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @field_validator("payment_mode")
    @classmethod
    def valid_payment_mode(cls, v):
        return check_choice(v, PaymentMode.ALL, "payment_mode")

    @model_validator(mode="after")
    def cheque_number_for_cheques(self):
        if self.payment_mode == PaymentMode.CHEQUE and not (self.cheque_number and self.cheque_number.strip()):
            raise ValueError("cheque_number is required for cheque payments")
        return self


class EntryTransactionResponse(BaseModel):
    id: int
    ledger_entry_id: int
    amount: Decimal
    payment_mode: str
    transaction_date: datetime
    cheque_number: Optional[str] = None
    bank_name: Optional[str] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class EntryResponse(BaseModel):
    id: int
    entry_type: str
    description: str
    entry_date: datetime
    due_date: Optional[datetime] = None
    amount: Decimal
    remaining_amount: Decimal
    status: str
    reference: Optional[str] = None
    notes: Optional[str] = None
    # Column value, or the khata parsed from the text tags
    khata_id: Optional[int] = Field(None, validation_alias=AliasChoices("resolved_khata_id", "khata_id"))
    party: str = ""
    vendor_id: Optional[int] = None
    customer_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    transactions: List[EntryTransactionResponse] = []

    class Config:
        from_attributes = True


class SummaryStats(BaseModel):
    total_receivables: Decimal = Decimal("0.00")
    total_payables: Decimal = Decimal("0.00")
    total_bank_balance: Decimal = Decimal("0.00")
    total_inventory_value: Decimal = Decimal("0.00")
    overdue_bills: int = 0
    overdue_amount: Decimal = Decimal("0.00")
    bills_total: int = 0
    paid_bills: int = 0
    transactions_total: int = 0
    recent_transactions: int = 0
    cheques_total: int = 0
    pending_cheques: int = 0
    inventory_items: int = 0
    bank_accounts: int = 0


class SummaryResponse(BaseModel):
    summary: SummaryStats
    partial_data: bool = Field(
        False,
        validation_alias=AliasChoices("partial_data", "partialData"),
        serialization_alias="partialData"
    )
    message: Optional[str] = None


class EntryListResponse(BaseModel):
    entries: List[EntryResponse]
    pagination: PaginationMeta
    summary: SummaryStats


class EntryPaymentResponse(BaseModel):
    transaction: EntryTransactionResponse
    entry: EntryResponse
