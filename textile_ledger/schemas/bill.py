from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from datetime import datetime

from textile_ledger.schemas.common import PaginationMeta, check_choice
from textile_ledger.utils.constants import BillType, PartyType, TransactionType


class LedgerKhataCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Khata name is required")
        return v.strip()


class LedgerKhataResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PartyCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    type: str
    khata_id: int = Field(..., gt=0)
    contact: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=150)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    vendor_id: Optional[int] = None
    customer_id: Optional[int] = None

    @field_validator("type")
    @classmethod
    def valid_type(cls, v):
        return check_choice(v, PartyType.ALL, "type")


class PartyResponse(BaseModel):
    id: int
    name: str
    type: str
    khata_id: int
    contact: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    description: Optional[str] = None
    vendor_id: Optional[int] = None
    customer_id: Optional[int] = None

    class Config:
        from_attributes = True


class PartyListResponse(BaseModel):
    parties: List[PartyResponse]
    pagination: PaginationMeta


class BillFilters(BaseModel):
    khata_id: Optional[int] = None
    party_id: Optional[int] = None
    bill_type: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("bill_type", "status")
    @classmethod
    def upper_choice(cls, v):
        return v.strip().upper() if v else None


class BillCreateRequest(BaseModel):
    khata_id: int = Field(..., gt=0)
    bill_type: str
    amount: Decimal = Field(..., gt=0)
    bill_date: datetime
    due_date: Optional[datetime] = None
    party_id: Optional[int] = None
    # Generated as <billType>-<khataId>-<nnnn> when omitted
    bill_number: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None

    @field_validator("bill_type")
    @classmethod
    def valid_bill_type(cls, v):
        return check_choice(v, BillType.ALL, "bill_type")


class BillPaymentRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)
    # Defaults to CASH_RECEIPT for SALE/INCOME bills and CASH_PAYMENT otherwise
    transaction_type: Optional[str] = None
    description: Optional[str] = Field(None, max_length=255)
    transaction_date: Optional[datetime] = None

    @field_validator("transaction_type")
    @classmethod
    def valid_transaction_type(cls, v):
        return check_choice(v, TransactionType.ALL, "transaction_type")


class BillTransactionResponse(BaseModel):
    id: int
    amount: Decimal
    description: str
    transaction_type: str
    transaction_date: datetime

    class Config:
        from_attributes = True


class BillResponse(BaseModel):
    id: int
    bill_number: str
    khata_id: int
    party_id: Optional[int] = None
    party_name: Optional[str] = None
    bill_date: datetime
    due_date: Optional[datetime] = None
    amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    description: Optional[str] = None
    bill_type: str
    status: str
    transactions: List[BillTransactionResponse] = []

    class Config:
        from_attributes = True


class BillListResponse(BaseModel):
    bills: List[BillResponse]
    pagination: PaginationMeta


class BillPaymentResponse(BaseModel):
    transaction: BillTransactionResponse
    bill: BillResponse
