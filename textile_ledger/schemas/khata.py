from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

class KhataCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Khata name is required")
        return v.strip()


class KhataResponse(BaseModel):
    """A khata as stored in the primary schema: a KHATA ledger entry."""
    id: int
    # name lives in description, the free description in notes
    name: str = Field(..., validation_alias=AliasChoices("name", "description"))
    description: Optional[str] = Field(None, validation_alias=AliasChoices("notes", "description"))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class KhataListResponse(BaseModel):
    khatas: List[KhataResponse]
