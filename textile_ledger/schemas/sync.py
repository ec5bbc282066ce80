from pydantic import BaseModel, Field, computed_field
from typing import Optional

class SyncCounts(BaseModel):
    created: int = 0
    skipped: int = 0
    failed: int = 0


class BackfillCounts(BaseModel):
    scanned: int = 0
    updated: int = 0
    failed: int = 0


class SyncReport(BaseModel):
    bills: SyncCounts
    transactions: SyncCounts
    backfill: BackfillCounts

    @computed_field
    @property
    def total_changes(self) -> int:
        return self.bills.created + self.transactions.created + self.backfill.updated


class BackfillRequest(BaseModel):
    khata_id: Optional[int] = Field(None, gt=0)
