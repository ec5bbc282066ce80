import math
from pydantic import BaseModel
from typing import Tuple

from textile_ledger.config import settings


class PaginationMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        return cls(total=total, page=page, limit=limit, pages=math.ceil(total / limit) if limit else 0)


def check_choice(value, choices, field: str):
    """Normalize ``value`` to upper case and make sure it is one of ``choices``."""
    if value is None:
        return value
    value = value.strip().upper()
    if value not in choices:
        raise ValueError(f"{field} must be one of {', '.join(choices)}")
    return value


def resolve_pagination(page: int, limit: int = None, skip: int = None) -> Tuple[int, int]:
    """Turn page/limit/skip query parameters into (offset, limit)."""
    limit = max(1, min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE))
    page = max(1, page or 1)
    offset = skip if skip is not None and skip >= 0 else (page - 1) * limit
    return offset, limit
