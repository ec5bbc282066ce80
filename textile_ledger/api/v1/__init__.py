from fastapi import APIRouter
from . import entries, khatas, bills, sync

api_router = APIRouter()

# Include all v1 routes
api_router.include_router(entries.router, prefix="/entries", tags=["entries"])
api_router.include_router(khatas.router, prefix="/khatas", tags=["khatas"])
api_router.include_router(bills.router, prefix="/ledger", tags=["ledger"])
api_router.include_router(sync.router, prefix="/sync", tags=["sync"])
