import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from textile_ledger.config import settings
from textile_ledger.database import init_db
from textile_ledger.api.v1 import api_router
from textile_ledger.middleware.error_handler import (
    validation_exception_handler,
    not_found_handler,
    duplicate_record_handler,
    business_rule_handler,
    ledger_exception_handler,
    database_exception_handler,
    generic_exception_handler
)
from textile_ledger.middleware.request_logging import log_requests
from textile_ledger.utils.exceptions import (
    LedgerException,
    RecordNotFoundError,
    DuplicateRecordError,
    BusinessRuleError
)
from textile_ledger.utils.logger import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        logger.info("Creating database tables")
        init_db()
    logger.info("%s started (%s)", settings.PROJECT_NAME, settings.APP_ENV)
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    lifespan=lifespan
)

@app.get("/health")
def health_check():
    return {"status": "healthy"}

app.middleware("http")(log_requests)

# Register exception handlers
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RecordNotFoundError, not_found_handler)
app.add_exception_handler(DuplicateRecordError, duplicate_record_handler)
app.add_exception_handler(BusinessRuleError, business_rule_handler)
app.add_exception_handler(LedgerException, ledger_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include API routes
app.include_router(api_router, prefix=settings.API_V1_PREFIX)
