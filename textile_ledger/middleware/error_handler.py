import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError

from textile_ledger.config import settings
from textile_ledger.utils.exceptions import (
    LedgerException,
    RecordNotFoundError,
    DuplicateRecordError,
    BusinessRuleError
)

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, message: str, details: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "details": jsonable_encoder(details or {})
        }
    )


def _field_name(loc) -> str:
    # loc looks like ("body", "amount") or ("query", "page")
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "request"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = _field_name(first.get("loc", ()))
    reason = first.get("msg", "Invalid value")
    # Model-level validators have no field of their own
    message = f"Invalid request data: {reason}" if field == "request" else f"Invalid value for {field}: {reason}"

    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "validation_error",
        message,
        {"fields": [
            {"field": _field_name(error.get("loc", ())), "message": error.get("msg")}
            for error in errors
        ]}
    )


async def not_found_handler(request: Request, exc: RecordNotFoundError):
    """Handle unknown entry, bill, khata and party ids"""
    return error_response(status.HTTP_404_NOT_FOUND, exc.code.lower(), exc.message)


async def duplicate_record_handler(request: Request, exc: DuplicateRecordError):
    """Handle unique field conflicts"""
    return error_response(status.HTTP_409_CONFLICT, exc.code.lower(), exc.message)


async def business_rule_handler(request: Request, exc: BusinessRuleError):
    """Handle payments and status changes the ledger does not allow"""
    details = {}
    remaining = getattr(exc, "remaining_amount", None)
    if remaining is not None:
        details["remaining_amount"] = str(remaining)
    return error_response(status.HTTP_400_BAD_REQUEST, exc.code.lower(), exc.message, details)


async def ledger_exception_handler(request: Request, exc: LedgerException):
    """Handle any other domain error"""
    return error_response(status.HTTP_400_BAD_REQUEST, exc.code.lower(), exc.message)


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors"""
    logger.exception("Database error on %s %s", request.method, request.url.path)
    details = {}
    if settings.APP_ENV != "production":
        details["reason"] = str(exc)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "database_error",
        "A database error occurred",
        details
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    details = {}
    if settings.APP_ENV != "production":
        details["reason"] = str(exc)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_server_error",
        "An unexpected error occurred",
        details
    )
