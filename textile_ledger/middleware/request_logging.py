import logging
import time
import uuid
from fastapi import Request

logger = logging.getLogger(__name__)


async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    request_id = uuid.uuid4().hex[:8]
    started = time.perf_counter()

    response = await call_next(request)

    duration_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "[%s] %s %s -> %d (%.1f ms)",
        request_id, request.method, request.url.path, response.status_code, duration_ms
    )
    response.headers["X-Request-ID"] = request_id
    return response
