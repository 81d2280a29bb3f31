"""HTTP mapping for code allocation failures shared by creation endpoints."""

import structlog
from fastapi import HTTPException

from servicedesk.services.codes.exceptions import CodeAllocationExhausted, CodeAllocationFailed

logger = structlog.get_logger(__name__)

# Seconds a client should wait before repeating a request that lost every allocation race
RETRY_AFTER_SECONDS = 1


def allocation_http_error(exc: CodeAllocationExhausted | CodeAllocationFailed) -> HTTPException:
    """Convert an allocation failure into a retryable 503 or a generic 500."""
    if isinstance(exc, CodeAllocationExhausted):
        return HTTPException(
            status_code=503,
            detail="Could not allocate a unique code, please try again",
            headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
        )
    logger.error("Code allocation failed", prefix=exc.prefix, error=repr(exc.__cause__))
    return HTTPException(status_code=500, detail="Server error")
