import structlog
from fastapi import Request

from core.logging import IPNEvents


async def log_api_entry(request: Request, call_next):
    """Middleware to log API entries with request details"""
    # Get a fresh logger each time to ensure test configurations are respected
    log = structlog.get_logger(__name__)

    # IPN fields arrive in the body; never log query strings that may echo them
    log.info(
        IPNEvents.API_ENTRY,
        method=request.method,
        path=request.url.path,
        client_host=request.client.host if request.client else None,
    )
    response = await call_next(request)
    return response
