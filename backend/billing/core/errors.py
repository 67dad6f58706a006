"""Billing errors and their JSON rendering"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from billing.core.logging_config import get_logger

logger = get_logger(__name__)


class BillingError(Exception):
    """An operation could not be completed; rendered as {"success": false, "error": ...}"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(BillingError):
    def __init__(self, message: str):
        super().__init__(message, status_code=404)


def error_response(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


async def billing_error_handler(request: Request, exc: BillingError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return error_response(exc.message, exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors (400) with a readable message"""
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    message = "; ".join(messages) or "Invalid request"
    logger.warning(f"{request.method} {request.url.path} -> 400: {message}")
    return error_response(message, 400)
