import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from notevault.errors import (
    AccessDeniedError,
    AuthenticationError,
    NotFoundError,
    ShareLinkError,
    ValidationError,
)

logger = logging.getLogger(__name__)

UNAUTHENTICATED_MESSAGE = "Not authenticated"
SHARE_LINK_MESSAGE = "Share link is invalid or expired"


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes.

    Credential and share link failures are reported with one fixed message each, so the
    client cannot tell which check failed.
    """
    if isinstance(exc, AuthenticationError):
        # Credential failures share one message; only a failed login reports its own
        message = str(exc) if type(exc) is AuthenticationError else UNAUTHENTICATED_MESSAGE
        return create_json_error_response(status_code=401, message=message, error_type="authentication_error")
    if isinstance(exc, ShareLinkError):
        return create_json_error_response(status_code=404, message=SHARE_LINK_MESSAGE, error_type="share_link_invalid")

    if isinstance(exc, AccessDeniedError):
        status_code = 403
        error_type = "access_denied"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        # Default for any other UserError subclass
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
