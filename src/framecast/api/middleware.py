"""Error handling and upload size middleware."""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from framecast.models.errors import (
    ErrorResponse,
    FramecastError,
    ServerBusy,
    TranscodeFailed,
    UploadRejected,
)

logger = logging.getLogger(__name__)


async def framecast_error_handler(request: Request, exc: FramecastError) -> JSONResponse:
    """Handle FramecastError exceptions."""
    status_code = _get_status_code(exc)
    if status_code >= 500:
        logger.error(
            "%s on %s %s: %s %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
            exc.details,
        )
        if isinstance(exc, TranscodeFailed) and exc.stderr_tail:
            logger.error("ffmpeg stderr tail (%s):\n%s", exc.cause, exc.stderr_tail)
    else:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    response = ErrorResponse.from_exception(exc)
    return JSONResponse(status_code=status_code, content=response.model_dump())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed form data is a bad upload, not an unprocessable entity."""
    logger.info("Invalid request on %s: %s", request.url.path, exc.errors())
    response = ErrorResponse(error="Invalid upload request", error_type="UploadRejected")
    return JSONResponse(status_code=400, content=response.model_dump())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    response = ErrorResponse(error="Internal server error", error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content=response.model_dump())


def _get_status_code(exc: FramecastError) -> int:
    """Map error type to HTTP status code."""
    if isinstance(exc, UploadRejected):
        return 400
    elif isinstance(exc, ServerBusy):
        return 503
    return 500


class UploadSizeLimitMiddleware:
    """Reject POST bodies whose declared length is over the upload ceiling.

    This runs before multipart parsing, so oversized uploads are never spooled
    to disk. Bodies without a Content-Length are bounded by the streaming save.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int, message: str):
        self.app = app
        self.max_body_bytes = max_body_bytes
        self.message = message

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "POST":
            declared = dict(scope["headers"]).get(b"content-length")
            if declared is not None and declared.isdigit() and int(declared) > self.max_body_bytes:
                logger.info(
                    "Rejected %s: Content-Length %s over %d", scope["path"], declared, self.max_body_bytes
                )
                body = ErrorResponse(error=self.message, error_type=UploadRejected.__name__)
                response = JSONResponse(status_code=400, content=body.model_dump())
                await response(scope, receive, send)
                return
        await self.app(scope, receive, send)
