# backend/utils/errors.py
import logging
import traceback

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from utils.workflow import TransitionError

logger = logging.getLogger(__name__)


# Raised on login (and on token use) by an account an administrator has blocked
class AccountBlocked(HTTPException):
    def __init__(self, block_reason: str = ""):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Your account has been blocked. Reason: {block_reason or 'No reason provided.'}",
        )
        self.block_reason = block_reason or ""


def error_body(exc: Exception, message, **extra) -> dict:
    body = {"message": message}
    if not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    body.update(extra)
    return body


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    extra = {}
    if isinstance(exc, AccountBlocked):
        extra = {"isBlocked": True, "blockReason": exc.block_reason}
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc, exc.detail, **extra),
        headers=getattr(exc, "headers", None),
    )


async def transition_error_handler(request: Request, exc: TransitionError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc, exc.message))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        # Drop the leading "body"/"query" segment from the location
        loc = ".".join(str(part) for part in err.get("loc", ())[1:])
        problems.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "Invalid request"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(exc, "; ".join(problems) or "Invalid request"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(exc, "Server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(TransitionError, transition_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
