"""Exception handlers rendering the ``{success: false, error}`` envelope."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.schemas import ErrorResp, FieldError
from interview_session import (
    InterviewError,
    NoActiveQuestionError,
    PersistenceError,
    ReportNotFoundError,
    SessionCompletedError,
    SessionExpiredError,
    SessionNotFoundError,
)
from llm_gateway import LlmGatewayError

logger = logging.getLogger(__name__)

INTERVIEW_STATUS: List[Tuple[Type[InterviewError], int]] = [
    (SessionNotFoundError, 404),
    (ReportNotFoundError, 404),
    (SessionExpiredError, 410),
    (NoActiveQuestionError, 409),
    (SessionCompletedError, 409),
    (PersistenceError, 500),
]


def _envelope(status_code: int, error: str, details: Optional[List[FieldError]] = None) -> JSONResponse:
    body = ErrorResp(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def status_for(exc: InterviewError) -> int:
    for kind, status_code in INTERVIEW_STATUS:
        if isinstance(exc, kind):
            return status_code
    return 500


async def _validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        FieldError(
            field=".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            message=str(err.get("msg", "")),
        )
        for err in exc.errors()
    ]
    logger.warning("Validation failed on %s: %s", request.url.path, [item.model_dump() for item in details])
    return _envelope(400, "Validation failed", details)


async def _interview_handler(request: Request, exc: InterviewError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("Error on %s %s: %s", request.method, request.url.path, exc)
    else:
        logger.warning("Error on %s %s: %s", request.method, request.url.path, exc)
    return _envelope(status_code, str(exc))


async def _gateway_handler(request: Request, exc: LlmGatewayError) -> JSONResponse:
    logger.error("LLM request failed on %s %s: %s", request.method, request.url.path, exc)
    return _envelope(503, f"LLM provider error: {exc}")


async def _http_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _envelope(404, "Route not found")
    return _envelope(exc.status_code, str(exc.detail))


async def _unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(500, "Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _validation_handler)
    app.add_exception_handler(InterviewError, _interview_handler)
    app.add_exception_handler(LlmGatewayError, _gateway_handler)
    app.add_exception_handler(StarletteHTTPException, _http_handler)
    app.add_exception_handler(Exception, _unhandled_handler)


__all__ = ["INTERVIEW_STATUS", "install_error_handlers", "status_for"]
