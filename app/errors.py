"""Map domain errors and unexpected failures onto the error envelope."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from app.responses import error
from app.telemetry.metrics import error_counter
from problems.errors import ErrorKind, ProblemsError

logger = logging.getLogger("problems_api")


async def _problems_error(request: Request, exc: ProblemsError):
    error_counter.labels(error_kind=exc.kind.value).inc()
    logger.info("Request failed: %s %s kind=%s details=%s", request.method, request.url.path, exc.kind.value, exc.details)
    return error(exc.kind, exc.message)


async def _request_validation_error(request: Request, exc: RequestValidationError):
    error_counter.labels(error_kind=ErrorKind.VALIDATION.value).inc()
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "Invalid request"
    return error(ErrorKind.VALIDATION, message)


async def _unhandled_error(request: Request, exc: Exception):
    error_counter.labels(error_kind=ErrorKind.INTERNAL.value).inc()
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error(ErrorKind.INTERNAL, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProblemsError, _problems_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(Exception, _unhandled_error)
