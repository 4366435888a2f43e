from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from depot.services.errors import DepotError, InvalidArgument

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code, "message": message})


async def depot_error_handler(request: Request, exc: DepotError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.code, reason=exc.message)
    return _error_response(exc.status_code, exc.code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    where = ".".join(str(p) for p in first.get("loc", ()))
    message = f"{where}: {first.get('msg', 'invalid request')}" if where else "Invalid request"
    return _error_response(InvalidArgument.status_code, InvalidArgument.code, message)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DepotError, depot_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
