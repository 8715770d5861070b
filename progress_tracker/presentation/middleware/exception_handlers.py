"""
Exception handlers globais: exceções de domínio viram respostas JSON
padronizadas: {error, detail, request_id} (+ errors nas falhas de validação).
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from progress_tracker.domain.systems.bars.exceptions import (
    BarNotFoundError,
    BarValidationError,
    NotTimeBasedBarError,
)

logger = logging.getLogger(__name__)


def _request_id(request: Request):
    return getattr(request.state, "request_id", None)


def _error(request: Request, status_code: int, error: str, detail: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail, **extra, "request_id": _request_id(request)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registra os handlers de exceção na app FastAPI."""

    @app.exception_handler(BarValidationError)
    async def bar_validation_error_handler(request: Request, exc: BarValidationError):
        return _error(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "validation_error",
            str(exc),
            errors=[e.to_dict() for e in exc.errors],
        )

    @app.exception_handler(BarNotFoundError)
    async def not_found_error_handler(request: Request, exc: BarNotFoundError):
        return _error(request, status.HTTP_404_NOT_FOUND, "not_found", str(exc))

    @app.exception_handler(NotTimeBasedBarError)
    async def not_time_based_error_handler(request: Request, exc: NotTimeBasedBarError):
        return _error(request, status.HTTP_409_CONFLICT, "not_time_based", str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return _error(request, status.HTTP_400_BAD_REQUEST, "bad_request", str(exc))

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return _error(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "internal_server_error",
            "Erro interno do servidor",
        )
