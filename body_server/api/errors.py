"""Shared HTTP error helpers and exception handlers for API routes."""
from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from body_server.service.body_source import BodyError


def error_detail(code: str, reason: str) -> dict[str, str]:
    """Build an error payload body."""
    return {"code": code, "reason": reason}


def http_500(exc: Exception, reason: str | None = None) -> HTTPException:
    """Return 500 internal_error with reason."""
    return HTTPException(status_code=500, detail=error_detail("internal_error", reason or str(exc)))


def body_error(exc: BodyError) -> HTTPException:
    """Map a body loading failure to 500, keeping its kind in the reason."""
    return http_500(exc, reason=f"{exc.kind}: {exc.detail}")


def register_exception_handlers(app: FastAPI, logger: logging.Logger) -> None:
    """Register process-wide FastAPI exception handlers."""

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(_: Request, exc: HTTPException):
        # Error payloads are returned bare, not wrapped in {"detail": ...}.
        content = exc.detail if isinstance(exc.detail, dict) else {"detail": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(_: Request, exc: Exception):
        logger.exception("Unhandled API exception")
        return JSONResponse(status_code=500, content=error_detail("internal_error", str(exc)))
