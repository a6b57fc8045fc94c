# backend/portal/errors.py
"""
Error kinds raised by the services and their HTTP rendering.

Services raise `PortalError` with one of the closed `ErrorKind` values.
Database exceptions are folded into the same kinds by `normalize_db_error`
so routers never branch on driver-specific shapes.
"""
from __future__ import annotations

import enum
import logging
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    NoResultFound,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)

logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    validation = "validation"
    not_found = "not_found"
    conflict = "conflict"
    transient = "transient"
    unknown = "unknown"


STATUS_FOR_KIND: Dict[ErrorKind, int] = {
    ErrorKind.validation: 400,
    ErrorKind.not_found: 404,
    ErrorKind.conflict: 409,
    ErrorKind.transient: 503,
    ErrorKind.unknown: 500,
}


class PortalError(Exception):
    def __init__(self, kind: ErrorKind, message: str, fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.fields = fields or {}

    @property
    def status_code(self) -> int:
        return STATUS_FOR_KIND[self.kind]


class ValidationFailed(PortalError):
    def __init__(self, fields: Dict[str, str], message: str = "Validation failed"):
        super().__init__(ErrorKind.validation, message, fields)


class LoginRequired(Exception):
    """Raised by the access gates; rendered as 401 (or 403) plus a redirect target."""

    def __init__(self, redirect: str, detail: str = "Not authenticated", status_code: int = 401):
        super().__init__(detail)
        self.redirect = redirect
        self.detail = detail
        self.status_code = status_code


def normalize_db_error(exc: SQLAlchemyError) -> PortalError:
    if isinstance(exc, IntegrityError):
        return PortalError(ErrorKind.conflict, "Conflicting write rejected by the database")
    if isinstance(exc, NoResultFound):
        return PortalError(ErrorKind.not_found, "Row not found")
    if isinstance(exc, (OperationalError, DisconnectionError, PoolTimeoutError)):
        return PortalError(ErrorKind.transient, "Database temporarily unavailable")
    return PortalError(ErrorKind.unknown, f"Database error: {type(exc).__name__}")


def _portal_error_body(exc: PortalError) -> dict:
    body = {"detail": exc.message, "kind": exc.kind.value}
    if exc.fields:
        body["errors"] = exc.fields
    return body


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PortalError)
    async def _on_portal_error(request: Request, exc: PortalError):
        if exc.kind in (ErrorKind.transient, ErrorKind.unknown):
            logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.kind.value)
        return JSONResponse(status_code=exc.status_code, content=_portal_error_body(exc))

    @app.exception_handler(SQLAlchemyError)
    async def _on_db_error(request: Request, exc: SQLAlchemyError):
        logger.exception("%s %s: backend request failed", request.method, request.url.path)
        err = normalize_db_error(exc)
        return JSONResponse(status_code=err.status_code, content=_portal_error_body(err))

    @app.exception_handler(LoginRequired)
    async def _on_login_required(request: Request, exc: LoginRequired):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "redirect": exc.redirect},
        )
