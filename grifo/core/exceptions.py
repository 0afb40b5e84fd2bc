"""Application-level exceptions and FastAPI exception handlers."""


import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str = "Erro interno do servidor",
        status_code: int = 500,
        code: str = "INTERNAL_ERROR",
        details: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details
        super().__init__(message)

class ValidationError(AppException):
    def __init__(self, message: str = "Dados de entrada inválidos", details: Any = None):
        super().__init__(message, status_code=400, code="VALIDATION_ERROR", details=details)

class AuthenticationError(AppException):
    def __init__(self, message: str = "Não autenticado"):
        super().__init__(message, status_code=401, code="AUTHENTICATION_ERROR")

class ForbiddenError(AppException):
    def __init__(self, message: str = "Acesso negado"):
        super().__init__(message, status_code=403, code="FORBIDDEN")

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} não encontrado(a)" if not entity_id else f"{entity} '{entity_id}' não encontrado(a)"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class ConflictError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="CONFLICT")

class StorageError(AppException):
    """Raised when the object store rejects a write (upstream service error)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=502, code="STORAGE_ERROR")

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def error_body(code: str, message: str, details: Any = None) -> dict:
    body = {
        "success": False,
        "error": message,
        "code": code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details is not None:
        body["details"] = details
    return body

def _field_errors(exc: RequestValidationError) -> list[dict]:
    """Flatten pydantic errors into ``[{field, message}]`` (location prefix dropped)."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in {"body", "query", "path", "header", "form"}:
            loc = loc[1:]
        errors.append({"field": ".".join(loc) or "_general", "message": err.get("msg", "")})
    return errors

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code,
            )
        else:
            logger.info(
                "Client error on %s %s: %s (%s)",
                request.method, request.url.path, exc.message, exc.code,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError,
    ) -> JSONResponse:
        details = _field_errors(exc)
        logger.info("Request validation failed on %s: %s", request.url.path, details)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("VALIDATION_ERROR", "Dados de entrada inválidos", details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content=error_body("NOT_FOUND", "Endpoint não encontrado"),
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body("HTTP_ERROR", str(exc.detail)),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception on %s %s: %s",
            request.method, request.url.path, type(exc).__name__,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL_ERROR", "Erro interno do servidor"),
        )
