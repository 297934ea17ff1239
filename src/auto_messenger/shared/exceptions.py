from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)


# ───────────────────────── Base & Domain Exceptions ─────────────────────────
class DomainError(Exception):
    """Base class for domain-level errors. Services should raise these, never HTTPException."""
    code: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str
    details: Optional[Dict[str, Any]]

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or self.__class__.__name__)
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.message = message or self.__class__.__name__
        self.details = details


class ServiceUnavailableError(DomainError):
    code = "service_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class InternalServerError(DomainError):
    code = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# ───────────────────────────── Helpers ──────────────────────────────────────

def _problem(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    return body


# ─────────────────────────── Registration ───────────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def handle_app_error(_req: Request, exc: DomainError):
        return JSONResponse(
            status_code=exc.status_code,
            content=_problem(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_req: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_problem("validation_error", "Validation failed.", {"errors": exc.errors()}),
        )

    @app.exception_handler(HTTPException)
    async def handle_http_exception(_req: Request, exc: HTTPException):
        detail = getattr(exc, "detail", None)
        return JSONResponse(
            status_code=exc.status_code,
            content=_problem("http_error", str(detail) if detail else "HTTP error", None),
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(req: Request, exc: Exception):
        logger.error("Unhandled API error", path=req.url.path, error=str(exc), exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_problem("internal_error", "Internal server error", {"type": exc.__class__.__name__}),
        )
