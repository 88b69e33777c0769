# tuma_helper/core/exceptions.py
import logging

from fastapi import Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tuma_helper.core import notices

logger = logging.getLogger(__name__)


class DomainError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "domain_error"
    title = "Error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    title = "Not found"


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    title = "Not allowed"


class AuthenticationRequired(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_required"
    title = "Authentication required"


class ValidationFailed(DomainError):
    status_code = 422
    code = "validation_failed"
    title = "Error"


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    title = "Conflict"


class InvalidTransition(Conflict):
    code = "invalid_transition"
    title = "Error updating booking"


class PaymentError(DomainError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "payment_error"
    title = "Payment failed"


class PaymentProviderUnavailable(PaymentError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "payment_provider_error"


def _error_body(message: str, code: str, notice: notices.Notice) -> dict:
    return {"detail": message, "code": code, "notice": notice.model_dump()}


async def domain_exception_handler(request: Request, exc: DomainError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.code, notices.failure(exc.title, exc.message)),
        headers={"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None,
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        notice = notices.SIGN_IN_REQUIRED
    else:
        notice = notices.failure("Error", str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), "http_error", notice),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
    body = _error_body(message, "validation_failed", notices.failure("Please check your input", message))
    body["errors"] = [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in errors]
    return JSONResponse(status_code=422, content=body)


async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body("Service temporarily unavailable", "store_unavailable", notices.GENERIC_FAILURE),
    )
