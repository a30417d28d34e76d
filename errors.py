"""Domain exceptions and their HTTP rendering."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base class for errors raised by services and the auth layer."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def code(self) -> str:
        return self.__class__.__name__


class AuthenticationError(DomainError):
    """Missing, malformed, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(DomainError):
    """Authenticated, but the role does not satisfy the route policy."""

    status_code = status.HTTP_403_FORBIDDEN


class ConfigurationError(DomainError):
    """Server is missing a secret or credential it needs."""


class ValidationError(DomainError):
    """Request data failed business validation."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class ProviderError(DomainError):
    """The payment provider rejected a call or could not be reached."""


class ProviderTimeoutError(ProviderError):
    """The payment provider did not answer within the configured timeout."""


class PaymentNotSucceeded(ProviderError):
    """The payment intent exists but is not in the succeeded state."""

    def __init__(self, provider_status: str):
        self.provider_status = provider_status
        super().__init__(f"Payment not successful. Status: {provider_status}")


class ForeignKeyViolation(DomainError):
    """A referenced row (user, vehicle, location, booking) does not exist."""


class InvalidIdentifierFormat(DomainError):
    """An identifier could not be parsed."""


class PersistenceFailure(DomainError):
    """Database work failed and was rolled back."""


def register_error_handlers(app: FastAPI) -> None:
    """Install handlers rendering domain errors as JSON responses."""

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        if isinstance(exc, ConfigurationError):
            logger.critical(
                "Configuration error on %s %s: %s", request.method, request.url.path, exc.message
            )
        elif exc.status_code >= 500:
            logger.error(
                "%s on %s %s: %s",
                exc.code,
                request.method,
                request.url.path,
                exc.message,
                exc_info=exc,
            )
        else:
            logger.warning(
                "%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
                "message": error.get("msg", ""),
            }
            for error in exc.errors()
        ]
        logger.warning("Validation failed on %s %s: %s", request.method, request.url.path, errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Validation failed", "errors": errors},
        )
