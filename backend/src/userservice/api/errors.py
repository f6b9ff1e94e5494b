"""Map service errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from userservice.errors import (
    ConfigurationError,
    DuplicateEmailError,
    NotFoundError,
    RuleConflictError,
    StoreFailure,
    ValidationFailure,
)

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, code: str, errors: list | None = None) -> JSONResponse:
    """Build the error body shared by every failing endpoint."""
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "code": code, "errors": errors or []},
    )


def configuration_error_response(exc: ConfigurationError, status_code: int) -> JSONResponse:
    return error_response(
        status_code,
        str(exc),
        "INVALID_RULE_CONFIGURATION",
        [{"field": exc.key, "message": exc.reason, "code": "INVALID_RULE_VALUE"}],
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for the user service error taxonomy."""

    @app.exception_handler(DuplicateEmailError)
    async def duplicate_email_handler(request: Request, exc: DuplicateEmailError):
        return error_response(
            409,
            exc.message,
            "EMAIL_ALREADY_REGISTERED",
            [v.to_dict() for v in exc.violations],
        )

    @app.exception_handler(ValidationFailure)
    async def validation_failure_handler(request: Request, exc: ValidationFailure):
        return error_response(
            400,
            exc.message,
            "VALIDATION_FAILED",
            [v.to_dict() for v in exc.violations],
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return error_response(404, str(exc), "NOT_FOUND")

    @app.exception_handler(RuleConflictError)
    async def rule_conflict_handler(request: Request, exc: RuleConflictError):
        return error_response(409, str(exc), "RULE_ALREADY_EXISTS")

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        # Reaching here means a stored rule broke a user operation
        logger.error("Rule configuration error on %s: %s", request.url.path, exc)
        return configuration_error_response(exc, 500)

    @app.exception_handler(StoreFailure)
    async def store_failure_handler(request: Request, exc: StoreFailure):
        logger.error("Store failure on %s: %s", request.url.path, exc)
        return error_response(503, "Storage unavailable", "STORE_UNAVAILABLE")
