# File: common/exceptions/exception_handlers.py

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from civiclens.common.exceptions.workflow_errors import InvalidStateTransition
from civiclens.common.logging.logger import log_error
from civiclens.common.schemas.standard_response import ErrorResponse


def build_error_response(status_code: int, detail: str, message: str = None, error_code: str = None):
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            detail=detail,
            message=message or detail,
            error_code=error_code,
            status="error",
        ).model_dump()
    )


def register_exception_handlers(app: FastAPI):
    """
    Register global exception handlers for all expected error types.
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handles Pydantic validation errors (e.g., missing fields, wrong types, etc.)
        """
        details = []
        for err in exc.errors():
            loc = err.get("loc", [])
            msg = err.get("msg", "Invalid input.")
            field = loc[-1] if loc else "field"
            details.append(f"{field}: {msg}")

        error_message = "; ".join(details)

        log_error("Validation error", extra={
            "path": request.url.path,
            "method": request.method,
            "errors": error_message
        })

        return build_error_response(HTTP_400_BAD_REQUEST, detail=error_message)

    @app.exception_handler(InvalidStateTransition)
    async def state_transition_handler(request: Request, exc: InvalidStateTransition):
        log_error("Invalid submission state transition", extra={
            "path": request.url.path,
            "method": request.method,
            "state": exc.current,
            "action": exc.action,
        })
        return build_error_response(HTTP_409_CONFLICT, detail=exc.message, error_code="SUBMISSION_STATE")

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """
        Handles all HTTP exceptions (including custom ones).
        """
        log_error("HTTPException caught", extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "detail": str(exc.detail),
        })

        return build_error_response(
            status_code=exc.status_code,
            detail=str(exc.detail),
            error_code=getattr(exc, "error_code", None)
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Handles uncaught general exceptions.
        """
        log_error("Unhandled exception", extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
        }, exc_info=True)

        return build_error_response(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error occurred."
        )
