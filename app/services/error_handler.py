"""
Error handling service for consistent error response formatting and logging.
Every exception is mapped to an HTTP response here and nowhere else.
"""

from typing import Dict, Any, Optional, List
from datetime import datetime, timezone
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from app.utils.exceptions import (
    APIException,
    ConflictError,
    DuplicateEmailError,
    DuplicatePhoneError,
    InvalidInputError
)
import logging
import uuid

logger = logging.getLogger(__name__)


class ErrorHandlerService:
    """
    Service for handling and formatting errors consistently across the application.
    Raw database and storage error details are logged but never returned to clients.
    """

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Format error response in a consistent structure.

        Args:
            error_code: Error code identifier
            message: Human-readable error message
            details: Optional list of detailed error information
            request_id: Optional request identifier for tracking

        Returns:
            Formatted error response dictionary
        """
        response = {
            "error": {
                "code": error_code,
                "message": message,
                "timestamp": ErrorHandlerService._get_current_timestamp(),
            }
        }

        if details:
            response["error"]["details"] = details

        if request_id:
            response["error"]["request_id"] = request_id

        return response

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle custom API exceptions with structured response.

        Args:
            exception: API exception instance
            request: Optional FastAPI request object

        Returns:
            JSON response with formatted error
        """
        request_id = ErrorHandlerService._get_request_id(request)

        log = logger.error if exception.status_code >= 500 else logger.warning
        log(
            f"API Exception [{request_id}]: {exception.error_code} - {exception.detail}",
            extra={
                "error_code": exception.error_code,
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        details = None
        if isinstance(exception, InvalidInputError):
            details = exception.field_errors
        elif isinstance(exception, ConflictError) and exception.field:
            details = [{"field": exception.field, "message": exception.detail}]

        error_response = ErrorHandlerService.format_error_response(
            error_code=exception.error_code or "API_ERROR",
            message=exception.detail,
            details=details,
            request_id=request_id
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=error_response,
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        exception: Any,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle request validation errors with field information.
        Input values are deliberately left out so passwords are never echoed.

        Args:
            exception: FastAPI or Pydantic validation error
            request: Optional FastAPI request object

        Returns:
            400 JSON response with validation error details
        """
        request_id = ErrorHandlerService._get_request_id(request)

        validation_details = []
        for error in exception.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            validation_details.append({
                "field": field_path,
                "message": error["msg"],
                "type": error["type"]
            })

        logger.warning(
            f"Validation Error [{request_id}]: {len(validation_details)} field errors",
            extra={
                "error_count": len(validation_details),
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code="INVALID_INPUT",
            message="Request validation failed",
            details=validation_details,
            request_id=request_id
        )

        return JSONResponse(status_code=400, content=error_response)

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle database errors that escaped the service layer.

        Args:
            exception: SQLAlchemy error
            request: Optional FastAPI request object

        Returns:
            JSON response with a generic message
        """
        if isinstance(exception, IntegrityError):
            conflict = ErrorHandlerService.conflict_from_integrity_error(exception)
            if conflict is not None:
                return ErrorHandlerService.handle_api_exception(conflict, request)

        request_id = ErrorHandlerService._get_request_id(request)

        logger.error(
            f"Database Error [{request_id}]: {type(exception).__name__} - {str(exception)}",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__
            },
            exc_info=exception
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code="DATABASE_ERROR",
            message="Database operation failed",
            request_id=request_id
        )

        return JSONResponse(status_code=500, content=error_response)

    @staticmethod
    def handle_http_exception(
        exception: HTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle FastAPI HTTP exceptions.

        Args:
            exception: HTTP exception
            request: Optional FastAPI request object

        Returns:
            JSON response with HTTP error information
        """
        request_id = ErrorHandlerService._get_request_id(request)

        logger.warning(
            f"HTTP Exception [{request_id}]: {exception.status_code} - {exception.detail}",
            extra={
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code=f"HTTP_{exception.status_code}",
            message=str(exception.detail),
            request_id=request_id
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=error_response,
            headers=exception.headers
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle unexpected errors with secure error responses.

        Args:
            exception: Unexpected exception
            request: Optional FastAPI request object

        Returns:
            JSON response with generic error message
        """
        request_id = ErrorHandlerService._get_request_id(request)

        logger.error(
            f"Unexpected Error [{request_id}]: {type(exception).__name__} - {str(exception)}",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__
            },
            exc_info=exception
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code="INTERNAL_SERVER_ERROR",
            message="An unexpected error occurred. Please try again later.",
            request_id=request_id
        )

        return JSONResponse(status_code=500, content=error_response)

    @staticmethod
    def constraint_name(exception: IntegrityError) -> str:
        """
        Name of the constraint an integrity error tripped.

        asyncpg exposes `constraint_name` on the driver exception (wrapped by
        SQLAlchemy's adapter); other drivers only carry it in the message.
        """
        orig = exception.orig
        for candidate in (orig, getattr(orig, "__cause__", None)):
            name = getattr(candidate, "constraint_name", None)
            if name:
                return name
        return str(orig)

    @staticmethod
    def conflict_from_integrity_error(exception: IntegrityError) -> Optional[ConflictError]:
        """
        Map a unique-constraint violation on users to a field-specific conflict.

        Returns:
            ConflictError for a known unique field, None otherwise
        """
        name = ErrorHandlerService.constraint_name(exception).lower()
        if "email" in name:
            return DuplicateEmailError()
        if "phone" in name:
            return DuplicatePhoneError()
        return None

    @staticmethod
    def _get_request_id(request: Optional[Request]) -> str:
        """Reuse the request ID assigned by the logging middleware when present."""
        if request is not None:
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                return request_id
        return str(uuid.uuid4())[:8]

    @staticmethod
    def _get_current_timestamp() -> str:
        """Get current timestamp in ISO format."""
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
