"""
Tests for error handling.
Tests custom exceptions, constraint classification and error response formatting.
"""

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, OperationalError
from unittest.mock import Mock
import json

from app.services.error_handler import ErrorHandlerService
from app.utils.exceptions import (
    ConflictError,
    DuplicateEmailError,
    DuplicatePhoneError,
    FileTooLargeError,
    ForbiddenError,
    InternalServerError,
    InvalidCredentialsError,
    InvalidFileTypeError,
    InvalidInputError,
    InvalidTokenError,
    ListingNotFoundError,
    ListingOwnershipError,
    NotFoundError,
    ServerMisconfiguredError,
    TokenExpiredError,
    UnauthorizedError,
    UpstreamFailureError,
    UserNotFoundError
)


class UniqueViolation(Exception):
    """Driver exception carrying the violated constraint's name, like asyncpg's."""

    def __init__(self, constraint_name: str):
        super().__init__("duplicate key value violates unique constraint")
        self.constraint_name = constraint_name


def integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO users ...", {}, orig)


class TestExceptions:
    """Test status and error codes of the exception hierarchy."""

    @pytest.mark.parametrize("exception,status_code,error_code", [
        (InvalidInputError("bad"), 400, "INVALID_INPUT"),
        (UnauthorizedError(), 401, "UNAUTHORIZED"),
        (InvalidCredentialsError(), 401, "UNAUTHORIZED"),
        (InvalidTokenError(), 401, "UNAUTHORIZED"),
        (TokenExpiredError(), 401, "UNAUTHORIZED"),
        (ForbiddenError(), 403, "FORBIDDEN"),
        (ListingOwnershipError(), 403, "FORBIDDEN"),
        (NotFoundError("Thing"), 404, "NOT_FOUND"),
        (ListingNotFoundError(1), 404, "NOT_FOUND"),
        (UserNotFoundError(), 404, "NOT_FOUND"),
        (ConflictError("taken"), 400, "CONFLICT"),
        (DuplicateEmailError(), 400, "CONFLICT"),
        (DuplicatePhoneError(), 400, "CONFLICT"),
        (InvalidFileTypeError("a.txt", "text/plain"), 400, "INVALID_FILE_TYPE"),
        (FileTooLargeError("a.jpg", 10, 5), 400, "FILE_TOO_LARGE"),
        (ServerMisconfiguredError(), 500, "SERVER_MISCONFIGURED"),
        (UpstreamFailureError(), 500, "UPSTREAM_FAILURE"),
        (InternalServerError(), 500, "INTERNAL_SERVER_ERROR"),
    ])
    def test_status_and_code(self, exception, status_code, error_code):
        assert exception.status_code == status_code
        assert exception.error_code == error_code

    def test_unauthorized_sets_bearer_challenge(self):
        assert InvalidTokenError().headers == {"WWW-Authenticate": "Bearer"}

    def test_not_found_message(self):
        assert ListingNotFoundError(42).detail == "Listing not found with ID: 42"
        assert UserNotFoundError().detail == "User not found"


class TestErrorHandlerService:
    """Test error handler service functionality."""

    def test_format_error_response(self):
        """Test error response formatting."""
        response = ErrorHandlerService.format_error_response(
            error_code="TEST_ERROR",
            message="Test error message",
            details=[{"field": "test", "message": "Test field error"}],
            request_id="test123"
        )

        assert response["error"]["code"] == "TEST_ERROR"
        assert response["error"]["message"] == "Test error message"
        assert response["error"]["request_id"] == "test123"
        assert response["error"]["details"] == [{"field": "test", "message": "Test field error"}]
        assert response["error"]["timestamp"].endswith("Z")

    def test_format_error_response_without_details(self):
        response = ErrorHandlerService.format_error_response("X", "y")

        assert "details" not in response["error"]
        assert "request_id" not in response["error"]

    def test_handle_invalid_input(self):
        exception = InvalidInputError(
            "Missing required fields",
            field_errors=[{"field": "title", "message": "Field is required"}]
        )

        response = ErrorHandlerService.handle_api_exception(exception)
        body = json.loads(response.body)

        assert response.status_code == 400
        assert body["error"]["code"] == "INVALID_INPUT"
        assert body["error"]["details"] == [{"field": "title", "message": "Field is required"}]
        assert len(body["error"]["request_id"]) == 8

    def test_handle_conflict_reports_field(self):
        response = ErrorHandlerService.handle_api_exception(DuplicatePhoneError())
        body = json.loads(response.body)

        assert response.status_code == 400
        assert body["error"]["message"] == "Phone number already registered"
        assert body["error"]["details"][0]["field"] == "phone"

    def test_handle_unauthorized_keeps_header(self):
        response = ErrorHandlerService.handle_api_exception(TokenExpiredError())

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert json.loads(response.body)["error"]["message"] == "Token has expired"

    def test_request_id_taken_from_request_state(self):
        request = Mock()
        request.state.request_id = "req-1234"
        request.url.path = "/api/listings"

        response = ErrorHandlerService.handle_api_exception(ListingNotFoundError(1), request)

        assert json.loads(response.body)["error"]["request_id"] == "req-1234"

    def test_handle_validation_error(self):
        """Test validation error handling; inputs are never echoed."""
        mock_error = Mock()
        mock_error.errors.return_value = [
            {"loc": ("body", "password"), "msg": "Input should be a valid string", "type": "string_type", "input": 12345678},
            {"loc": ("query", "category"), "msg": "Field required", "type": "missing", "input": None},
        ]

        response = ErrorHandlerService.handle_validation_error(mock_error)
        body = json.loads(response.body)

        assert response.status_code == 400
        assert body["error"]["code"] == "INVALID_INPUT"
        assert body["error"]["details"][0] == {
            "field": "body -> password",
            "message": "Input should be a valid string",
            "type": "string_type"
        }
        assert "12345678" not in response.body.decode()

    @pytest.mark.parametrize("orig,expected", [
        (UniqueViolation("uq_users_email"), DuplicateEmailError),
        (UniqueViolation("uq_users_phone"), DuplicatePhoneError),
        (Exception("UNIQUE constraint failed: users.phone"), DuplicatePhoneError),
        (Exception("UNIQUE constraint failed: users.email"), DuplicateEmailError),
    ])
    def test_conflict_from_integrity_error(self, orig, expected):
        conflict = ErrorHandlerService.conflict_from_integrity_error(integrity_error(orig))

        assert isinstance(conflict, expected)

    def test_constraint_name_from_wrapped_driver_error(self):
        adapted = Exception("adapted driver error")
        adapted.__cause__ = UniqueViolation("uq_users_email")

        assert ErrorHandlerService.constraint_name(integrity_error(adapted)) == "uq_users_email"

    def test_unknown_constraint_is_not_classified(self):
        error = integrity_error(UniqueViolation("listings_user_id_fkey"))

        assert ErrorHandlerService.conflict_from_integrity_error(error) is None

    def test_handle_database_integrity_error(self):
        response = ErrorHandlerService.handle_database_error(integrity_error(UniqueViolation("uq_users_email")))
        body = json.loads(response.body)

        assert response.status_code == 400
        assert body["error"]["code"] == "CONFLICT"
        assert body["error"]["message"] == "Email already registered"

    def test_handle_database_error_hides_driver_detail(self):
        error = OperationalError("SELECT 1", {}, Exception("password authentication failed for user admin"))

        response = ErrorHandlerService.handle_database_error(error)

        assert response.status_code == 500
        assert json.loads(response.body)["error"]["message"] == "Database operation failed"
        assert "password" not in response.body.decode()

    def test_handle_http_exception(self):
        response = ErrorHandlerService.handle_http_exception(HTTPException(status_code=503, detail="Database connection failed"))
        body = json.loads(response.body)

        assert response.status_code == 503
        assert body["error"]["code"] == "HTTP_503"

    def test_handle_unexpected_error(self):
        response = ErrorHandlerService.handle_unexpected_error(RuntimeError("secret internals"))
        body = json.loads(response.body)

        assert response.status_code == 500
        assert body["error"]["code"] == "INTERNAL_SERVER_ERROR"
        assert "secret internals" not in response.body.decode()
