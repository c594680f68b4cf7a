"""Tests for domain exceptions (error_code, message, details)."""

import pytest

from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    CaseSearchException,
    SearchBackendError,
    SearchIndexNotFoundError,
    SearchInputException,
    SqlNotConfiguredException,
    ValidationException,
)


def test_base_exception_default_error_code() -> None:
    """Base CaseSearchException uses class name as error_code when not provided."""
    exc = CaseSearchException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "CaseSearchException"
    assert exc.details == {}


def test_base_exception_custom_error_code_and_details() -> None:
    exc = CaseSearchException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.error_code == "CUSTOM"
    assert exc.details == {"key": "value"}


def test_to_dict_shape() -> None:
    """to_dict() is the JSON body returned by the API handler."""
    exc = ValidationException("Invalid format", field="limit")
    assert exc.to_dict() == {
        "error": "VALIDATION_ERROR",
        "message": "Invalid format",
        "details": {"field": "limit"},
    }


def test_validation_exception_without_field() -> None:
    exc = ValidationException("Invalid")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {}


def test_search_input_exception_is_validation_error() -> None:
    """Search input faults map to the same 400 code as other validation errors."""
    exc = SearchInputException("Unknown entity type: foo", field="entity_types", value="foo")
    assert isinstance(exc, ValidationException)
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "entity_types", "value": "foo"}


def test_search_input_exception_without_value() -> None:
    exc = SearchInputException("too long", field="query_text")
    assert exc.details == {"field": "query_text"}


def test_authentication_exception() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_authorization_exception_default() -> None:
    exc = AuthorizationException()
    assert exc.message == "Permission denied"
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.details == {}


def test_authorization_exception_with_resource_and_action() -> None:
    exc = AuthorizationException(resource="search", action="read")
    assert exc.message == "Permission denied: read on search"
    assert exc.details == {"resource": "search", "action": "read"}


def test_sql_not_configured_exception() -> None:
    exc = SqlNotConfiguredException()
    assert "SQL" in exc.message
    assert exc.error_code == "SERVICE_UNAVAILABLE"


def test_search_index_not_found_error() -> None:
    exc = SearchIndexNotFoundError("org_acme_cases")
    assert "org_acme_cases" in exc.message
    assert exc.error_code == "SEARCH_INDEX_NOT_FOUND"
    assert exc.details == {"index": "org_acme_cases"}


def test_search_backend_error_details() -> None:
    exc = SearchBackendError("boom", index_name="org_acme_rius", status_code=500)
    assert exc.error_code == "SEARCH_BACKEND_ERROR"
    assert exc.details == {"index": "org_acme_rius", "status_code": 500}


def test_search_backend_error_minimal() -> None:
    assert SearchBackendError("unreachable").details == {}


def test_exception_is_raiseable() -> None:
    """All exceptions can be raised and caught as CaseSearchException."""
    with pytest.raises(CaseSearchException) as exc_info:
        raise SearchInputException("Bad input", field="limit", value=0)
    assert exc_info.value.error_code == "VALIDATION_ERROR"
