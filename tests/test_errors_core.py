# -*- coding: utf-8 -*-
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, OperationalError

from affiliate_portal.core.errors_core import (
    DuplicateConversionError,
    InvalidTransitionError,
    MissingRequiredFieldError,
    NotFoundError,
    ValidationError,
    normalize_exception,
)


def test_payload_carries_code_message_and_field():
    err = ValidationError("Referenced entity belongs to another brand.", field="affiliate_id")
    assert err.to_payload() == {
        "error": "validation_error",
        "message": "Referenced entity belongs to another brand.",
        "field": "affiliate_id",
    }
    assert err.http_status == 422


def test_domain_error_statuses():
    assert DuplicateConversionError(3).http_status == 409
    assert InvalidTransitionError("paid", "pending").http_status == 409
    assert MissingRequiredFieldError("transaction_id").http_status == 422
    assert NotFoundError().http_status == 404


def test_duplicate_conversion_details():
    err = DuplicateConversionError(3, conversion_id=9)
    assert err.details == {"click_id": 3, "conversion_id": 9}


def test_domain_errors_are_raisable():
    err = InvalidTransitionError("paid", "pending")
    try:
        raise err
    except InvalidTransitionError as caught:
        assert caught is err
        assert str(caught).startswith("invalid_transition:")


def test_normalize_integrity_error_is_conflict():
    exc = IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed"))
    status_code, payload = normalize_exception(exc)
    assert status_code == 409
    assert payload["error"] == "conflict"


def test_normalize_storage_error_hides_details():
    exc = OperationalError("SELECT 1", {}, Exception("password=secret"))
    status_code, payload = normalize_exception(exc)
    assert status_code == 503
    assert payload["error"] == "persistence_error"
    assert "secret" not in str(payload)


def test_normalize_http_exception():
    status_code, payload = normalize_exception(HTTPException(status_code=418, detail="teapot"))
    assert status_code == 418
    assert payload == {"error": "http_error", "message": "teapot"}


def test_normalize_unknown_exception():
    status_code, payload = normalize_exception(RuntimeError("boom"))
    assert status_code == 500
    assert payload == {"error": "internal_error", "message": "Internal server error."}
