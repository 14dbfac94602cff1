"""Unit tests for field-failure extraction from validation errors."""

from __future__ import annotations

from fastapi.exceptions import RequestValidationError
import pytest
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError

from api_errors.core.validation import FieldFailure
from api_errors.core.validation import field_failures_from_request_validation
from api_errors.core.validation import field_failures_from_validation_error
from api_errors.core.validation import parameter_type_mismatch


class Address(BaseModel):
    zip_code: str = Field(min_length=5)


class Customer(BaseModel):
    name: str
    address: Address


def _request_error(*issues: dict) -> RequestValidationError:
    return RequestValidationError(list(issues))


def test_request_validation_issues_become_field_failures_in_order() -> None:
    exc = _request_error(
        {"type": "missing", "loc": ("query", "limit"), "msg": "Field required", "input": None},
        {
            "type": "string_too_short",
            "loc": ("body", "address", "zip_code"),
            "msg": "String should have at least 5 characters",
            "input": "123",
        },
        {"type": "value_error", "loc": (), "msg": "Value error, invalid request", "input": {}},
    )

    assert field_failures_from_request_validation(exc) == [
        FieldFailure(object_name="query", field="limit", rejected_value=None, message="Field required"),
        FieldFailure(
            object_name="body",
            field="address.zip_code",
            rejected_value="123",
            message="String should have at least 5 characters",
        ),
        FieldFailure(
            object_name="request",
            field="request",
            rejected_value={},
            message="Value error, invalid request",
        ),
    ]


def test_request_part_alone_is_used_as_field_name() -> None:
    exc = _request_error({"type": "missing", "loc": ("body",), "msg": "Field required", "input": None})

    (failure,) = field_failures_from_request_validation(exc)

    assert failure.object_name == "body"
    assert failure.field == "body"


def test_model_validation_failures_are_named_after_the_model() -> None:
    with pytest.raises(ValidationError) as exc_info:
        Customer.model_validate({"address": {"zip_code": "123"}})

    failures = field_failures_from_validation_error(exc_info.value)

    assert [failure.object_name for failure in failures] == ["Customer", "Customer"]
    assert [failure.field for failure in failures] == ["name", "address.zip_code"]
    assert failures[1].rejected_value == "123"
    assert failures[1].message == "String should have at least 5 characters"


def test_unparseable_scalar_parameter_is_reported_as_type_mismatch() -> None:
    exc = _request_error(
        {"type": "missing", "loc": ("query", "page"), "msg": "Field required", "input": None},
        {
            "type": "int_parsing",
            "loc": ("path", "user_id"),
            "msg": "Input should be a valid integer, unable to parse string as an integer",
            "input": "abc",
        },
        {
            "type": "uuid_parsing",
            "loc": ("query", "tenant"),
            "msg": "Input should be a valid UUID",
            "input": "nope",
        },
    )

    mismatch = parameter_type_mismatch(exc)

    assert mismatch is not None
    assert mismatch.name == "user_id"
    assert mismatch.value == "abc"
    assert mismatch.required_type_name == "int"
    assert str(mismatch) == "Input should be a valid integer, unable to parse string as an integer"


@pytest.mark.parametrize(
    ("location", "expected_name"),
    [
        (("query", "ids", 1), "ids"),
        (("header", "x-retry-count"), "x-retry-count"),
        (("cookie", "session_version"), "session_version"),
    ],
)
def test_type_mismatch_names_the_parameter_not_the_item(location: tuple, expected_name: str) -> None:
    exc = _request_error(
        {
            "type": "int_parsing",
            "loc": location,
            "msg": "Input should be a valid integer, unable to parse string as an integer",
            "input": "x",
        }
    )

    mismatch = parameter_type_mismatch(exc)

    assert mismatch is not None
    assert mismatch.name == expected_name
    assert mismatch.value == "x"


@pytest.mark.parametrize(
    "issue",
    [
        {"type": "missing", "loc": ("query", "limit"), "msg": "Field required", "input": None},
        {
            "type": "int_parsing",
            "loc": ("body", "age"),
            "msg": "Input should be a valid integer, unable to parse string as an integer",
            "input": "abc",
        },
    ],
)
def test_other_request_issues_are_not_type_mismatches(issue: dict) -> None:
    assert parameter_type_mismatch(_request_error(issue)) is None
