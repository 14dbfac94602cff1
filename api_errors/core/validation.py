"""Field-failure descriptors extracted from framework validation errors."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from api_errors.exceptions import ArgumentTypeMismatchError

REQUEST_PARTS = {"body", "query", "path", "header", "cookie"}
SCALAR_PARAMETER_PARTS = {"query", "path", "header", "cookie"}

_PARSING_ERROR_TYPES: dict[str, str] = {
    "int_parsing": "int",
    "int_from_float": "int",
    "float_parsing": "float",
    "bool_parsing": "bool",
    "uuid_parsing": "UUID",
    "decimal_parsing": "Decimal",
    "date_parsing": "date",
    "date_from_datetime_parsing": "date",
    "datetime_parsing": "datetime",
    "datetime_from_date_parsing": "datetime",
    "time_parsing": "time",
    "time_delta_parsing": "timedelta",
}


@dataclass(frozen=True)
class FieldFailure:
    """One field that failed validation, as reported by a validator."""

    object_name: str
    field: str
    rejected_value: Any
    message: str


def field_failures_from_request_validation(exc: RequestValidationError) -> list[FieldFailure]:
    """Describe each issue of a FastAPI request validation error."""
    failures: list[FieldFailure] = []
    for issue in exc.errors():
        location = tuple(issue.get("loc", ()))
        part = str(location[0]) if location and location[0] in REQUEST_PARTS else "request"
        failures.append(
            FieldFailure(
                object_name=part,
                field=_format_location(location),
                rejected_value=issue.get("input"),
                message=_issue_message(issue),
            )
        )
    return failures


def field_failures_from_validation_error(exc: ValidationError) -> list[FieldFailure]:
    """Describe each issue of a pydantic model validation error."""
    return [
        FieldFailure(
            object_name=exc.title,
            field=_format_location(tuple(issue.get("loc", ()))),
            rejected_value=issue.get("input"),
            message=_issue_message(issue),
        )
        for issue in exc.errors()
    ]


def parameter_type_mismatch(exc: RequestValidationError) -> ArgumentTypeMismatchError | None:
    """Return the first scalar parameter that could not be parsed, if any."""
    for issue in exc.errors():
        location = tuple(issue.get("loc", ()))
        required_type = _PARSING_ERROR_TYPES.get(str(issue.get("type")))
        if required_type is None or len(location) < 2 or location[0] not in SCALAR_PARAMETER_PARTS:
            continue
        return ArgumentTypeMismatchError(
            name=str(location[1]),
            value=issue.get("input"),
            required_type=required_type,
            detail=_issue_message(issue),
        )
    return None


def _issue_message(issue: Mapping[str, Any]) -> str:
    return str(issue.get("msg", "Invalid value"))


def _format_location(location: tuple[Any, ...]) -> str:
    filtered = [str(part) for part in location if part not in REQUEST_PARTS]
    if filtered:
        return ".".join(filtered)

    if not location:
        return "request"

    return str(location[0])
