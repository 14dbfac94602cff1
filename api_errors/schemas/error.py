"""Error payload schemas returned by the API error handlers."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from http import HTTPStatus
from typing import TYPE_CHECKING
from typing import Any
from typing import ClassVar

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_serializer
from pydantic import model_validator
from pydantic.alias_generators import to_camel

from api_errors.schemas.type_tag import TaggedModel
from api_errors.schemas.type_tag import TypeTag
from api_errors.schemas.type_tag import resolve_type_tag

if TYPE_CHECKING:
    from api_errors.core.validation import FieldFailure

UNEXPECTED_ERROR_MESSAGE = "Unexpected error"
TIMESTAMP_FORMAT = "%d-%m-%Y %I:%M:%S"
ERROR_CODE_MIN = -32768
ERROR_CODE_MAX = 32767


class SubError(TaggedModel, BaseModel):
    """Base for detail entries attached to an error payload."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValidationSubError(SubError):
    """Single field that failed validation."""

    type_tag: ClassVar[TypeTag] = TypeTag.API_VALIDATION_ERROR

    object_name: str | None = Field(default=None, alias="object")
    field: str | None = None
    rejected_value: Any = None
    message: str | None = None


class ErrorPayload(TaggedModel, BaseModel):
    """Canonical error payload for one failed request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type_tag: ClassVar[TypeTag] = TypeTag.API_ERROR

    status_code: int = Field(frozen=True)
    status: HTTPStatus = Field(frozen=True)
    timestamp: datetime = Field(default_factory=datetime.now)
    message: str | None = None
    debug_message: str | None = None
    error_code: int = Field(default=0, ge=ERROR_CODE_MIN, le=ERROR_CODE_MAX)
    sub_errors: list[SubError] | None = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _derive_status_code(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("status") is None:
            return data

        data = dict(data)
        status = HTTPStatus(data["status"])
        for key in ("status_code", "statusCode"):
            supplied = data.pop(key, None)
            if supplied is not None and supplied != status.value:
                raise ValueError(f"Status code {supplied} does not match status {status.name}")
        data["status"] = status
        data["status_code"] = status.value
        return data

    @field_serializer("status")
    def _serialize_status(self, status: HTTPStatus) -> str:
        return status.name

    @field_serializer("timestamp")
    def _serialize_timestamp(self, timestamp: datetime) -> str:
        return timestamp.strftime(TIMESTAMP_FORMAT)

    @classmethod
    def from_exception(
        cls,
        status: HTTPStatus | int,
        exc: BaseException,
        *,
        message: str = UNEXPECTED_ERROR_MESSAGE,
        error_code: int = 0,
    ) -> ErrorPayload:
        """Build a payload carrying the failure text as the debug message."""
        return cls(status=status, message=message, debug_message=str(exc), error_code=error_code)

    def add_sub_error(self, sub_error: SubError) -> None:
        if self.sub_errors is None:
            self.sub_errors = []
        self.sub_errors.append(sub_error)

    def add_validation_error(
        self,
        object_name: str | None,
        field: str | None,
        rejected_value: Any,
        message: str | None,
    ) -> None:
        """Append one field validation failure."""
        self.add_sub_error(
            ValidationSubError(
                object_name=object_name,
                field=field,
                rejected_value=rejected_value,
                message=message,
            )
        )

    def add_validation_errors(self, field_failures: Iterable[FieldFailure]) -> None:
        """Append one validation sub-error per field failure, keeping their order."""
        for failure in field_failures:
            self.add_validation_error(
                failure.object_name,
                failure.field,
                failure.rejected_value,
                failure.message,
            )


def serialize_error_payload(payload: ErrorPayload, *, include_debug_message: bool = True) -> dict[str, Any]:
    """Render a payload as a JSON-ready dict wrapped under its type tag."""
    exclude = {"sub_errors"}
    if not include_debug_message:
        exclude.add("debug_message")

    body = payload.model_dump(by_alias=True, exclude=exclude, exclude_none=True)
    body["subErrors"] = [
        {resolve_type_tag(sub_error): jsonable_encoder(sub_error.model_dump(by_alias=True))}
        for sub_error in payload.sub_errors or []
    ]
    return {resolve_type_tag(payload): body}
