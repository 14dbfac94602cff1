"""Application exceptions translated into API error payloads."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    from api_errors.core.validation import FieldFailure


class NoResultsError(Exception):
    """Raised when an operation finds nothing for the given search parameters."""

    def __init__(self, search_parameter: str) -> None:
        super().__init__(f"No results were found for {search_parameter}")
        self.search_parameter = search_parameter


class UnsupportedFileExtensionError(Exception):
    """Raised when a caller requests a file extension the API cannot handle."""

    def __init__(self, extension: str) -> None:
        super().__init__(f"Unsupported file extension: {extension}")
        self.extension = extension


class ArgumentTypeMismatchError(Exception):
    """Raised when a request argument cannot be converted to its required type."""

    def __init__(
        self,
        *,
        name: str,
        value: Any,
        required_type: type | str,
        detail: str | None = None,
    ) -> None:
        self.name = name
        self.value = value
        self.required_type = required_type
        if detail is None:
            detail = (
                f"Failed to convert value '{value}' of parameter '{name}' "
                f"to required type '{self.required_type_name}'"
            )
        super().__init__(detail)

    @property
    def required_type_name(self) -> str:
        if isinstance(self.required_type, type):
            return self.required_type.__name__
        return str(self.required_type)


class FieldValidationError(Exception):
    """Aggregate of field failures found while validating a request by hand."""

    def __init__(self, field_failures: Iterable[FieldFailure]) -> None:
        self.field_failures = list(field_failures)
        super().__init__(f"Validation failed with {len(self.field_failures)} field error(s)")
