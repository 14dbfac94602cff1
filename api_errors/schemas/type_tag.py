"""Type discriminators for polymorphic error payloads on the wire."""

from __future__ import annotations

from enum import Enum
from typing import Any
from typing import ClassVar


class TypeTag(str, Enum):
    """Wire wrapper keys for tagged error models."""

    API_ERROR = "apierror"
    API_VALIDATION_ERROR = "apivalidationerror"


class TaggedModel:
    """Mixin for models serialized under a wrapper key."""

    type_tag: ClassVar[TypeTag]


def resolve_type_tag(value: Any, suggested_type: type | None = None) -> str:
    """Return the wrapper key for the concrete variant of ``value``.

    ``suggested_type`` is accepted for callers that know the declared type of
    a field, but the tag always comes from the runtime value.
    """
    del suggested_type
    tag = getattr(type(value), "type_tag", None)
    if not isinstance(value, TaggedModel) or not isinstance(tag, TypeTag):
        raise TypeError(f"{type(value).__name__} has no wire type tag")
    return tag.value
