"""Exception-to-payload mapping and exception handler registration."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from http import HTTPStatus
import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.exceptions import ResponseValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.exc import NoResultFound

from api_errors.core.config import ErrorHandlerSettings
from api_errors.core.config import get_error_handler_settings
from api_errors.core.validation import FieldFailure
from api_errors.core.validation import field_failures_from_request_validation
from api_errors.core.validation import field_failures_from_validation_error
from api_errors.core.validation import parameter_type_mismatch
from api_errors.exceptions import ArgumentTypeMismatchError
from api_errors.exceptions import FieldValidationError
from api_errors.exceptions import NoResultsError
from api_errors.exceptions import UnsupportedFileExtensionError
from api_errors.schemas.error import ErrorPayload
from api_errors.schemas.error import serialize_error_payload

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Erro de validação"
SERIALIZATION_MESSAGE = "Erro ao escrever a saída JSON"
TYPE_MISMATCH_MESSAGE = "O parâmetro '{name}' com valor '{value}' não pode ser convertido para o tipo '{type}'"


class FailureKind(str, Enum):
    """Recognized failure categories, in dispatch order."""

    ARGUMENT_TYPE_MISMATCH = "argument_type_mismatch"
    FIELD_VALIDATION = "field_validation"
    CONSTRAINT_VIOLATION = "constraint_violation"
    NO_RESULTS = "no_results"
    UNSUPPORTED_FILE_EXTENSION = "unsupported_file_extension"
    OUTPUT_SERIALIZATION = "output_serialization"
    ENTITY_NOT_FOUND = "entity_not_found"


# First match wins.
DISPATCH_TABLE: tuple[tuple[FailureKind, tuple[type[Exception], ...]], ...] = (
    (FailureKind.ARGUMENT_TYPE_MISMATCH, (ArgumentTypeMismatchError,)),
    (FailureKind.FIELD_VALIDATION, (FieldValidationError, RequestValidationError, ValidationError)),
    (FailureKind.CONSTRAINT_VIOLATION, (IntegrityError,)),
    (FailureKind.NO_RESULTS, (NoResultsError,)),
    (FailureKind.UNSUPPORTED_FILE_EXTENSION, (UnsupportedFileExtensionError,)),
    (FailureKind.OUTPUT_SERIALIZATION, (ResponseValidationError,)),
    (FailureKind.ENTITY_NOT_FOUND, (NoResultFound,)),
)


def _narrow_failure(exc: BaseException) -> BaseException:
    # Unparseable path/query/header/cookie values surface as request validation
    # errors; report them as a type mismatch on the first offending parameter.
    if isinstance(exc, RequestValidationError):
        mismatch = parameter_type_mismatch(exc)
        if mismatch is not None:
            mismatch.__cause__ = exc
            return mismatch
    return exc


def _match_failure(exc: BaseException) -> FailureKind | None:
    for kind, exception_types in DISPATCH_TABLE:
        if isinstance(exc, exception_types):
            return kind
    return None


def classify_failure(exc: BaseException) -> FailureKind | None:
    """Return the failure kind handled for ``exc``, or None when unrecognized."""
    return _match_failure(_narrow_failure(exc))


def _argument_type_mismatch_payload(exc: ArgumentTypeMismatchError) -> ErrorPayload:
    payload = ErrorPayload(status=HTTPStatus.BAD_REQUEST)
    payload.message = TYPE_MISMATCH_MESSAGE.format(
        name=exc.name,
        value=exc.value,
        type=exc.required_type_name,
    )
    payload.debug_message = str(exc)
    return payload


def _field_failures(exc: BaseException) -> list[FieldFailure]:
    if isinstance(exc, FieldValidationError):
        return exc.field_failures
    if isinstance(exc, RequestValidationError):
        return field_failures_from_request_validation(exc)
    return field_failures_from_validation_error(exc)


def _field_validation_payload(exc: BaseException) -> ErrorPayload:
    payload = ErrorPayload(status=HTTPStatus.BAD_REQUEST)
    payload.message = VALIDATION_MESSAGE
    payload.add_validation_errors(_field_failures(exc))
    return payload


def _constraint_violation_payload(_: BaseException) -> ErrorPayload:
    payload = ErrorPayload(status=HTTPStatus.BAD_REQUEST)
    payload.message = VALIDATION_MESSAGE
    return payload


def _no_results_payload(exc: BaseException) -> ErrorPayload:
    payload = ErrorPayload(status=HTTPStatus.NOT_FOUND)
    payload.message = str(exc)
    return payload


def _unsupported_file_extension_payload(exc: BaseException) -> ErrorPayload:
    payload = ErrorPayload(status=HTTPStatus.BAD_REQUEST)
    payload.message = str(exc)
    return payload


def _output_serialization_payload(exc: BaseException) -> ErrorPayload:
    return ErrorPayload.from_exception(HTTPStatus.INTERNAL_SERVER_ERROR, exc, message=SERIALIZATION_MESSAGE)


def _entity_not_found_payload(exc: BaseException) -> ErrorPayload:
    # Generic constructor on purpose: message stays "Unexpected error", unlike NO_RESULTS.
    return ErrorPayload.from_exception(HTTPStatus.NOT_FOUND, exc)


_PAYLOAD_BUILDERS: dict[FailureKind, Callable[[BaseException], ErrorPayload]] = {
    FailureKind.ARGUMENT_TYPE_MISMATCH: _argument_type_mismatch_payload,
    FailureKind.FIELD_VALIDATION: _field_validation_payload,
    FailureKind.CONSTRAINT_VIOLATION: _constraint_violation_payload,
    FailureKind.NO_RESULTS: _no_results_payload,
    FailureKind.UNSUPPORTED_FILE_EXTENSION: _unsupported_file_extension_payload,
    FailureKind.OUTPUT_SERIALIZATION: _output_serialization_payload,
    FailureKind.ENTITY_NOT_FOUND: _entity_not_found_payload,
}


def _dispatch(exc: BaseException) -> tuple[FailureKind, ErrorPayload]:
    failure = _narrow_failure(exc)
    kind = _match_failure(failure)
    if kind is None:
        raise TypeError(f"No error payload mapping for {type(exc).__name__}")
    return kind, _PAYLOAD_BUILDERS[kind](failure)


def build_error_payload(exc: BaseException) -> ErrorPayload:
    """Build the error payload for a recognized failure."""
    _, payload = _dispatch(exc)
    return payload


def build_error_response(payload: ErrorPayload, settings: ErrorHandlerSettings | None = None) -> JSONResponse:
    """Pair a payload with its own status code, without extra headers."""
    if settings is None:
        settings = get_error_handler_settings()
    content = serialize_error_payload(payload, include_debug_message=settings.include_debug_message)
    return JSONResponse(status_code=payload.status_code, content=content)


def _log_failure(
    request: Request,
    kind: FailureKind,
    payload: ErrorPayload,
    exc: BaseException,
    settings: ErrorHandlerSettings,
) -> None:
    if payload.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error(
            "Handled %s failure on %s %s",
            kind.value,
            request.method,
            request.url.path,
            exc_info=exc,
        )
    elif settings.log_client_errors:
        logger.warning(
            "Handled %s failure on %s %s: %s",
            kind.value,
            request.method,
            request.url.path,
            payload.message,
        )


async def api_error_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Translate a recognized failure into the API error payload."""

    settings = get_error_handler_settings()
    kind, payload = _dispatch(exc)
    _log_failure(request, kind, payload, exc, settings)
    return build_error_response(payload, settings)


def register_error_handlers(app: FastAPI) -> None:
    """Attach the error payload handler for every recognized failure kind."""

    exception_types = [exception_type for _, types in DISPATCH_TABLE for exception_type in types]
    for exception_type in exception_types:
        app.add_exception_handler(exception_type, api_error_exception_handler)
    logger.info(
        "Registered API error handlers for %s with settings=%s",
        ", ".join(exception_type.__name__ for exception_type in exception_types),
        get_error_handler_settings().safe_for_logging(),
    )
