"""Error handler configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_INCLUDE_DEBUG_MESSAGE = True
DEFAULT_LOG_CLIENT_ERRORS = True

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default

    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {raw!r}")


@dataclass(frozen=True)
class ErrorHandlerSettings:
    """Runtime settings for API error responses."""

    include_debug_message: bool = DEFAULT_INCLUDE_DEBUG_MESSAGE
    log_client_errors: bool = DEFAULT_LOG_CLIENT_ERRORS

    def safe_for_logging(self) -> dict[str, bool]:
        return {
            "include_debug_message": self.include_debug_message,
            "log_client_errors": self.log_client_errors,
        }


@lru_cache(maxsize=1)
def get_error_handler_settings() -> ErrorHandlerSettings:
    """Load error handler settings from the environment."""
    return ErrorHandlerSettings(
        include_debug_message=_get_bool_env("API_ERRORS_INCLUDE_DEBUG_MESSAGE", DEFAULT_INCLUDE_DEBUG_MESSAGE),
        log_client_errors=_get_bool_env("API_ERRORS_LOG_CLIENT_ERRORS", DEFAULT_LOG_CLIENT_ERRORS),
    )
