"""
Error translation.

Turns raw error codes and backend messages into Spanish, operator-facing
messages with an actionable suggestion.

Resolution order (first match wins):
    1. context table by code
    2. context table by message fragment
    3. general table by code
    4. general table by message fragment
    5. backend message already in Spanish and not technical → verbatim
    6. backend message with technical prefixes stripped

A suggestion sent by the backend always beats the local one.
translate() is total: it never raises.
"""

from typing import Any, Optional

from config.error_catalog import (
    CONTEXT_ERROR_MESSAGES,
    DEFAULT_SUGGESTION,
    ERROR_TRANSLATIONS,
    UNEXPECTED_ERROR_MESSAGE,
    UNEXPECTED_ERROR_SUGGESTION,
)
from exceptions import AppError
from models.results import ErrorMessage, Failure
from utils.text_utils import has_spanish_diacritics, looks_technical, strip_technical_prefixes


def extract_error_fields(error: Any) -> tuple[str, str, Optional[str]]:
    """
    Pull (code, message, backend suggestion) out of anything error-like.

    Accepts a Failure, an AppError, any exception, a mapping (flat or with
    a nested "error" object) or a plain string.
    """
    if isinstance(error, Failure):
        return error.error_code, error.message, error.suggestion

    if isinstance(error, AppError):
        details = error.details if isinstance(error.details, dict) else {}
        return error.code, error.message, _as_text(details.get("suggestion"))

    if isinstance(error, BaseException):
        return _as_text(getattr(error, "code", None)) or "", str(error), None

    if isinstance(error, str):
        return "", error, None

    if isinstance(error, dict):
        nested = error.get("error") if isinstance(error.get("error"), dict) else {}
        details = error.get("details") if isinstance(error.get("details"), dict) else {}
        code = _as_text(error.get("code")) or _as_text(error.get("error_code")) or _as_text(nested.get("code"))
        message = _as_text(error.get("message")) or _as_text(nested.get("message"))
        if not message and isinstance(error.get("error"), str):
            message = error["error"]
        suggestion = (
            _as_text(error.get("suggestion"))
            or _as_text(nested.get("suggestion"))
            or _as_text(details.get("suggestion"))
        )
        return code or "", message or "", suggestion

    return "", "", None


def translate(error: Any, context: Optional[str] = None) -> ErrorMessage:
    """
    Translate an error into operator-facing text.

    Args:
        error: Failure, AppError, exception, dict or string
        context: Operation context (scan, move, create, dispatch, issue)

    Returns:
        ErrorMessage with message and suggestion
    """
    code, message, backend_suggestion = extract_error_fields(error)

    if context and context in CONTEXT_ERROR_MESSAGES:
        match = _lookup(CONTEXT_ERROR_MESSAGES[context], code, message)
        if match:
            return _from_entry(match, backend_suggestion)

    match = _lookup(ERROR_TRANSLATIONS, code, message)
    if match:
        return _from_entry(match, backend_suggestion)

    if message:
        if has_spanish_diacritics(message) and not looks_technical(message):
            return ErrorMessage(
                message=message,
                suggestion=backend_suggestion or DEFAULT_SUGGESTION,
            )

        cleaned = strip_technical_prefixes(message)
        if cleaned:
            return ErrorMessage(
                message=cleaned,
                suggestion=backend_suggestion or DEFAULT_SUGGESTION,
            )

    return ErrorMessage(
        message=UNEXPECTED_ERROR_MESSAGE,
        suggestion=backend_suggestion or UNEXPECTED_ERROR_SUGGESTION,
    )


def user_friendly_error(error: Any, context: Optional[str] = None) -> str:
    """Translated message only."""
    return translate(error, context).message


def format_error(error: Any, context: Optional[str] = None) -> str:
    """Translated 'message. suggestion' for single-line displays."""
    return translate(error, context).display()


def _lookup(table: dict[str, dict[str, str]], code: str, message: str) -> Optional[dict[str, str]]:
    if code and code in table:
        return table[code]
    if message:
        for pattern, entry in table.items():
            if pattern in message:
                return entry
    return None


def _from_entry(entry: dict[str, str], backend_suggestion: Optional[str]) -> ErrorMessage:
    return ErrorMessage(
        message=entry["message"],
        suggestion=backend_suggestion or entry.get("suggestion"),
    )


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None
