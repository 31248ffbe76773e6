"""
Response normalization.

Maps every backend body shape (unified, legacy, passthrough) plus the HTTP
status into one canonical result. Pure: identical (status, body) always
yields an identical result.
"""

import json
from typing import Any, Optional

from models.envelopes import ErrorBody, UnifiedEnvelope, LegacyEnvelope, Passthrough
from models.requests import RawResponse
from models.results import CanonicalResult, fail, ok


UNIFIED_STATUSES = ("success", "fail", "error")

# Best-effort wording for HTTP failures without a structured error
HTTP_STATUS_MESSAGES = {
    400: "Solicitud inválida - revisa los datos enviados",
    401: "No autorizado - verifica las credenciales de la terminal",
    403: "Acceso denegado - la terminal no tiene permisos para esta operación",
    404: "Endpoint no encontrado - verifica la configuración de la API",
    405: "Método no permitido - el endpoint no soporta esta operación",
    408: "Tiempo de espera agotado en el servidor",
    409: "Conflicto - el recurso fue modificado o ya existe",
    422: "Datos inválidos - revisa los datos enviados",
    429: "Demasiadas solicitudes - espera unos momentos",
    500: "Error interno del servidor - contacta al administrador",
    502: "Puerta de enlace inválida - el servidor no respondió correctamente",
    503: "Servicio no disponible - intenta nuevamente más tarde",
    504: "El servidor tardó demasiado en responder",
}

HTTP_STATUS_CODES = {
    400: "VALIDATION_ERROR",
    404: "NOT_FOUND",
    408: "TIMEOUT_ERROR",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    429: "RATE_LIMIT_EXCEEDED",
    500: "INTERNAL_ERROR",
    502: "SERVICE_UNAVAILABLE",
    503: "SERVICE_UNAVAILABLE",
    504: "SERVICE_UNAVAILABLE",
}


# ===================
# ENVELOPE DETECTION
# ===================

def detect_envelope(body: Any):
    """
    Identify the shape of a response body.

    Precedence: unified, then legacy, then passthrough.

    Args:
        body: Decoded JSON value or raw text

    Returns:
        UnifiedEnvelope | LegacyEnvelope | Passthrough
    """
    if not isinstance(body, dict):
        return Passthrough(body=body)

    status = body.get("status")
    if isinstance(status, str) and status in UNIFIED_STATUSES:
        return UnifiedEnvelope(
            status=status,
            message=_text(body.get("message")),
            data=body.get("data"),
            error=_error_body(body.get("error")),
            meta=body.get("meta") if isinstance(body.get("meta"), dict) else None,
        )

    error = body.get("error")
    if "success" in body or isinstance(error, dict) or "meta" in body:
        success = body.get("success")
        return LegacyEnvelope(
            success=success if isinstance(success, bool) else None,
            message=_text(body.get("message")),
            data=body.get("data"),
            error=_error_body(error) if isinstance(error, dict) else _text(error),
            meta=body.get("meta") if isinstance(body.get("meta"), dict) else None,
        )

    return Passthrough(body=body)


def has_structured_error(body: Any) -> bool:
    """True when the body carries a unified or legacy error."""
    envelope = detect_envelope(body)
    return envelope.is_failure


# ===================
# NORMALIZATION
# ===================

def normalize(http_status: int, body: Any) -> CanonicalResult:
    """
    Normalize a backend answer into a canonical result.

    Args:
        http_status: HTTP status code of the response
        body: Decoded JSON value or raw text

    Returns:
        Success or Failure
    """
    envelope = detect_envelope(body)
    http_ok = 200 <= http_status < 300

    if isinstance(envelope, UnifiedEnvelope):
        if envelope.is_failure:
            error = envelope.error or ErrorBody()
            return fail(
                error.code or _status_code(http_status) or "UNKNOWN_ERROR",
                error.message or envelope.message or "Error desconocido",
                field=error.field,
                suggestion=error.suggestion,
                details=error.details if error.details is not None else body,
            )
        if http_ok:
            return ok(envelope.data, envelope.message)

    elif isinstance(envelope, LegacyEnvelope):
        if envelope.is_failure:
            return _legacy_failure(http_status, envelope, body)
        if http_ok:
            return ok(envelope.data, envelope.message)

    elif http_ok:
        return ok(envelope.body, _passthrough_message(envelope.body))

    return _http_failure(http_status, body)


def decode_body(response: RawResponse) -> Any:
    """
    Decode a response body.

    JSON content types are parsed; anything else is returned as text.

    Raises:
        ValueError: If the body claims to be JSON but is not
    """
    if response.is_json:
        if not response.text:
            return None
        return json.loads(response.text)
    return response.text


def normalize_response(response: RawResponse) -> CanonicalResult:
    """Decode and normalize a raw response (PARSE_ERROR on invalid JSON)."""
    try:
        body = decode_body(response)
    except ValueError as e:
        return fail(
            "PARSE_ERROR",
            "Error al procesar la respuesta del servidor",
            details={
                "status_code": response.status_code,
                "error": str(e),
                "body": response.text[:2000],
            },
        )
    return normalize(response.status_code, body)


# ===================
# HELPERS
# ===================

def _legacy_failure(http_status: int, envelope: LegacyEnvelope, body: Any) -> CanonicalResult:
    error = envelope.error
    if isinstance(error, ErrorBody):
        return fail(
            error.code or _status_code(http_status) or "OPERATION_FAILED",
            error.message or envelope.message or "Operación fallida",
            field=error.field,
            suggestion=error.suggestion,
            details=body,
        )
    return fail(
        _status_code(http_status) or "OPERATION_FAILED",
        error or envelope.message or "Operación fallida",
        details=body,
    )


def _http_failure(http_status: int, body: Any) -> CanonicalResult:
    message = None
    if isinstance(body, dict):
        message = _text(body.get("message"))
    if not message:
        message = HTTP_STATUS_MESSAGES.get(
            http_status,
            f"Respuesta inesperada del servidor (HTTP {http_status})"
        )
    return fail(
        _status_code(http_status) or "HTTP_ERROR",
        message,
        details={"status_code": http_status, "body": body},
    )


def _status_code(http_status: int) -> Optional[str]:
    if 200 <= http_status < 300:
        return None
    if http_status in HTTP_STATUS_CODES:
        return HTTP_STATUS_CODES[http_status]
    if http_status >= 500:
        return "INTERNAL_ERROR"
    return None


def _passthrough_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        return _text(body.get("message"))
    return None


def _error_body(value: Any) -> Optional[ErrorBody]:
    if not isinstance(value, dict):
        return None
    return ErrorBody(
        code=_text(value.get("code")),
        message=_text(value.get("message")),
        field=_text(value.get("field")),
        suggestion=_text(value.get("suggestion")),
        details=value.get("details"),
    )


def _text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, bool)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, sort_keys=True, default=str)
