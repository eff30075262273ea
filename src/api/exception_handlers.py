"""Exception handlers for the API."""

import typing as t
from copy import deepcopy

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import AdmissionUnavailableError, CredentialIssuanceError

logger = structlog.get_logger(__name__)

SENSITIVE_KEYS = {"password", "token", "credential", "code", "authorization", "authentication", "x-api-key"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data


def _json_payload(request: HttpRequest) -> dict[str, t.Any] | None:
    if request.method not in ("POST", "PUT", "PATCH", "DELETE") or not request.body:
        return None
    if request.headers.get("Content-Type") != "application/json":
        return None
    try:
        payload = orjson.loads(request.body)
    except orjson.JSONDecodeError:
        return None
    return obfuscate(payload) if isinstance(payload, dict) else None


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    logger.exception(
        "INTERNAL_SERVER_ERROR",
        method=request.method,
        path=request.path,
        headers=obfuscate(dict(request.headers)),
        json_payload=_json_payload(request),
        user=str(request.user.pk) if getattr(request, "user", None) and request.user.is_authenticated else None,
    )
    data: dict[str, t.Any] = {"detail": "Internal Server Error."}
    if settings.DEBUG:  # pragma: no cover
        data["exception"] = repr(exc)
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    logger.warning("VALIDATION_ERROR", path=request.path, errors=getattr(exc, "messages", None))
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": list(exc.messages)}  # type: ignore[union-attr]
    return Response(status=400, data={"errors": error_dict})


def handle_admission_unavailable_error(
    request: HttpRequest, exc: AdmissionUnavailableError | t.Type[AdmissionUnavailableError]
) -> Response:
    """The admission could not be committed; nothing was changed and the client may retry."""
    logger.warning("ADMISSION_UNAVAILABLE", path=request.path)
    return Response(status=503, data={"detail": str(exc)}, headers={"Retry-After": "1"})


def handle_credential_issuance_error(
    request: HttpRequest, exc: CredentialIssuanceError | t.Type[CredentialIssuanceError]
) -> Response:
    """Handle a credential issuance error."""
    return Response(status=400, data={"detail": str(exc)})
