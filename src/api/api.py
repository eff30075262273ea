from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI

from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers.admission import AdmissionController
from events.controllers.event_validators import EventValidatorsController
from events.controllers.tickets import TicketController
from events.exceptions import AdmissionUnavailableError, CredentialIssuanceError

from .exception_handlers import (
    handle_admission_unavailable_error,
    handle_credential_issuance_error,
    handle_django_validation_error,
    handle_general_exception,
)

api = NinjaExtraAPI(
    title="Turnstile API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Turnstile ticket admission API {settings.VERSION}",
    app_name=f"turnstile-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API."""
    return 200, ResponseOk()


api.register_controllers(
    AdmissionController,
    TicketController,
    EventValidatorsController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    AdmissionUnavailableError: handle_admission_unavailable_error,
    CredentialIssuanceError: handle_credential_issuance_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
