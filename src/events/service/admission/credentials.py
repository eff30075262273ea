"""Rotating validation credentials: issuing and resolving them.

A credential is what the holder shows at the door. It carries a 4-digit manual
code, unique among the live credentials of its event, and a scannable token.
"""

import re
import secrets
import uuid
from datetime import datetime

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from events.exceptions import CodePoolExhaustedError, CredentialIssuanceError
from events.models import Event, Ticket, ValidationCredential

from .enums import AdmissionOutcome, CredentialKind
from .types import CredentialResolution

logger = structlog.get_logger(__name__)

MANUAL_CODE_LENGTH = 4
CODE_POOL_SIZE = 10**MANUAL_CODE_LENGTH
RANDOM_CODE_ATTEMPTS = 10

_DIGITS = re.compile(r"^\d+$")


def _format_code(value: int) -> str:
    return str(value).zfill(MANUAL_CODE_LENGTH)


def _allocate_code(event: Event, now: datetime) -> str:
    """Pick a code no other live credential of the event uses.

    Random draws first; after repeated collisions, scan the code space in order.
    Must run while the event row is locked.
    """
    taken = set(ValidationCredential.objects.filter(event=event).live(now).values_list("code", flat=True))
    if len(taken) >= CODE_POOL_SIZE:
        raise CodePoolExhaustedError(f"All {CODE_POOL_SIZE} codes are in use for event {event.pk}.")

    for _ in range(RANDOM_CODE_ATTEMPTS):
        code = _format_code(secrets.randbelow(CODE_POOL_SIZE))
        if code not in taken:
            return code

    logger.info("credential_code_pool_crowded", event_id=str(event.pk), live_codes=len(taken))
    for value in range(CODE_POOL_SIZE):
        code = _format_code(value)
        if code not in taken:
            return code
    raise CodePoolExhaustedError(f"All {CODE_POOL_SIZE} codes are in use for event {event.pk}.")  # pragma: no cover


@transaction.atomic
def issue_credential(
    ticket: Ticket, *, latitude: float | None = None, longitude: float | None = None
) -> ValidationCredential:
    """Issue a fresh credential for the ticket, superseding any previous one.

    Args:
        ticket: The ticket to issue the credential for.
        latitude: The holder's latitude when the credential was opened, if known.
        longitude: The holder's longitude when the credential was opened, if known.

    Returns:
        The new ValidationCredential.

    Raises:
        CredentialIssuanceError: If the ticket has no admissions left.
        CodePoolExhaustedError: If every manual code of the event is live.
    """
    # Serialize code allocation per event.
    event = Event.objects.select_for_update().get(pk=ticket.event_id)
    ticket = Ticket.objects.select_related("event").get(pk=ticket.pk)
    if not ticket.has_admissions_left:
        raise CredentialIssuanceError("This ticket has no admissions left.")

    now = timezone.now()
    ValidationCredential.objects.filter(ticket=ticket).delete()
    credential = ValidationCredential.objects.create(
        ticket=ticket,
        event=event,
        code=_allocate_code(event, now),
        expires_at=now + settings.ADMISSION_CREDENTIAL_TTL,
        holder_latitude=latitude,
        holder_longitude=longitude,
    )
    logger.info(
        "credential_issued",
        ticket_id=str(ticket.pk),
        event_id=str(event.pk),
        expires_at=credential.expires_at.isoformat(),
    )
    return credential


def _resolve_manual_code(code: str, event_id: uuid.UUID | None, now: datetime) -> CredentialResolution:
    qs = ValidationCredential.objects.filter(code=code).select_related("ticket__event")
    if event_id is not None:
        qs = qs.filter(event_id=event_id)

    live = list(qs.live(now)[:2])
    if len(live) == 1:
        return CredentialResolution(kind=CredentialKind.MANUAL_CODE, credential=live[0])
    if len(live) > 1:
        # Without an event scope the same code may be live in several events.
        return CredentialResolution(kind=CredentialKind.MANUAL_CODE, failure=AdmissionOutcome.INVALID_CODE)

    expired = qs.first()
    if expired is not None:
        return CredentialResolution(
            kind=CredentialKind.MANUAL_CODE, credential=expired, failure=AdmissionOutcome.EXPIRED_CODE
        )
    return CredentialResolution(kind=CredentialKind.MANUAL_CODE, failure=AdmissionOutcome.INVALID_CODE)


def _resolve_token(token: str, event_id: uuid.UUID | None, now: datetime) -> CredentialResolution:
    credential = ValidationCredential.objects.select_related("ticket__event").filter(token=token).first()
    if credential is None or (event_id is not None and credential.event_id != event_id):
        return CredentialResolution(kind=CredentialKind.SCANNED_TOKEN, failure=AdmissionOutcome.INVALID_CODE)
    if credential.is_expired(now):
        return CredentialResolution(
            kind=CredentialKind.SCANNED_TOKEN, credential=credential, failure=AdmissionOutcome.EXPIRED_CODE
        )
    return CredentialResolution(kind=CredentialKind.SCANNED_TOKEN, credential=credential)


def resolve_credential(
    raw: str, *, event_id: uuid.UUID | None = None, now: datetime | None = None
) -> CredentialResolution:
    """Map a presented value to a credential. Read-only, safe to retry.

    Four digits are a manual code; any other all-digit value is invalid;
    everything else is treated as a scanned token.
    """
    value = (raw or "").strip()
    now = now or timezone.now()
    if not value:
        return CredentialResolution(kind=None, failure=AdmissionOutcome.INVALID_CODE)
    if _DIGITS.match(value):
        if len(value) != MANUAL_CODE_LENGTH:
            return CredentialResolution(kind=CredentialKind.MANUAL_CODE, failure=AdmissionOutcome.INVALID_CODE)
        return _resolve_manual_code(value, event_id, now)
    return _resolve_token(value, event_id, now)
