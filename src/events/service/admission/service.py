"""AdmissionService: validates one presented credential end to end."""

import typing as t
import uuid
from datetime import datetime

import structlog
from django.db import DatabaseError
from django.utils import timezone

from events.exceptions import AdmissionUnavailableError
from events.models import Event, Ticket, ValidationCredential
from geo.service import Coordinates

from .composer import compose_decision
from .credentials import resolve_credential
from .effects import EffectAssignmentEngine, default_random_source
from .enums import AdmissionOutcome
from .gates import ADMISSION_GATES, BaseAdmissionGate
from .types import (
    AdmissionDecision,
    AuthorizationResult,
    CredentialResolution,
    GeofenceResult,
    RandomSource,
    ValidationAttempt,
)
from .usage import UsageStateMachine

if t.TYPE_CHECKING:
    from accounts.models import TurnstileUser

logger = structlog.get_logger(__name__)


class AdmissionService:
    """The Admission Service Class.

    Resolves the credential, runs the admission gates in order (time window,
    authorization, geofence) and finally asks the usage state machine for the
    admission. Every expected refusal comes back as a decision; only
    infrastructure faults raise.
    """

    def __init__(self, attempt: ValidationAttempt, rng: RandomSource | None = None) -> None:
        self.attempt = attempt
        self.rng = rng or default_random_source()
        self.resolution: CredentialResolution | None = None
        self.credential: ValidationCredential | None = None
        self.ticket: Ticket | None = None
        self.event: Event | None = None
        self.authorization: AuthorizationResult | None = None
        self.geofence: GeofenceResult | None = None

    @property
    def holder_location(self) -> Coordinates | None:
        """The holder's location from the attempt, else where the credential was opened."""
        if self.attempt.holder_location is not None:
            return self.attempt.holder_location
        return self.credential.holder_coordinates if self.credential else None

    def validate(self) -> AdmissionDecision:
        """Decide the attempt.

        Raises:
            AdmissionUnavailableError: When storage fails at any step. Nothing has been admitted.
        """
        try:
            decision = self._validate()
        except DatabaseError as e:
            logger.exception("admission_lookup_failed", validator_id=str(self.attempt.validator.pk))
            raise AdmissionUnavailableError("The admission could not be checked. Please retry.") from e
        logger.info(
            "admission_decision",
            outcome=str(decision.outcome),
            ticket_id=str(decision.ticket_id) if decision.ticket_id else None,
            event_id=str(decision.event_id) if decision.event_id else None,
            validator_id=str(self.attempt.validator.pk),
            use_count=decision.use_count,
        )
        return decision

    def _validate(self) -> AdmissionDecision:
        self.resolution = resolve_credential(
            self.attempt.credential, event_id=self.attempt.event_id, now=self.attempt.attempted_at
        )
        if not self.resolution.is_resolved:
            return compose_decision(self.resolution.failure or AdmissionOutcome.INVALID_CODE)

        self.credential = self.resolution.credential
        assert self.credential is not None
        self.ticket = self.credential.ticket
        self.event = self.ticket.event

        gates: list[BaseAdmissionGate] = [gate(self) for gate in ADMISSION_GATES]
        for gate in gates:
            if decision := gate.check():
                return decision

        machine = UsageStateMachine(effects=EffectAssignmentEngine(self.rng))
        transition = machine.admit(
            self.ticket.pk,
            self.event.admission_limit,
            validator=self.attempt.validator,
            now=self.attempt.attempted_at,
            code=self.credential.code,
            validator_distance_meters=self.geofence.validator_distance_meters if self.geofence else None,
            holder_distance_meters=self.geofence.holder_distance_meters if self.geofence else None,
        )
        self.ticket.refresh_from_db()
        outcome = AdmissionOutcome.GRANTED if transition.granted else transition.failure
        assert outcome is not None
        return compose_decision(
            outcome,
            ticket=self.ticket,
            authorization=self.authorization,
            geofence=self.geofence,
            first_admission=transition.is_first_admission,
        )


def validate_ticket(
    credential: str,
    validator: "TurnstileUser",
    *,
    event_id: uuid.UUID | None = None,
    validator_location: Coordinates | None = None,
    holder_location: Coordinates | None = None,
    now: datetime | None = None,
    rng: RandomSource | None = None,
) -> AdmissionDecision:
    """Validate a presented credential on behalf of ``validator``."""
    attempt = ValidationAttempt(
        credential=credential,
        validator=validator,
        validator_location=validator_location,
        holder_location=holder_location,
        event_id=event_id,
        attempted_at=now or timezone.now(),
    )
    return AdmissionService(attempt, rng=rng).validate()
