"""Admission gate classes.

Each gate performs one check of an admission attempt whose credential already
resolved to a ticket. Gates run in order; the first one to return a decision
ends the attempt.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from .authorization import evaluate_authorization
from .composer import compose_decision
from .enums import AdmissionOutcome, GeofenceStatus
from .geofence import evaluate_geofence
from .types import AdmissionDecision
from .window import is_within_validation_window, validation_opens_at

if TYPE_CHECKING:
    from accounts.models import TurnstileUser
    from events.models import Event, Ticket

    from .service import AdmissionService


class BaseAdmissionGate(abc.ABC):
    """Abstract Base Class for a composable admission check."""

    def __init__(self, handler: AdmissionService) -> None:
        self.handler = handler
        self.validator: TurnstileUser = handler.attempt.validator
        self.ticket: Ticket = handler.ticket
        self.event: Event = handler.event

    @abc.abstractmethod
    def check(self) -> AdmissionDecision | None:
        """Perform the check.

        Returns:
            AdmissionDecision if this gate refuses the attempt, None to continue to the next gate.
        """


class ValidationWindowGate(BaseAdmissionGate):
    """Gate #1: validation opens relative to the event start, according to the early validation policy."""

    def check(self) -> AdmissionDecision | None:
        now = self.handler.attempt.attempted_at
        if is_within_validation_window(self.event.start, self.event.early_validation, now):
            return None
        return compose_decision(
            AdmissionOutcome.OUTSIDE_VALID_TIME,
            ticket=self.ticket,
            opens_at=validation_opens_at(self.event.start, self.event.early_validation),
        )


class AuthorizationGate(BaseAdmissionGate):
    """Gate #2: the validator must be the owner, a delegated validator or, with P2P, a peer ticket holder."""

    def check(self) -> AdmissionDecision | None:
        self.handler.authorization = evaluate_authorization(self.event, self.ticket, self.validator)
        if self.handler.authorization.can_validate:
            return None
        return compose_decision(
            AdmissionOutcome.UNAUTHORIZED, ticket=self.ticket, authorization=self.handler.authorization
        )


class GeofenceGate(BaseAdmissionGate):
    """Gate #3: with the geofence on, validator and holder must both be near the venue."""

    def check(self) -> AdmissionDecision | None:
        if not self.event.geofence_enabled:
            return None
        venue = self.event.venue_coordinates
        assert venue is not None and self.event.geofence_radius_meters  # enforced by Event.clean
        result = evaluate_geofence(
            venue,
            float(self.event.geofence_radius_meters),
            self.handler.attempt.validator_location,
            self.handler.holder_location,
        )
        self.handler.geofence = result
        match result.status:
            case GeofenceStatus.WITHIN:
                return None
            case GeofenceStatus.LOCATION_REQUIRED:
                outcome = AdmissionOutcome.LOCATION_REQUIRED
            case _:
                outcome = AdmissionOutcome.OUTSIDE_GEOFENCE
        return compose_decision(
            outcome, ticket=self.ticket, authorization=self.handler.authorization, geofence=result
        )


ADMISSION_GATES: list[type[BaseAdmissionGate]] = [
    ValidationWindowGate,
    AuthorizationGate,
    GeofenceGate,
]
