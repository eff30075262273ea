"""Builds the single AdmissionDecision of an attempt."""

from datetime import datetime

from django.utils import timezone
from django.utils.translation import gettext as _

from events.models import Ticket

from .enums import AdmissionOutcome, Reasons
from .types import AdmissionDecision, AuthorizationResult, GeofenceResult


def _message(outcome: AdmissionOutcome, opens_at: datetime | None, geofence: GeofenceResult | None) -> str:
    if outcome == AdmissionOutcome.OUTSIDE_VALID_TIME and opens_at is not None:
        return _(Reasons.OUTSIDE_VALID_TIME_WITH_START).format(opens_at=timezone.localtime(opens_at).isoformat())
    if outcome == AdmissionOutcome.OUTSIDE_GEOFENCE and geofence is not None:
        return _(Reasons.OUTSIDE_GEOFENCE).format(radius=f"{geofence.radius_meters:g}")
    return _(Reasons[outcome.name])


def compose_decision(
    outcome: AdmissionOutcome,
    *,
    ticket: Ticket | None = None,
    authorization: AuthorizationResult | None = None,
    geofence: GeofenceResult | None = None,
    opens_at: datetime | None = None,
    first_admission: bool = False,
) -> AdmissionDecision:
    """Fold the evaluators' results into the decision returned to the caller.

    ``valid`` is true only for a granted admission. The other flags are informative.
    ``assigned_effect`` is reported only on the first admission, when the effect was drawn.
    """
    granted = outcome == AdmissionOutcome.GRANTED
    decision = AdmissionDecision(
        outcome=outcome,
        valid=granted,
        can_validate=authorization.can_validate if authorization else False,
        is_authentic=authorization.is_authentic if authorization else ticket is not None,
        already_validated=outcome in (AdmissionOutcome.ALREADY_VALIDATED, AdmissionOutcome.MAX_USES_REACHED),
        outside_valid_time=outcome == AdmissionOutcome.OUTSIDE_VALID_TIME,
        outside_geofence=outcome == AdmissionOutcome.OUTSIDE_GEOFENCE,
        requires_location=outcome == AdmissionOutcome.LOCATION_REQUIRED,
        message=_message(outcome, opens_at, geofence),
        validation_opens_at=opens_at if outcome == AdmissionOutcome.OUTSIDE_VALID_TIME else None,
    )
    if geofence is not None:
        decision.validator_distance_meters = geofence.validator_distance_meters
        decision.holder_distance_meters = geofence.holder_distance_meters
        decision.missing_locations = list(geofence.missing)
    if ticket is not None:
        decision.ticket_id = ticket.pk
        decision.event_id = ticket.event_id
        decision.ticket_number = ticket.ticket_number
        decision.use_count = ticket.use_count
        decision.max_uses = ticket.max_uses
        if granted:
            decision.is_golden_ticket = ticket.is_golden_ticket
            if first_admission:
                decision.assigned_effect = ticket.special_effect
    return decision


def location_denied_decision(previous: AdmissionDecision) -> AdmissionDecision:
    """Turn a location-required decision into a location-denied one."""
    return previous.model_copy(
        update={
            "outcome": AdmissionOutcome.LOCATION_DENIED,
            "valid": False,
            "requires_location": False,
            "message": _(Reasons.LOCATION_DENIED),
        }
    )
