"""The ticket usage state machine: Unused -> PartiallyUsed -> FullyUsed."""

import typing as t
import uuid
from datetime import datetime

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction

from events.exceptions import AdmissionUnavailableError
from events.models import Event, Ticket, TicketAdmission

from .effects import EffectAssignmentEngine
from .enums import AdmissionOutcome
from .types import EffectOutcome, UsageTransition

if t.TYPE_CHECKING:
    from accounts.models import TurnstileUser

logger = structlog.get_logger(__name__)


def _compare_and_increment(ticket_id: uuid.UUID, expected: int, now: datetime) -> bool:
    """Move ``use_count`` from ``expected`` to ``expected + 1``. False if someone got there first."""
    updated = Ticket.objects.filter(pk=ticket_id, use_count=expected).update(
        use_count=expected + 1, last_validated_at=now
    )
    return updated == 1


def _exhausted_outcome(event: Event) -> AdmissionOutcome:
    if event.reentry_type == Event.ReentryType.SINGLE_USE:
        return AdmissionOutcome.ALREADY_VALIDATED
    return AdmissionOutcome.MAX_USES_REACHED


class UsageStateMachine:
    """Grants admissions one conditional update at a time.

    Each grant happens in a single transaction holding a lock on the ticket row. The
    first-ever grant also stamps the validation fields and draws the ticket's effects.
    """

    def __init__(self, effects: EffectAssignmentEngine | None = None, max_retries: int | None = None) -> None:
        self.effects = effects or EffectAssignmentEngine()
        self.max_retries = max_retries or settings.ADMISSION_TRANSITION_MAX_RETRIES

    def admit(
        self,
        ticket_id: uuid.UUID,
        max_uses: int | None,
        *,
        validator: "TurnstileUser",
        now: datetime,
        code: str = "",
        validator_distance_meters: float | None = None,
        holder_distance_meters: float | None = None,
    ) -> UsageTransition:
        """Try to consume one admission of the ticket.

        Returns:
            The transition, granted or refused. A refusal writes nothing.

        Raises:
            AdmissionUnavailableError: On storage faults or contention beyond the retry budget.
        """
        try:
            with transaction.atomic():
                for _ in range(self.max_retries):
                    ticket = Ticket.objects.select_for_update().select_related("event").get(pk=ticket_id)
                    observed = ticket.use_count
                    if max_uses is not None and observed >= max_uses:
                        return UsageTransition(
                            granted=False,
                            previous_use_count=observed,
                            use_count=observed,
                            failure=_exhausted_outcome(ticket.event),
                        )
                    if not _compare_and_increment(ticket_id, observed, now):
                        logger.warning("admission_transition_conflict", ticket_id=str(ticket_id), observed=observed)
                        continue

                    effects = self._record(
                        ticket,
                        use_number=observed + 1,
                        validator=validator,
                        now=now,
                        code=code,
                        validator_distance_meters=validator_distance_meters,
                        holder_distance_meters=holder_distance_meters,
                    )
                    return UsageTransition(
                        granted=True, previous_use_count=observed, use_count=observed + 1, effects=effects
                    )
        except DatabaseError as e:
            logger.exception("admission_transition_failed", ticket_id=str(ticket_id))
            raise AdmissionUnavailableError("The admission could not be recorded. Please retry.") from e

        raise AdmissionUnavailableError("The ticket is being validated concurrently. Please retry.")

    def _record(
        self,
        ticket: Ticket,
        *,
        use_number: int,
        validator: "TurnstileUser",
        now: datetime,
        code: str,
        validator_distance_meters: float | None,
        holder_distance_meters: float | None,
    ) -> EffectOutcome | None:
        effects = None
        if use_number == 1:
            Ticket.objects.filter(pk=ticket.pk, validated_at__isnull=True).update(
                validated_at=now, validated_by=validator, validation_code=code
            )
            effects = self.effects.draw(ticket)
            if effects.is_golden_ticket or effects.special_effect:
                # Written once; later admissions never touch these fields.
                Ticket.objects.filter(pk=ticket.pk, special_effect__isnull=True, is_golden_ticket=False).update(
                    is_golden_ticket=effects.is_golden_ticket, special_effect=effects.special_effect
                )

        TicketAdmission.objects.create(
            ticket=ticket,
            validated_by=validator,
            use_number=use_number,
            validator_distance_meters=validator_distance_meters,
            holder_distance_meters=holder_distance_meters,
        )
        return effects
