import typing as t
from datetime import timedelta

import pytest
from django.db import DatabaseError
from django.utils import timezone

from accounts.models import TurnstileUser
from events.exceptions import AdmissionUnavailableError
from events.models import Event, Ticket, TicketAdmission
from events.service.admission import usage
from events.service.admission.effects import EffectAssignmentEngine
from events.service.admission.enums import AdmissionOutcome
from events.service.admission.types import EffectOutcome, UsageTransition
from events.service.admission.usage import UsageStateMachine, _compare_and_increment

pytestmark = pytest.mark.django_db


class CountingEngine(EffectAssignmentEngine):
    """Always awards a golden confetti ticket and counts the draws."""

    def __init__(self) -> None:
        super().__init__()
        self.draws = 0

    def draw(self, ticket: Ticket) -> EffectOutcome:
        self.draws += 1
        return EffectOutcome(is_golden_ticket=True, special_effect="confetti")


def _set_reentry(event: Event, reentry_type: str, max_uses: int = 1) -> None:
    event.reentry_type = reentry_type
    event.max_uses = max_uses
    event.save()


def _admit(machine: UsageStateMachine, ticket: Ticket, validator: TurnstileUser, code: str = "0420") -> UsageTransition:
    ticket.refresh_from_db()
    return machine.admit(ticket.pk, ticket.max_uses, validator=validator, now=timezone.now(), code=code)


class TestSingleUse:
    def test_second_attempt_is_already_validated(self, ticket: Ticket, event_owner: TurnstileUser) -> None:
        machine = UsageStateMachine()

        first = _admit(machine, ticket, event_owner)
        second = _admit(machine, ticket, event_owner)

        assert first.granted and first.is_first_admission
        assert not second.granted
        assert second.failure == AdmissionOutcome.ALREADY_VALIDATED
        ticket.refresh_from_db()
        assert ticket.use_count == 1
        assert ticket.usage_state == Ticket.UsageState.FULLY_USED
        assert TicketAdmission.objects.filter(ticket=ticket).count() == 1

    def test_first_grant_stamps_validation_fields(self, ticket: Ticket, event_owner: TurnstileUser) -> None:
        _admit(UsageStateMachine(), ticket, event_owner, code="1234")

        ticket.refresh_from_db()
        assert ticket.validated_at is not None
        assert ticket.validated_by == event_owner
        assert ticket.validation_code == "1234"
        assert ticket.last_validated_at == ticket.validated_at


class TestPass:
    def test_pass_of_three(self, event: Event, ticket: Ticket, event_owner: TurnstileUser) -> None:
        _set_reentry(event, Event.ReentryType.PASS, max_uses=3)
        machine = UsageStateMachine()

        results = [_admit(machine, ticket, event_owner) for _ in range(4)]

        assert [r.granted for r in results] == [True, True, True, False]
        assert [r.use_count for r in results] == [1, 2, 3, 3]
        assert results[3].failure == AdmissionOutcome.MAX_USES_REACHED
        assert list(
            TicketAdmission.objects.filter(ticket=ticket).values_list("use_number", flat=True)
        ) == [1, 2, 3]

    def test_pass_of_one_reports_max_uses(self, event: Event, ticket: Ticket, event_owner: TurnstileUser) -> None:
        _set_reentry(event, Event.ReentryType.PASS, max_uses=1)
        machine = UsageStateMachine()
        _admit(machine, ticket, event_owner)

        assert _admit(machine, ticket, event_owner).failure == AdmissionOutcome.MAX_USES_REACHED

    def test_later_admissions_keep_first_validation(
        self, event: Event, ticket: Ticket, event_owner: TurnstileUser, outsider: TurnstileUser
    ) -> None:
        _set_reentry(event, Event.ReentryType.PASS, max_uses=2)
        machine = UsageStateMachine()
        _admit(machine, ticket, event_owner, code="1111")
        ticket.refresh_from_db()
        first_validated_at = ticket.validated_at

        _admit(machine, ticket, outsider, code="2222")

        ticket.refresh_from_db()
        assert ticket.validated_at == first_validated_at
        assert ticket.validated_by == event_owner
        assert ticket.validation_code == "1111"
        assert ticket.usage_state == Ticket.UsageState.FULLY_USED


def test_unlimited_never_runs_out(event: Event, ticket: Ticket, event_owner: TurnstileUser) -> None:
    _set_reentry(event, Event.ReentryType.UNLIMITED)
    machine = UsageStateMachine()

    results = [_admit(machine, ticket, event_owner) for _ in range(5)]

    assert all(r.granted for r in results)
    ticket.refresh_from_db()
    assert ticket.use_count == 5
    assert ticket.usage_state == Ticket.UsageState.PARTIALLY_USED


def test_effects_drawn_only_on_first_grant(event: Event, ticket: Ticket, event_owner: TurnstileUser) -> None:
    _set_reentry(event, Event.ReentryType.PASS, max_uses=3)
    engine = CountingEngine()
    machine = UsageStateMachine(effects=engine)

    first = _admit(machine, ticket, event_owner)
    second = _admit(machine, ticket, event_owner)

    assert engine.draws == 1
    assert first.effects == EffectOutcome(is_golden_ticket=True, special_effect="confetti")
    assert second.effects is None
    ticket.refresh_from_db()
    assert ticket.is_golden_ticket
    assert ticket.special_effect == "confetti"


class TestCompareAndSwap:
    def test_stale_expected_value_does_not_write(self, ticket: Ticket) -> None:
        Ticket.objects.filter(pk=ticket.pk).update(use_count=1)

        assert _compare_and_increment(ticket.pk, 0, timezone.now()) is False
        ticket.refresh_from_db()
        assert ticket.use_count == 1

    def test_current_expected_value_increments(self, ticket: Ticket) -> None:
        assert _compare_and_increment(ticket.pk, 0, timezone.now()) is True
        ticket.refresh_from_db()
        assert ticket.use_count == 1

    def test_lost_race_rereads_and_refuses(
        self, ticket: Ticket, event_owner: TurnstileUser, outsider: TurnstileUser, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Another validator takes the last use between the locked read and the conditional update."""
        real_increment = usage._compare_and_increment
        races = []

        def competing_increment(ticket_id: t.Any, expected: int, now: t.Any) -> bool:
            if not races:
                races.append(expected)
                assert real_increment(ticket_id, expected, now)
                TicketAdmission.objects.create(ticket_id=ticket_id, validated_by=outsider, use_number=expected + 1)
            return real_increment(ticket_id, expected, now)

        monkeypatch.setattr(usage, "_compare_and_increment", competing_increment)

        transition = _admit(UsageStateMachine(), ticket, event_owner)

        assert races == [0]
        assert not transition.granted
        assert transition.failure == AdmissionOutcome.ALREADY_VALIDATED
        assert transition.use_count == 1
        ticket.refresh_from_db()
        assert ticket.use_count == 1
        assert TicketAdmission.objects.filter(ticket=ticket).count() == 1
        assert TicketAdmission.objects.get(ticket=ticket).validated_by == outsider

    def test_contention_beyond_retries_is_unavailable(
        self, ticket: Ticket, event_owner: TurnstileUser, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(usage, "_compare_and_increment", lambda *args: False)

        with pytest.raises(AdmissionUnavailableError):
            _admit(UsageStateMachine(max_retries=3), ticket, event_owner)

        ticket.refresh_from_db()
        assert ticket.use_count == 0
        assert not TicketAdmission.objects.exists()

    def test_storage_fault_rolls_back(
        self, ticket: Ticket, event_owner: TurnstileUser, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken_create(**kwargs: t.Any) -> None:
            raise DatabaseError("disk full")

        monkeypatch.setattr(TicketAdmission.objects, "create", broken_create)

        with pytest.raises(AdmissionUnavailableError):
            _admit(UsageStateMachine(), ticket, event_owner)

        ticket.refresh_from_db()
        assert ticket.use_count == 0
        assert ticket.validated_at is None


def test_refused_attempt_writes_nothing(ticket: Ticket, event_owner: TurnstileUser) -> None:
    Ticket.objects.filter(pk=ticket.pk).update(use_count=1, last_validated_at=timezone.now() - timedelta(hours=1))
    ticket.refresh_from_db()
    before = (ticket.use_count, ticket.last_validated_at, ticket.updated_at)

    _admit(UsageStateMachine(), ticket, event_owner)

    ticket.refresh_from_db()
    assert (ticket.use_count, ticket.last_validated_at, ticket.updated_at) == before
