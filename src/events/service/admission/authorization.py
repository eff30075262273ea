"""Who may validate which ticket."""

import typing as t

from events.models import DelegatedValidator, Event, Ticket

from .enums import ValidatorRole
from .types import AuthorizationResult

if t.TYPE_CHECKING:
    from accounts.models import TurnstileUser


def _is_delegated(event: Event, validator: "TurnstileUser") -> bool:
    if not validator.email:
        return False
    return DelegatedValidator.objects.filter(event=event, email=validator.email.lower()).exists()


def _is_peer(event: Event, ticket: Ticket, validator: "TurnstileUser") -> bool:
    """The validator holds another ticket for the same event and is not the holder of this one."""
    if not event.p2p_validation or ticket.user_id == validator.pk:
        return False
    return Ticket.objects.filter(event=event, user=validator).exclude(pk=ticket.pk).exists()


def evaluate_authorization(event: Event, ticket: Ticket, validator: "TurnstileUser") -> AuthorizationResult:
    """Determine the validator's role for this ticket.

    Reaching this point means the credential resolved, so the ticket is authentic
    whatever the role turns out to be.
    """
    if event.owner_id == validator.pk:
        role = ValidatorRole.OWNER
    elif _is_delegated(event, validator):
        role = ValidatorRole.DELEGATED
    elif _is_peer(event, ticket, validator):
        role = ValidatorRole.PEER
    else:
        role = ValidatorRole.NONE
    return AuthorizationResult(is_authentic=True, can_validate=role != ValidatorRole.NONE, role=role)
