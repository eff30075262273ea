"""Temporal validation window."""

from datetime import datetime, timedelta

from events.models import Event

# How long before the event start validation opens. None means no lower bound.
EARLY_VALIDATION_LEAD: dict[str, timedelta | None] = {
    Event.EarlyValidation.ANYTIME: None,
    Event.EarlyValidation.TWO_HOURS_BEFORE: timedelta(hours=2),
    Event.EarlyValidation.ONE_HOUR_BEFORE: timedelta(hours=1),
    Event.EarlyValidation.AT_START: timedelta(0),
}


def validation_opens_at(start: datetime, policy: str) -> datetime | None:
    """The earliest moment a ticket may be validated, or None if validation is always open."""
    try:
        lead = EARLY_VALIDATION_LEAD[policy]
    except KeyError:
        raise ValueError(f"Unknown early validation policy: {policy!r}") from None
    if lead is None:
        return None
    return start - lead


def is_within_validation_window(start: datetime, policy: str, now: datetime) -> bool:
    """Whether ``now`` falls in the validation window.

    The window has no upper bound: the end of an event does not gate admission.
    """
    opens_at = validation_opens_at(start, policy)
    return opens_at is None or now >= opens_at
