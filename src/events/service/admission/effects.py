"""Golden tickets and thematic special effects, drawn once at a ticket's first admission."""

import random
import typing as t
from dataclasses import dataclass
from datetime import date

import structlog
from django.utils import timezone

from events.models import Event, Ticket

from .types import EffectOutcome, RandomSource

logger = structlog.get_logger(__name__)

SpecialEffect = Ticket.SpecialEffect


def default_random_source() -> RandomSource:
    """Production source of randomness."""
    return random.SystemRandom()


def event_local_date(event: Event) -> date:
    """The event start date in the configured time zone."""
    return timezone.localtime(event.start).date()


@dataclass(frozen=True)
class EffectRule:
    effect: str
    priority: int
    probability: float
    condition: t.Callable[[Event, Ticket], bool]

    def matches(self, event: Event, ticket: Ticket) -> bool:
        return self.condition(event, ticket)


@dataclass(frozen=True)
class MonthlyColor:
    name: str
    primary: str
    secondary: str


MONTHLY_COLORS: dict[int, MonthlyColor] = {
    1: MonthlyColor("Navy Blue", "#002366", "#003380"),
    2: MonthlyColor("Crimson", "#DC143C", "#B91C3C"),
    3: MonthlyColor("Emerald", "#008000", "#00A000"),
    4: MonthlyColor("Bright Pink", "#FF69B4", "#FF1493"),
    5: MonthlyColor("Leaf Green", "#32CD32", "#3CB371"),
    6: MonthlyColor("Sky Blue", "#1E90FF", "#87CEEB"),
    7: MonthlyColor("Pure Red", "#FF0000", "#CC0000"),
    8: MonthlyColor("Golden", "#FFD700", "#FFA500"),
    9: MonthlyColor("Orange", "#FF8C00", "#FF6347"),
    10: MonthlyColor("Pumpkin", "#FF4500", "#FF6347"),
    11: MonthlyColor("Brown", "#8B4513", "#A0522D"),
    12: MonthlyColor("Holiday Green", "#006400", "#228B22"),
}


def _on_day(month: int, day: int) -> t.Callable[[Event, Ticket], bool]:
    def condition(event: Event, ticket: Ticket) -> bool:
        local = event_local_date(event)
        return local.month == month and local.day == day

    return condition


def _name_contains(fragment: str) -> t.Callable[[Event, Ticket], bool]:
    def condition(event: Event, ticket: Ticket) -> bool:
        return fragment in event.name.lower()

    return condition


def _day_of_year(day: int) -> t.Callable[[Event, Ticket], bool]:
    def condition(event: Event, ticket: Ticket) -> bool:
        return event_local_date(event).timetuple().tm_yday == day

    return condition


def _always(event: Event, ticket: Ticket) -> bool:
    return True


# Table order breaks priority ties.
EFFECT_RULES: tuple[EffectRule, ...] = (
    EffectRule(SpecialEffect.NICE, 100, 1 / 69, _day_of_year(69)),
    EffectRule(SpecialEffect.PRIDE, 90, 1 / 100, _name_contains("pride")),
    EffectRule(SpecialEffect.HEARTS, 80, 1 / 14, _on_day(2, 14)),
    EffectRule(SpecialEffect.SPOOKY, 80, 1 / 88, _on_day(10, 31)),
    EffectRule(SpecialEffect.SNOWFLAKES, 80, 1 / 25, _on_day(12, 25)),
    EffectRule(SpecialEffect.FIREWORKS, 80, 1 / 365, _on_day(12, 31)),
    EffectRule(SpecialEffect.CONFETTI, 70, 1 / 100, _name_contains("party")),
    EffectRule(SpecialEffect.MONTHLY, 10, 1 / 30, _always),
)


def ordered_rules(rules: t.Iterable[EffectRule] = EFFECT_RULES) -> list[EffectRule]:
    """Rules by descending priority. ``sorted`` is stable, so ties keep table order."""
    return sorted(rules, key=lambda rule: rule.priority, reverse=True)


def draw_special_effect(
    event: Event, ticket: Ticket, rng: RandomSource, rules: t.Iterable[EffectRule] = EFFECT_RULES
) -> str | None:
    """Draw at most one thematic effect.

    Only the highest-priority matching rule is drawn. Losing that draw means no effect:
    lower-priority rules are not consulted.
    """
    for rule in ordered_rules(rules):
        if rule.matches(event, ticket):
            return str(rule.effect) if rng.random() < rule.probability else None
    return None


def golden_ticket_available(event: Event) -> bool:
    """Whether the event can still award a golden ticket."""
    if not event.golden_ticket_enabled:
        return False
    if event.golden_ticket_count is None:
        return True
    return Ticket.objects.filter(event=event, is_golden_ticket=True).count() < event.golden_ticket_count


def draw_golden_ticket(event: Event, rng: RandomSource) -> bool:
    """One Bernoulli trial with the event's golden ticket odds."""
    if not golden_ticket_available(event):
        return False
    return rng.random() < event.effective_golden_ticket_odds


class EffectAssignmentEngine:
    """Draws the permanent cosmetic outcomes of a ticket's first admission.

    Must run inside the transaction that granted the first admission: the golden
    ticket cap is counted under a lock on the event row.
    """

    def __init__(self, rng: RandomSource | None = None, rules: t.Iterable[EffectRule] = EFFECT_RULES) -> None:
        self.rng = rng or default_random_source()
        self.rules = tuple(rules)

    def draw(self, ticket: Ticket) -> EffectOutcome:
        event = ticket.event
        if event.golden_ticket_enabled and event.golden_ticket_count is not None:
            event = Event.objects.select_for_update().get(pk=event.pk)

        is_golden = draw_golden_ticket(event, self.rng)
        special_effect = None
        if event.special_effects_enabled:
            special_effect = draw_special_effect(event, ticket, self.rng, self.rules)

        if is_golden or special_effect:
            logger.info(
                "admission_effects_awarded",
                ticket_id=str(ticket.pk),
                event_id=str(event.pk),
                is_golden_ticket=is_golden,
                special_effect=special_effect,
            )
        return EffectOutcome(is_golden_ticket=is_golden, special_effect=special_effect)


def effect_palette(ticket: Ticket) -> MonthlyColor | None:
    """The colour pair a ``monthly`` effect renders with, keyed by the event month."""
    if ticket.special_effect != SpecialEffect.MONTHLY:
        return None
    return MONTHLY_COLORS[event_local_date(ticket.event).month]
