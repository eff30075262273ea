import secrets
import string
import typing as t
from datetime import datetime

from django.conf import settings
from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel
from geo.service import Coordinates

from .event import Event

TICKET_NUMBER_ALPHABET = string.ascii_uppercase + string.digits


def generate_ticket_number() -> str:
    """A short human-readable ticket number, e.g. ``TKT-7QX2M9KD``."""
    return "TKT-" + "".join(secrets.choice(TICKET_NUMBER_ALPHABET) for _ in range(8))


def generate_credential_token() -> str:
    """The scannable payload of a validation credential."""
    return secrets.token_urlsafe(24)


class TicketQuerySet(models.QuerySet["Ticket"]):
    def for_event(self, event: Event) -> t.Self:
        """Tickets of the given event."""
        return self.filter(event=event)

    def validated(self) -> t.Self:
        """Tickets admitted at least once."""
        return self.filter(use_count__gt=0)

    def golden(self) -> t.Self:
        """Tickets that won the golden ticket draw."""
        return self.filter(is_golden_ticket=True)


class Ticket(TimeStampedModel):
    """A ticket for a specific user to a specific event.

    The admission fields (use_count, validated_*, is_golden_ticket, special_effect) are
    written exclusively by the admission engine through conditional queryset updates.
    """

    class UsageState(models.TextChoices):
        UNUSED = "unused", "Unused"
        PARTIALLY_USED = "partially_used", "Partially used"
        FULLY_USED = "fully_used", "Fully used"

    class SpecialEffect(models.TextChoices):
        NICE = "nice", "Nice"
        PRIDE = "pride", "Pride"
        HEARTS = "hearts", "Hearts"
        SPOOKY = "spooky", "Spooky"
        SNOWFLAKES = "snowflakes", "Snowflakes"
        FIREWORKS = "fireworks", "Fireworks"
        CONFETTI = "confetti", "Confetti"
        MONTHLY = "monthly", "Monthly colors"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="tickets"
    )
    ticket_number = models.CharField(max_length=32, default=generate_ticket_number)

    use_count = models.PositiveIntegerField(default=0, editable=False)
    validated_at = models.DateTimeField(null=True, blank=True, editable=False)
    validated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="validated_tickets",
        editable=False,
    )
    validation_code = models.CharField(
        max_length=4, blank=True, editable=False, help_text="Manual code of the credential used at first admission."
    )
    last_validated_at = models.DateTimeField(null=True, blank=True, editable=False)
    is_golden_ticket = models.BooleanField(default=False, editable=False)
    special_effect = models.CharField(
        max_length=20, choices=SpecialEffect.choices, null=True, blank=True, editable=False
    )

    objects = TicketQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["event", "ticket_number"], name="unique_ticket_number_per_event"),
            models.CheckConstraint(condition=models.Q(use_count__gte=0), name="ticket_use_count_non_negative"),
        ]
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.ticket_number

    @property
    def is_validated(self) -> bool:
        """A ticket is validated once it has been admitted at least once."""
        return self.use_count > 0

    @property
    def max_uses(self) -> int | None:
        """Admission limit inherited from the event's re-entry policy."""
        return self.event.admission_limit

    @property
    def usage_state(self) -> "Ticket.UsageState":
        """Where the ticket is in its admission lifecycle."""
        if self.use_count == 0:
            return self.UsageState.UNUSED
        max_uses = self.max_uses
        if max_uses is not None and self.use_count >= max_uses:
            return self.UsageState.FULLY_USED
        return self.UsageState.PARTIALLY_USED

    @property
    def has_admissions_left(self) -> bool:
        """Whether another admission is still allowed by the re-entry policy."""
        return self.usage_state != self.UsageState.FULLY_USED


class ValidationCredentialQuerySet(models.QuerySet["ValidationCredential"]):
    def live(self, now: datetime | None = None) -> t.Self:
        """Credentials that have not expired yet."""
        return self.filter(expires_at__gt=now or timezone.now())


class ValidationCredential(TimeStampedModel):
    """A rotating, time-boxed credential presented at the door.

    It carries a 4-digit manual code (unique among the live credentials of an event)
    and a scannable token. Issuing a new credential supersedes the previous ones.
    """

    ticket = models.ForeignKey(Ticket, on_delete=models.CASCADE, related_name="credentials")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="credentials")
    code = models.CharField(max_length=4, db_index=True)
    token = models.CharField(max_length=64, unique=True, default=generate_credential_token)
    expires_at = models.DateTimeField(db_index=True)
    holder_latitude = models.FloatField(null=True, blank=True)
    holder_longitude = models.FloatField(null=True, blank=True)

    objects = ValidationCredentialQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=["event", "code"], name="credential_event_code"),
        ]
        ordering = ["-expires_at"]

    def __str__(self) -> str:
        return f"{self.ticket_id}:{self.code}"

    def is_expired(self, now: datetime | None = None) -> bool:
        """Expiry is computed on demand from the stored timestamp."""
        return self.expires_at <= (now or timezone.now())

    @property
    def holder_coordinates(self) -> Coordinates | None:
        """Where the holder was when the credential was opened."""
        return Coordinates.from_optional(self.holder_latitude, self.holder_longitude)


class TicketAdmission(TimeStampedModel):
    """Append-only record of a granted admission."""

    ticket = models.ForeignKey(Ticket, on_delete=models.CASCADE, related_name="admissions")
    validated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="admissions_granted",
    )
    use_number = models.PositiveIntegerField()
    validator_distance_meters = models.FloatField(null=True, blank=True)
    holder_distance_meters = models.FloatField(null=True, blank=True)

    class Meta:
        constraints = [
            # One row per granted use.
            models.UniqueConstraint(fields=["ticket", "use_number"], name="unique_admission_use_number"),
        ]
        ordering = ["ticket", "use_number"]

    def __str__(self) -> str:
        return f"{self.ticket_id}#{self.use_number}"
