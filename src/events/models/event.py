import typing as t

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from common.models import TimeStampedModel
from geo.service import Coordinates

if t.TYPE_CHECKING:
    from accounts.models import TurnstileUser


class EventQuerySet(models.QuerySet["Event"]):
    def validatable_by(self, user: "TurnstileUser") -> t.Self:
        """Events the user may manage admissions for, as owner or delegated validator."""
        q = models.Q(owner=user)
        if user.email:
            q |= models.Q(delegated_validators__email=user.email.lower())
        return self.filter(q).distinct()


class Event(TimeStampedModel):
    """An event that ticket holders are admitted into."""

    class EarlyValidation(models.TextChoices):
        ANYTIME = "anytime", "Allow at anytime"
        TWO_HOURS_BEFORE = "two_hours_before", "Two hours before"
        ONE_HOUR_BEFORE = "one_hour_before", "One hour before"
        AT_START = "at_start", "At start time"

    class ReentryType(models.TextChoices):
        SINGLE_USE = "single_use", "No reentry (single use)"
        PASS = "pass", "Pass (multiple use)"
        UNLIMITED = "unlimited", "No limit"

    name = models.CharField(max_length=255, db_index=True)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="owned_events")
    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField(null=True, blank=True)
    venue_latitude = models.FloatField(
        null=True, blank=True, validators=[MinValueValidator(-90.0), MaxValueValidator(90.0)]
    )
    venue_longitude = models.FloatField(
        null=True, blank=True, validators=[MinValueValidator(-180.0), MaxValueValidator(180.0)]
    )

    early_validation = models.CharField(
        max_length=20, choices=EarlyValidation.choices, default=EarlyValidation.ANYTIME
    )
    reentry_type = models.CharField(max_length=20, choices=ReentryType.choices, default=ReentryType.SINGLE_USE)
    max_uses = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        help_text="Number of admissions per ticket. Only meaningful for passes.",
    )

    geofence_enabled = models.BooleanField(default=False)
    geofence_radius_meters = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text="Radius around the venue within which validator and holder must be. Required with the geofence.",
    )
    p2p_validation = models.BooleanField(
        default=False, help_text="Any ticket holder of this event may validate other tickets."
    )

    special_effects_enabled = models.BooleanField(default=False)
    golden_ticket_enabled = models.BooleanField(default=False)
    golden_ticket_odds = models.FloatField(
        null=True,
        blank=True,
        help_text="Probability of a first admission winning a golden ticket. Defaults to the platform setting.",
    )
    golden_ticket_count = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text="Maximum number of golden tickets this event can award. Empty means no cap.",
    )

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["start"]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        """Validate cross-field admission settings."""
        errors: dict[str, str] = {}
        if self.end and self.start and self.end <= self.start:
            errors["end"] = "The event must end after it starts."
        if self.geofence_enabled:
            if self.venue_coordinates is None:
                errors["geofence_enabled"] = "A geofence requires venue coordinates."
            if not self.geofence_radius_meters:
                errors["geofence_radius_meters"] = "A geofence requires a radius."
        if self.golden_ticket_odds is not None and not 0 < self.golden_ticket_odds <= 1:
            errors["golden_ticket_odds"] = "Golden ticket odds must be in (0, 1]."
        if errors:
            raise DjangoValidationError(errors)

    @property
    def venue_coordinates(self) -> Coordinates | None:
        """The venue location, if both coordinates are set."""
        return Coordinates.from_optional(self.venue_latitude, self.venue_longitude)

    @property
    def admission_limit(self) -> int | None:
        """How many times a single ticket may be admitted. None means unlimited."""
        match self.reentry_type:
            case self.ReentryType.SINGLE_USE:
                return 1
            case self.ReentryType.PASS:
                return self.max_uses
            case _:
                return None

    @property
    def effective_golden_ticket_odds(self) -> float:
        """The golden ticket probability, falling back to the platform default."""
        if self.golden_ticket_odds is not None:
            return self.golden_ticket_odds
        return float(settings.ADMISSION_GOLDEN_TICKET_DEFAULT_ODDS)


class DelegatedValidator(TimeStampedModel):
    """An email address the event owner authorised to validate tickets."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="delegated_validators")
    email = models.EmailField()
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="delegations_added",
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["event", "email"], name="unique_delegated_validator_per_event"),
        ]
        ordering = ["email"]

    def __str__(self) -> str:
        return f"{self.email} @ {self.event_id}"

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Store emails lower-cased so the unique constraint is case-insensitive."""
        self.email = self.email.strip().lower()
        super().save(*args, **kwargs)
