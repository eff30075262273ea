"""Types for the admission engine."""

import datetime
import typing as t
import uuid
from dataclasses import dataclass, field

from django.utils import timezone
from pydantic import BaseModel

from geo.service import Coordinates

from .enums import AdmissionOutcome, CredentialKind, GeofenceStatus, ValidatorRole

if t.TYPE_CHECKING:
    from accounts.models import TurnstileUser
    from events.models import ValidationCredential


class RandomSource(t.Protocol):
    """Anything with ``random() -> float`` in [0, 1), e.g. ``random.Random(seed)``."""

    def random(self) -> float: ...


@dataclass(frozen=True)
class ValidationAttempt:
    """A single presentation of a credential at the door. Never persisted."""

    credential: str
    validator: "TurnstileUser"
    validator_location: Coordinates | None = None
    holder_location: Coordinates | None = None
    event_id: uuid.UUID | None = None
    attempted_at: datetime.datetime = field(default_factory=timezone.now)


@dataclass(frozen=True)
class CredentialResolution:
    kind: CredentialKind | None
    credential: "ValidationCredential | None" = None
    failure: AdmissionOutcome | None = None

    @property
    def is_resolved(self) -> bool:
        return self.credential is not None and self.failure is None


@dataclass(frozen=True)
class AuthorizationResult:
    is_authentic: bool
    can_validate: bool
    role: ValidatorRole


@dataclass(frozen=True)
class GeofenceResult:
    status: GeofenceStatus
    radius_meters: float
    validator_distance_meters: float | None = None
    holder_distance_meters: float | None = None
    missing: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return self.status == GeofenceStatus.WITHIN


@dataclass(frozen=True)
class EffectOutcome:
    is_golden_ticket: bool = False
    special_effect: str | None = None


@dataclass(frozen=True)
class UsageTransition:
    """Result of asking the usage state machine for one more admission."""

    granted: bool
    previous_use_count: int
    use_count: int
    failure: AdmissionOutcome | None = None
    effects: EffectOutcome | None = None

    @property
    def is_first_admission(self) -> bool:
        return self.granted and self.previous_use_count == 0


class AdmissionDecision(BaseModel):
    """The outcome of an admission attempt, as returned to the caller."""

    outcome: AdmissionOutcome
    valid: bool
    can_validate: bool = False
    is_authentic: bool = False
    already_validated: bool = False
    outside_valid_time: bool = False
    outside_geofence: bool = False
    requires_location: bool = False
    missing_locations: list[str] = []
    assigned_effect: str | None = None
    is_golden_ticket: bool = False
    message: str
    ticket_id: uuid.UUID | None = None
    event_id: uuid.UUID | None = None
    ticket_number: str | None = None
    use_count: int | None = None
    max_uses: int | None = None
    validation_opens_at: datetime.datetime | None = None
    validator_distance_meters: float | None = None
    holder_distance_meters: float | None = None
