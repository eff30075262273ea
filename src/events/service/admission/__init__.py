"""Ticket admission engine.

Public API:
    AdmissionService: validates one ValidationAttempt and returns an AdmissionDecision.
    validate_ticket: convenience wrapper building the attempt.
    validate_with_location: async flow that asks for the device location once.
    issue_credential / resolve_credential: rotating validation credentials.
"""

from .credentials import issue_credential, resolve_credential
from .effects import EFFECT_RULES, MONTHLY_COLORS, EffectAssignmentEngine, effect_palette
from .enums import AdmissionOutcome, LocationStatus, ValidatorRole
from .location import LocationResult, validate_with_location
from .service import AdmissionService, validate_ticket
from .stats import admission_stats
from .types import AdmissionDecision, RandomSource, ValidationAttempt

__all__ = [
    "EFFECT_RULES",
    "MONTHLY_COLORS",
    "AdmissionDecision",
    "AdmissionOutcome",
    "AdmissionService",
    "EffectAssignmentEngine",
    "LocationResult",
    "LocationStatus",
    "RandomSource",
    "ValidationAttempt",
    "ValidatorRole",
    "admission_stats",
    "effect_palette",
    "issue_credential",
    "resolve_credential",
    "validate_ticket",
    "validate_with_location",
]
