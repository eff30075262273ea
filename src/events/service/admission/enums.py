"""Enums for the admission engine."""

from enum import StrEnum

from django.utils.translation import gettext_noop


class AdmissionOutcome(StrEnum):
    """The single terminal category of an admission attempt."""

    GRANTED = "granted"
    INVALID_CODE = "invalid_code"
    EXPIRED_CODE = "expired_code"
    UNAUTHORIZED = "unauthorized"
    ALREADY_VALIDATED = "already_validated"
    MAX_USES_REACHED = "max_uses_reached"
    OUTSIDE_VALID_TIME = "outside_valid_time"
    OUTSIDE_GEOFENCE = "outside_geofence"
    LOCATION_REQUIRED = "location_required"
    LOCATION_DENIED = "location_denied"


class Reasons(StrEnum):
    """Human-facing message for each outcome.

    Note: Strings are marked with _noop() for translation extraction.
    The actual translation happens in composer.py when using _(Reasons.XXX).
    """

    GRANTED = gettext_noop("Ticket validated successfully.")
    INVALID_CODE = gettext_noop("Invalid ticket code.")
    EXPIRED_CODE = gettext_noop("This code has expired. Ask the holder to refresh it.")
    UNAUTHORIZED = gettext_noop("Ticket is authentic but you are not authorized to validate it.")
    ALREADY_VALIDATED = gettext_noop("Ticket already validated.")
    MAX_USES_REACHED = gettext_noop("This ticket has no admissions left.")
    OUTSIDE_VALID_TIME = gettext_noop("Validation is not open yet.")
    OUTSIDE_VALID_TIME_WITH_START = gettext_noop("Validation begins at {opens_at}.")
    OUTSIDE_GEOFENCE = gettext_noop("Validation must happen within {radius} meters of the venue.")
    LOCATION_REQUIRED = gettext_noop("Location is required to validate tickets for this event.")
    LOCATION_DENIED = gettext_noop("Location permission was denied or timed out.")


class ValidatorRole(StrEnum):
    """Why a validator is (or is not) allowed to admit a ticket."""

    OWNER = "owner"
    DELEGATED = "delegated"
    PEER = "peer"
    NONE = "none"


class CredentialKind(StrEnum):
    MANUAL_CODE = "manual_code"
    SCANNED_TOKEN = "scanned_token"


class GeofenceStatus(StrEnum):
    WITHIN = "within"
    OUTSIDE = "outside"
    LOCATION_REQUIRED = "location_required"


class LocationStatus(StrEnum):
    """Outcome of asking the validator's device for its location."""

    RESOLVED = "resolved"
    DENIED = "denied"
    TIMED_OUT = "timed_out"
