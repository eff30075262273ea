"""Admission engine settings.

Every value can be overridden through the environment.
"""

from datetime import timedelta

from decouple import config

# Lifetime of a rotating validation credential (4-digit code + scannable token).
ADMISSION_CREDENTIAL_TTL = timedelta(seconds=config("ADMISSION_CREDENTIAL_TTL_SECONDS", default=180, cast=int))

# Used when an event enables golden tickets without configuring its own odds.
ADMISSION_GOLDEN_TICKET_DEFAULT_ODDS = config("ADMISSION_GOLDEN_TICKET_DEFAULT_ODDS", default=0.01, cast=float)

# How long the async flow waits for the device location before giving up.
ADMISSION_LOCATION_TIMEOUT_SECONDS = config("ADMISSION_LOCATION_TIMEOUT_SECONDS", default=30.0, cast=float)

# Compare-and-swap attempts before the usage transition is reported as unavailable.
ADMISSION_TRANSITION_MAX_RETRIES = config("ADMISSION_TRANSITION_MAX_RETRIES", default=5, cast=int)
