class AdmissionUnavailableError(Exception):
    """Raised when the usage transition cannot be committed (storage fault or contention).

    No ticket state is mutated; the caller is expected to retry the attempt.
    """


class CredentialIssuanceError(Exception):
    """Raised when a validation credential cannot be issued for a ticket."""


class CodePoolExhaustedError(CredentialIssuanceError):
    """Raised when every 4-digit code of an event is held by a live credential."""
