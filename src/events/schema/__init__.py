"""Events schema package.

Schemas are organized into modules that mirror the models package structure
and re-exported here.
"""

from .admission import AdmissionStatsSchema, ValidateSchema
from .ticket import CredentialCreateSchema, CredentialSchema, EffectPaletteSchema, TicketSnapshotSchema
from .validator import DelegatedValidatorCreateSchema, DelegatedValidatorSchema

__all__ = [
    "AdmissionStatsSchema",
    "ValidateSchema",
    "CredentialCreateSchema",
    "CredentialSchema",
    "EffectPaletteSchema",
    "TicketSnapshotSchema",
    "DelegatedValidatorCreateSchema",
    "DelegatedValidatorSchema",
]
