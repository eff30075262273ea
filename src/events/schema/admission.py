"""Admission request/response schemas."""

import typing as t
from uuid import UUID

from ninja import Schema
from pydantic import StringConstraints

from geo.schema import CoordinatesSchema

CredentialString = t.Annotated[str, StringConstraints(min_length=1, max_length=128, strip_whitespace=True)]


class ValidateSchema(Schema):
    credential: CredentialString
    event_id: UUID | None = None
    validator_location: CoordinatesSchema | None = None
    holder_location: CoordinatesSchema | None = None


class AdmissionStatsSchema(Schema):
    event_id: UUID
    total_tickets: int
    validated_tickets: int
    total_admissions: int
    golden_tickets: int
