"""Delegated validator schemas."""

from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import EmailStr

from events.models import DelegatedValidator


class DelegatedValidatorCreateSchema(Schema):
    email: EmailStr


class DelegatedValidatorSchema(ModelSchema):
    event_id: UUID

    class Meta:
        model = DelegatedValidator
        fields = ["id", "email", "created_at"]
