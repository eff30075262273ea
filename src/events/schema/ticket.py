"""Ticket and validation credential schemas."""

from uuid import UUID

from ninja import ModelSchema, Schema

from events.models import Ticket, ValidationCredential
from events.service.admission import effect_palette
from geo.schema import CoordinatesSchema


class CredentialCreateSchema(Schema):
    location: CoordinatesSchema | None = None


class CredentialSchema(ModelSchema):
    ticket_id: UUID
    event_id: UUID

    class Meta:
        model = ValidationCredential
        fields = ["id", "code", "token", "expires_at"]


class EffectPaletteSchema(Schema):
    name: str
    primary: str
    secondary: str


class TicketSnapshotSchema(ModelSchema):
    """What the holder's device shows once the ticket has been used."""

    event_id: UUID
    is_validated: bool
    max_uses: int | None = None
    usage_state: Ticket.UsageState
    effect_palette: EffectPaletteSchema | None = None

    class Meta:
        model = Ticket
        fields = [
            "id",
            "ticket_number",
            "use_count",
            "validated_at",
            "last_validated_at",
            "is_golden_ticket",
            "special_effect",
        ]

    @staticmethod
    def resolve_effect_palette(obj: Ticket) -> EffectPaletteSchema | None:
        palette = effect_palette(obj)
        if palette is None:
            return None
        return EffectPaletteSchema(name=palette.name, primary=palette.primary, secondary=palette.secondary)
