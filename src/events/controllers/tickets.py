from uuid import UUID

from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.service.admission import issue_credential

from .user_aware_controller import UserAwareController


@api_controller("/tickets", auth=JWTAuth(), tags=["Tickets"], throttle=UserDefaultThrottle())
class TicketController(UserAwareController):
    """Endpoints for the ticket holder."""

    def get_ticket(self, ticket_id: UUID) -> models.Ticket:
        return get_object_or_404(models.Ticket.objects.select_related("event"), pk=ticket_id, user=self.user())

    @route.get("/{ticket_id}", url_name="get_ticket", response=schema.TicketSnapshotSchema)
    def get_ticket_snapshot(self, ticket_id: UUID) -> models.Ticket:
        """The ticket as the holder sees it, including any golden ticket or special effect."""
        return self.get_ticket(ticket_id)

    @route.post(
        "/{ticket_id}/credential",
        url_name="issue_credential",
        response={201: schema.CredentialSchema},
        throttle=WriteThrottle(),
    )
    def create_credential(
        self, ticket_id: UUID, payload: schema.CredentialCreateSchema
    ) -> tuple[int, models.ValidationCredential]:
        """Open a validation session: a short-lived code and token to show at the door.

        Any previous credential of the ticket stops working.
        """
        ticket = self.get_ticket(ticket_id)
        location = payload.location
        credential = issue_credential(
            ticket,
            latitude=location.latitude if location else None,
            longitude=location.longitude if location else None,
        )
        return 201, credential
