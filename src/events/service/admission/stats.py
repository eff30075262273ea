from events.models import Event, Ticket, TicketAdmission


def admission_stats(event: Event) -> dict[str, object]:
    """Headline admission counters for an event."""
    tickets = Ticket.objects.for_event(event)
    return {
        "event_id": event.pk,
        "total_tickets": tickets.count(),
        "validated_tickets": tickets.validated().count(),
        "total_admissions": TicketAdmission.objects.filter(ticket__event=event).count(),
        "golden_tickets": tickets.golden().count(),
    }
