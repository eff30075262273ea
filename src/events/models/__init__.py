from .event import DelegatedValidator, Event
from .ticket import Ticket, TicketAdmission, ValidationCredential

__all__ = [
    "DelegatedValidator",
    "Event",
    "Ticket",
    "TicketAdmission",
    "ValidationCredential",
]
