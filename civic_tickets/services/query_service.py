"""
Query Service - role-scoped reads over the ticket store.

Each role maps to one statically defined view model; the same mapping is
used for the list and single-ticket endpoints.
"""

from typing import Dict, List, Type, Union

from civic_tickets.core.errors import Forbidden
from civic_tickets.models.auth import StaffRole
from civic_tickets.models.ticket import OfficerTicketView, SupervisorTicketView, Ticket
from civic_tickets.services.ticket_store import TicketStore

TicketView = Union[OfficerTicketView, SupervisorTicketView]

ROLE_VIEWS: Dict[StaffRole, Type[TicketView]] = {
    StaffRole.OFFICER: OfficerTicketView,
    StaffRole.SUPERVISOR: SupervisorTicketView,
}


def view_for(role) -> Type[TicketView]:
    try:
        return ROLE_VIEWS[StaffRole(role)]
    except (KeyError, ValueError):
        raise Forbidden("Role is not allowed to read tickets") from None


def project(ticket: Ticket, role) -> TicketView:
    return view_for(role).from_ticket(ticket)


class QueryService:
    def __init__(self, store: TicketStore):
        self.store = store

    def list_tickets(self, role) -> List[TicketView]:
        """All tickets, newest first, projected for `role`."""
        view = view_for(role)
        return [view.from_ticket(t) for t in self.store.list_all()]

    def get_ticket(self, role, ticket_id: str) -> TicketView:
        """
        Raises:
            Forbidden: unknown role (checked before the lookup)
            NotFound: no ticket with that id
        """
        view = view_for(role)
        return view.from_ticket(self.store.get_by_id(ticket_id))
