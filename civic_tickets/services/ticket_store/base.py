from abc import ABC, abstractmethod
from typing import List, Optional

from civic_tickets.models.ticket import Ticket


class TicketStore(ABC):
    """
    Keyed ticket persistence.

    Contract:
    - insert_if_absent(ticket) -> True if stored, False if the id already
      existed (a no-op, never an error; this is what makes redelivery safe)
    - get_by_id(id) -> Ticket, raises NotFound
    - list_all() -> tickets ordered by timestamp, newest first
    - load_cursor/save_cursor keep the consumer's log position next to the
      data it describes
    """

    backend = "base"

    @abstractmethod
    def insert_if_absent(self, ticket: Ticket) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, ticket_id: str) -> Ticket:
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> List[Ticket]:
        raise NotImplementedError

    @abstractmethod
    def load_cursor(self, stream: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def save_cursor(self, stream: str, position: str) -> None:
        raise NotImplementedError

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        return None
