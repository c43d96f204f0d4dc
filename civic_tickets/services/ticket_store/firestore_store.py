"""
Firestore ticket store.

Tickets live in `tickets/{id}`. `document.create()` fails with AlreadyExists
when the id is taken, which gives insert-if-absent without a transaction.
Firestore is schemaless, so there are no migrations here.
"""

import logging
from typing import Any, List, Optional

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists

from civic_tickets.core.errors import NotFound
from civic_tickets.models.ticket import Ticket
from .base import TicketStore

logger = logging.getLogger(__name__)


class FirestoreTicketStore(TicketStore):
    backend = "firestore"

    def __init__(self, db: Any, collection: str = "tickets", cursor_collection: str = "consumer_cursors"):
        self._db = db
        self.collection = collection
        self.cursor_collection = cursor_collection

    def insert_if_absent(self, ticket: Ticket) -> bool:
        doc_ref = self._db.collection(self.collection).document(ticket.id)
        try:
            doc_ref.create(ticket.model_dump(by_alias=True))
        except AlreadyExists:
            logger.debug(f"Ticket {ticket.id} already stored; skipping")
            return False
        return True

    def get_by_id(self, ticket_id: str) -> Ticket:
        snapshot = self._db.collection(self.collection).document(ticket_id).get()
        if not snapshot.exists:
            raise NotFound(ticket_id)
        return Ticket.model_validate(snapshot.to_dict())

    def list_all(self) -> List[Ticket]:
        query = self._db.collection(self.collection).order_by("timestamp", direction=firestore.Query.DESCENDING)
        return [Ticket.model_validate(doc.to_dict()) for doc in query.stream()]

    def load_cursor(self, stream: str) -> Optional[str]:
        snapshot = self._db.collection(self.cursor_collection).document(stream).get()
        if not snapshot.exists:
            return None
        return (snapshot.to_dict() or {}).get("position")

    def save_cursor(self, stream: str, position: str) -> None:
        self._db.collection(self.cursor_collection).document(stream).set(
            {"position": position, "updated_at": firestore.SERVER_TIMESTAMP}
        )

    def ping(self) -> bool:
        try:
            self._db.collection(self.collection).limit(1).get()
            return True
        except Exception as e:
            logger.warning(f"Firestore ping failed: {e}")
            return False
