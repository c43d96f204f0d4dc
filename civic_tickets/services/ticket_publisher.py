"""
Ticket publisher - builds the canonical Ticket and appends it to the log.

DESIGN NOTE:
- Called only after boundary classification passed
- One log entry per ticket, single field `data` holding the ticket JSON
- No retry here: a failed append is reported to the submitter, who resubmits
"""

import logging
import time
import uuid
from typing import Callable

from civic_tickets.core.errors import PublishFailure
from civic_tickets.models.ticket import Ticket, TicketSubmission
from civic_tickets.services.ticket_log import TicketLog

logger = logging.getLogger(__name__)

PAYLOAD_FIELD = "data"


def _now_ms() -> int:
    return int(time.time() * 1000)


class TicketPublisher:
    def __init__(
        self,
        log: TicketLog,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.log = log
        self._clock = clock
        self._new_id = id_factory
        self._last_timestamp = 0

    def _next_timestamp(self) -> int:
        # Never go backwards within this process, even if the wall clock does
        self._last_timestamp = max(self._last_timestamp, self._clock())
        return self._last_timestamp

    def build_ticket(self, submission: TicketSubmission, area: str) -> Ticket:
        return Ticket(
            id=self._new_id(),
            concern=submission.concern,
            notes=submission.notes,
            user_name=submission.user_name,
            contact=submission.contact,
            lat=submission.lat,
            lng=submission.lng,
            area=area,
            timestamp=self._next_timestamp(),
        )

    async def publish(self, submission: TicketSubmission, area: str) -> Ticket:
        """
        Raises:
            PublishFailure: the log append did not succeed
        """
        ticket = self.build_ticket(submission, area)
        try:
            position = await self.log.append({PAYLOAD_FIELD: ticket.to_json()})
        except Exception as e:
            logger.error(f"Failed to publish ticket: ticket_id={ticket.id} error={e}")
            raise PublishFailure(ticket.id, e) from e

        logger.info(f"Ticket published: ticket_id={ticket.id} position={position}")
        return ticket
