"""
Stream consumer - reads the ticket log and persists each entry.

Delivery is at-least-once: an entry can be handed to the store more than
once (restart before the cursor was saved, redelivery), so the store's
insert-if-absent is what keeps the table correct.

Cursor handling:
- Loaded from the store at start; falls back to CONSUMER_START_POSITION
- A saved cursor past the newest log entry means the log was reset: start over
- Advanced and saved after an entry is stored
- An entry that cannot be decoded is logged and skipped (cursor advances)
- A storage failure leaves the cursor where it was, so the entry is re-read
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from civic_tickets.models.ticket import Ticket
from civic_tickets.services.ticket_log import EARLIEST_POSITION, LogEntry, TicketLog, position_key
from civic_tickets.services.ticket_publisher import PAYLOAD_FIELD
from civic_tickets.services.ticket_store import TicketStore

logger = logging.getLogger(__name__)

START_EARLIEST = "earliest"
START_LATEST = "latest"


class UndecodableEntry(ValueError):
    pass


def decode_entry(entry: LogEntry) -> Ticket:
    payload = entry.fields.get(PAYLOAD_FIELD)
    if payload is None:
        raise UndecodableEntry(f"entry {entry.position} has no '{PAYLOAD_FIELD}' field")
    try:
        return Ticket.from_json(payload)
    except ValueError as e:
        raise UndecodableEntry(f"entry {entry.position}: {e}") from e


@dataclass
class ConsumeStats:
    received: int = 0
    inserted: int = 0
    duplicates: int = 0
    skipped: int = 0


class TicketStreamConsumer:
    def __init__(
        self,
        log: TicketLog,
        store: TicketStore,
        *,
        stream_name: str = "tickets-stream",
        block_ms: int = 5000,
        batch_size: int = 100,
        error_pause: float = 1.0,
        start_position: str = START_EARLIEST,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if start_position not in (START_EARLIEST, START_LATEST):
            raise ValueError(f"start_position must be '{START_EARLIEST}' or '{START_LATEST}'")
        self.log = log
        self.store = store
        self.stream_name = stream_name
        self.block_ms = block_ms
        self.batch_size = batch_size
        self.error_pause = error_pause
        self.start_position = start_position
        self._sleep = sleep
        self.cursor: Optional[str] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def initialize_cursor(self) -> str:
        saved = self.store.load_cursor(self.stream_name)
        if saved:
            latest = await self.log.latest_position()
            if position_key(saved) > position_key(latest):
                # Log was reset (fresh in-memory log, flushed Redis); replay is idempotent
                logger.warning(
                    f"Saved cursor {saved} is past the newest entry {latest} of "
                    f"'{self.stream_name}'; restarting from the beginning"
                )
                saved = None
        if saved:
            self.cursor = saved
            logger.info(f"Consumer resuming '{self.stream_name}' after {saved}")
        elif self.start_position == START_LATEST:
            self.cursor = await self.log.latest_position()
            logger.info(f"Consumer starting '{self.stream_name}' at latest entry {self.cursor}")
        else:
            self.cursor = EARLIEST_POSITION
            logger.info(f"Consumer starting '{self.stream_name}' from the beginning")
        return self.cursor

    def _advance(self, position: str) -> None:
        self.cursor = position
        self.store.save_cursor(self.stream_name, position)

    async def poll_once(self) -> ConsumeStats:
        """One blocking read and the handling of whatever it returned."""
        if self.cursor is None:
            await self.initialize_cursor()

        stats = ConsumeStats()
        entries = await self.log.read(self.cursor, block_ms=self.block_ms, count=self.batch_size)
        for entry in entries:
            stats.received += 1
            try:
                ticket = decode_entry(entry)
            except UndecodableEntry as e:
                logger.error(f"Skipping undecodable log entry: {e}")
                stats.skipped += 1
                self._advance(entry.position)
                continue

            if self.store.insert_if_absent(ticket):
                stats.inserted += 1
                logger.info(f"Ticket stored: ticket_id={ticket.id} position={entry.position}")
            else:
                stats.duplicates += 1
                logger.info(f"Duplicate delivery ignored: ticket_id={ticket.id} position={entry.position}")
            self._advance(entry.position)
        return stats

    async def run(self) -> None:
        """Consume until stop() is called. Errors are logged, never raised."""
        self._running = True
        logger.info(f"Stream consumer started on '{self.stream_name}'")
        while self._running:
            try:
                await self.poll_once()
            except Exception as e:
                logger.error(f"Consumer error: {e}", exc_info=True)
                await self._sleep(self.error_pause)
        logger.info(f"Stream consumer stopped on '{self.stream_name}'")

    def stop(self) -> None:
        self._running = False
