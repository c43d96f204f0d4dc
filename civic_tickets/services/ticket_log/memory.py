import asyncio
import time
from typing import Dict, List

from .base import EARLIEST_POSITION, LogEntry, TicketLog


def _seq(position: str) -> int:
    head = position.split("-", 1)[0]
    return int(head) if head.isdigit() else 0


class InMemoryTicketLog(TicketLog):
    """
    Dev/test log. Lives inside one process, so it is NOT durable; use the
    Redis stream for anything that has to survive a restart.

    Positions look like Redis ids (`<seq>-0`) so cursors behave the same.
    """

    POLL_INTERVAL = 0.02

    def __init__(self) -> None:
        self._entries: List[LogEntry] = []

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    async def append(self, fields: Dict[str, str]) -> str:
        position = f"{len(self._entries) + 1}-0"
        self._entries.append(LogEntry(position=position, fields=dict(fields)))
        return position

    def _after(self, after: str, count: int) -> List[LogEntry]:
        start = _seq(after)
        return self._entries[start:start + count]

    async def read(self, after: str, *, block_ms: int, count: int = 100) -> List[LogEntry]:
        deadline = time.monotonic() + block_ms / 1000.0
        while True:
            found = self._after(after, count)
            if found or time.monotonic() >= deadline:
                return found
            await asyncio.sleep(self.POLL_INTERVAL)

    async def latest_position(self) -> str:
        if not self._entries:
            return EARLIEST_POSITION
        return self._entries[-1].position
