from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

# Position before the first entry of any stream
EARLIEST_POSITION = "0-0"


def position_key(position: str) -> Tuple[int, int]:
    """Sort key for `<ms>-<seq>` positions; malformed parts sort as 0."""
    head, _, tail = position.partition("-")
    return (int(head) if head.isdigit() else 0, int(tail) if tail.isdigit() else 0)


@dataclass(frozen=True)
class LogEntry:
    """One durable log entry: its position token and its field map."""
    position: str
    fields: Dict[str, str] = field(default_factory=dict)


class TicketLog(ABC):
    """
    Durable append-only log with consumer-side cursors.

    Contract:
    - append(fields) -> position token of the new entry
    - read(after, block_ms, count) -> entries strictly after `after`, in order;
      waits at most `block_ms` for new entries, returns [] on timeout
    - positions are opaque to callers and monotonically increasing
    """

    @abstractmethod
    async def append(self, fields: Dict[str, str]) -> str:
        raise NotImplementedError

    @abstractmethod
    async def read(self, after: str, *, block_ms: int, count: int = 100) -> List[LogEntry]:
        raise NotImplementedError

    @abstractmethod
    async def latest_position(self) -> str:
        """Position of the newest entry, or EARLIEST_POSITION if empty."""
        raise NotImplementedError

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None
