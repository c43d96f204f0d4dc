"""
Durable ticket log: the hand-off channel between intake and persistence.
"""

from .base import EARLIEST_POSITION, LogEntry, TicketLog, position_key
from .memory import InMemoryTicketLog
from .redis_stream import RedisStreamTicketLog

__all__ = [
    "EARLIEST_POSITION",
    "LogEntry",
    "TicketLog",
    "position_key",
    "InMemoryTicketLog",
    "RedisStreamTicketLog",
]
