"""
Ticket persistence backends.
"""

from .base import TicketStore
from .sqlite_store import SqliteTicketStore, apply_migrations

__all__ = ["TicketStore", "SqliteTicketStore", "apply_migrations"]
