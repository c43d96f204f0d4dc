"""
SQLite ticket store.

Schema changes are tracked in `schema_migrations`; each migration runs once.
Column names match the tickets.db files written by earlier deployments
(`userName`, no `contact` column in the oldest ones).
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Callable, List, Optional

from civic_tickets.core.errors import NotFound
from civic_tickets.models.ticket import Ticket
from .base import TicketStore

logger = logging.getLogger(__name__)


def _columns(conn: sqlite3.Connection, table: str) -> List[str]:
    return [row[1] for row in conn.execute(f"PRAGMA table_info({table})")]


def _create_tickets(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS tickets(
          id TEXT PRIMARY KEY,
          concern TEXT,
          notes TEXT,
          userName TEXT,
          lat REAL,
          lng REAL,
          area TEXT,
          timestamp INTEGER
        )
        """
    )


def _add_contact_column(conn: sqlite3.Connection) -> None:
    # Tables created by newer deployments already have it
    if "contact" not in _columns(conn, "tickets"):
        conn.execute("ALTER TABLE tickets ADD COLUMN contact TEXT")


def _index_timestamp(conn: sqlite3.Connection) -> None:
    conn.execute("CREATE INDEX IF NOT EXISTS idx_tickets_timestamp ON tickets(timestamp DESC)")


def _create_consumer_cursors(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS consumer_cursors(
          stream TEXT PRIMARY KEY,
          position TEXT NOT NULL,
          updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """
    )


@dataclass(frozen=True)
class Migration:
    name: str
    apply: Callable[[sqlite3.Connection], None]


MIGRATIONS = [
    Migration("0001_create_tickets", _create_tickets),
    Migration("0002_add_contact_column", _add_contact_column),
    Migration("0003_index_tickets_timestamp", _index_timestamp),
    Migration("0004_create_consumer_cursors", _create_consumer_cursors),
]


def apply_migrations(conn: sqlite3.Connection, migrations: Optional[List[Migration]] = None) -> List[str]:
    """
    Apply pending migrations in order.

    Returns:
        Names of the migrations applied by this call (empty if up to date)
    """
    migrations = MIGRATIONS if migrations is None else migrations
    with conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_migrations("
            "name TEXT PRIMARY KEY, applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP)"
        )
    done = {row[0] for row in conn.execute("SELECT name FROM schema_migrations")}

    applied = []
    for migration in migrations:
        if migration.name in done:
            continue
        with conn:
            migration.apply(conn)
            conn.execute("INSERT INTO schema_migrations(name) VALUES (?)", (migration.name,))
        logger.info(f"Applied migration {migration.name}")
        applied.append(migration.name)
    return applied


def _row_to_ticket(row: sqlite3.Row) -> Ticket:
    return Ticket(
        id=row["id"],
        concern=row["concern"],
        notes=row["notes"],
        user_name=row["userName"],
        contact=row["contact"],
        lat=row["lat"],
        lng=row["lng"],
        area=row["area"],
        timestamp=row["timestamp"],
    )


class SqliteTicketStore(TicketStore):
    backend = "sqlite"

    def __init__(self, path: str = "tickets.db"):
        self.path = path
        # Accessed from the event loop and from the test client's portal thread;
        # callers never write concurrently (single consumer).
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        applied = apply_migrations(self._conn)
        logger.info(f"SQLite ticket store ready at {path} ({len(applied)} migration(s) applied)")

    def insert_if_absent(self, ticket: Ticket) -> bool:
        with self._conn:
            cur = self._conn.execute(
                "INSERT OR IGNORE INTO tickets (id, concern, notes, userName, contact, lat, lng, area, timestamp) "
                "VALUES (?,?,?,?,?,?,?,?,?)",
                (
                    ticket.id,
                    ticket.concern,
                    ticket.notes,
                    ticket.user_name,
                    ticket.contact,
                    ticket.lat,
                    ticket.lng,
                    ticket.area,
                    ticket.timestamp,
                ),
            )
        return cur.rowcount == 1

    def get_by_id(self, ticket_id: str) -> Ticket:
        row = self._conn.execute("SELECT * FROM tickets WHERE id = ?", (ticket_id,)).fetchone()
        if row is None:
            raise NotFound(ticket_id)
        return _row_to_ticket(row)

    def list_all(self) -> List[Ticket]:
        rows = self._conn.execute("SELECT * FROM tickets ORDER BY timestamp DESC").fetchall()
        return [_row_to_ticket(row) for row in rows]

    def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM tickets").fetchone()[0]

    def load_cursor(self, stream: str) -> Optional[str]:
        row = self._conn.execute("SELECT position FROM consumer_cursors WHERE stream = ?", (stream,)).fetchone()
        return row["position"] if row else None

    def save_cursor(self, stream: str, position: str) -> None:
        with self._conn:
            self._conn.execute(
                "INSERT INTO consumer_cursors(stream, position) VALUES (?, ?) "
                "ON CONFLICT(stream) DO UPDATE SET position = excluded.position, updated_at = CURRENT_TIMESTAMP",
                (stream, position),
            )

    def ping(self) -> bool:
        try:
            self._conn.execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error as e:
            logger.warning(f"SQLite ping failed: {e}")
            return False

    def close(self) -> None:
        self._conn.close()
