"""
SQLite adapters for the event store and website repository.

Timestamps are stored as fixed-width UTC ISO-8601 strings, so string
comparison in SQL matches chronological order.

Driver errors are translated at this boundary:
- sqlite3.IntegrityError on event insert (unknown website) -> NotFoundError
- any other sqlite3.Error -> StoreUnavailable
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID

from src.components.analytics import NotFoundError, StoreUnavailable
from src.core.entities import Event, Website

logger = logging.getLogger(__name__)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def format_dt(dt: datetime) -> str:
    """Fixed-width UTC ISO string; naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def parse_dt(s: str) -> datetime:
    dt = datetime.fromisoformat(s)
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def ping(self) -> None:
        """Open a connection and run a trivial query."""
        with self._connection() as conn:
            conn.execute("SELECT 1").fetchone()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Connection scope that maps driver failures to StoreUnavailable."""
        conn: sqlite3.Connection | None = None
        try:
            conn = self._get_conn()
            yield conn
            conn.commit()
        except sqlite3.IntegrityError:
            if conn is not None:
                conn.rollback()
            raise
        except sqlite3.Error as e:
            if conn is not None:
                conn.rollback()
            logger.exception("SQLite store failure on %s", self.db_path)
            raise StoreUnavailable(f"Event store unavailable: {e}") from e
        finally:
            if conn is not None:
                conn.close()


class SQLiteEventStore(SQLiteRepoBase):
    """SQLite implementation of EventStorePort."""

    def insert(self, event: Event) -> Event:
        try:
            with self._connection() as conn:
                conn.execute(
                    """
                    INSERT INTO events (
                        id, website_id, session_id, event_type, event_name,
                        path, referrer, user_agent, screen_width, screen_height,
                        country, city, ip, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(event.id),
                        str(event.website_id),
                        event.session_id,
                        event.event_type,
                        event.event_name,
                        event.path,
                        event.referrer,
                        event.user_agent,
                        event.screen_width,
                        event.screen_height,
                        event.country,
                        event.city,
                        event.ip,
                        format_dt(event.created_at),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise NotFoundError("Invalid website ID", website_id=str(event.website_id)) from e
        return event

    def query(
        self,
        website_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
        event_type: str | None = None,
        order: Literal["asc", "desc"] = "asc",
        limit: int | None = None,
    ) -> list[Event]:
        sql = "SELECT * FROM events WHERE website_id = ?"
        params: list[Any] = [str(website_id)]

        if start is not None:
            sql += " AND created_at >= ?"
            params.append(format_dt(start))

        if end is not None:
            sql += " AND created_at <= ?"
            params.append(format_dt(end))

        if event_type:
            sql += " AND event_type = ?"
            params.append(event_type)

        sql += " ORDER BY created_at DESC" if order == "desc" else " ORDER BY created_at ASC"

        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with self._connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> Event:
        return Event(
            id=UUID(row["id"]),
            website_id=UUID(row["website_id"]),
            session_id=row["session_id"],
            event_type=row["event_type"],
            event_name=row["event_name"],
            path=row["path"],
            referrer=row["referrer"],
            user_agent=row["user_agent"],
            screen_width=row["screen_width"],
            screen_height=row["screen_height"],
            country=row["country"],
            city=row["city"],
            ip=row["ip"],
            created_at=parse_dt(row["created_at"]),
        )


class SQLiteWebsiteRepo(SQLiteRepoBase):
    """SQLite implementation of WebsiteRepoPort."""

    def get_by_id(self, website_id: UUID) -> Website | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM websites WHERE id = ?", (str(website_id),)
            ).fetchone()
        return self._map_row(row) if row else None

    def save(self, website: Website) -> Website:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO websites (id, name, domain, user_id, created_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    domain=excluded.domain
                """,
                (
                    str(website.id),
                    website.name,
                    website.domain,
                    website.user_id,
                    format_dt(website.created_at),
                ),
            )
        return website

    def list_for_user(self, user_id: str) -> list[tuple[Website, int]]:
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT w.*, COUNT(e.id) AS event_count
                FROM websites w
                LEFT JOIN events e ON e.website_id = w.id
                WHERE w.user_id = ?
                GROUP BY w.id
                ORDER BY w.created_at DESC
                """,
                (user_id,),
            ).fetchall()
        return [(self._map_row(r), r["event_count"]) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> Website:
        return Website(
            id=UUID(row["id"]),
            name=row["name"],
            domain=row["domain"],
            user_id=row["user_id"],
            created_at=parse_dt(row["created_at"]),
        )
