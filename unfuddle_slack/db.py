"""Database operations for the persisted sync cursor."""

import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional, Type

logger = logging.getLogger(__name__)

CURSOR_TABLE = "last_sync_time"


class StorageError(Exception):
    """Raised when the cursor cannot be read or written."""


class ConnectionParams(ABC):
    """How to open a DB-API connection for the cursor table."""

    placeholder: str = "?"
    timestamp_type: str = "TEXT"

    @abstractmethod
    def connect(self) -> Any:
        """Open a new DB-API 2.0 connection."""

    @property
    @abstractmethod
    def driver_error(self) -> Type[Exception]:
        """Base exception class raised by the driver."""

    def to_db(self, instant: datetime) -> Any:
        """Convert an aware datetime into the value bound for the time column."""
        return instant


@dataclass
class SQLiteParams(ConnectionParams):
    """SQLite database file."""
    path: str

    def connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path)

    @property
    def driver_error(self) -> Type[Exception]:
        return sqlite3.Error

    def to_db(self, instant: datetime) -> str:
        return instant.astimezone(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"sqlite:{self.path}"


@dataclass
class PostgresParams(ConnectionParams):
    """PostgreSQL server given by discrete connection settings."""
    host: str
    port: int
    dbname: str
    user: str
    password: str
    sslmode: str = "require"

    placeholder = "%s"
    timestamp_type = "TIMESTAMP WITH TIME ZONE"

    def connect(self) -> Any:
        import psycopg2
        return psycopg2.connect(
            host=self.host,
            port=self.port,
            dbname=self.dbname,
            user=self.user,
            password=self.password,
            sslmode=self.sslmode,
        )

    @property
    def driver_error(self) -> Type[Exception]:
        import psycopg2
        return psycopg2.Error

    def __str__(self) -> str:
        return f"postgresql://{self.user}@{self.host}:{self.port}/{self.dbname}"


@dataclass
class PostgresUrlParams(ConnectionParams):
    """PostgreSQL server given by a single connection URL."""
    url: str

    placeholder = "%s"
    timestamp_type = "TIMESTAMP WITH TIME ZONE"

    def connect(self) -> Any:
        import psycopg2
        return psycopg2.connect(self.url)

    @property
    def driver_error(self) -> Type[Exception]:
        import psycopg2
        return psycopg2.Error

    def __str__(self) -> str:
        # Hide credentials embedded in the URL
        return self.url.split("@")[-1]


@contextmanager
def open_connection(params: ConnectionParams) -> Iterator[Any]:
    """
    Open a connection for the duration of one sync cycle.

    The connection is closed on every exit path.

    Raises:
        StorageError: If the connection cannot be established.
    """
    try:
        conn = params.connect()
    except params.driver_error as e:
        raise StorageError(f"Could not connect to database {params}: {e}") from e
    logger.info("Connection to database established.")
    try:
        yield conn
    finally:
        conn.close()
        logger.info("Connection to database closed.")


def _parse_time(value: Any) -> datetime:
    """Parse a stored time value into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CursorStore:
    """Single-row table holding the last synchronized instant."""

    def __init__(
        self,
        conn: Any,
        params: ConnectionParams,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            conn: Open DB-API connection, owned by the caller.
            params: Parameters the connection was opened with.
            clock: Returns the current aware datetime; used to seed the cursor.
        """
        self.conn = conn
        self.params = params
        self.clock = clock or _utcnow

    def ensure_schema(self) -> None:
        """Create the cursor table if it does not exist."""
        self._execute(
            f"CREATE TABLE IF NOT EXISTS {CURSOR_TABLE} "
            f"( time {self.params.timestamp_type} NOT NULL )"
        )
        self._commit()

    def load(self) -> datetime:
        """
        Return the persisted cursor, seeding it with the current time when the
        table does not hold exactly one row.
        """
        rows = self._execute(f"SELECT time FROM {CURSOR_TABLE}").fetchall()
        row_count = len(rows)

        if row_count == 1:
            try:
                last_sync_time = _parse_time(rows[0][0])
            except (TypeError, ValueError) as e:
                raise StorageError(f"Unreadable sync time {rows[0][0]!r}: {e}") from e
            logger.info(f"Sync time retrieved from database: {last_sync_time.isoformat()}")
            return last_sync_time

        last_sync_time = self.clock().astimezone(timezone.utc)
        if row_count > 1:
            self._execute(f"DELETE FROM {CURSOR_TABLE}")
        self._execute(
            f"INSERT INTO {CURSOR_TABLE} (time) VALUES ({self.params.placeholder})",
            (self.params.to_db(last_sync_time),),
        )
        self._commit()
        logger.warning(
            f"Expected 1 record in {CURSOR_TABLE} table, got {row_count}. "
            f"Overriding with the current time, {last_sync_time.isoformat()}."
        )
        return last_sync_time

    def save(self, instant: datetime) -> None:
        """
        Overwrite the persisted cursor.

        Raises:
            StorageError: If the write fails or does not apply to a row.
        """
        cursor = self._execute(
            f"UPDATE {CURSOR_TABLE} SET time = {self.params.placeholder}",
            (self.params.to_db(instant),),
        )
        if cursor.rowcount == 0:
            raise StorageError(f"No {CURSOR_TABLE} row to update")
        self._commit()
        logger.info(f"Last sync time in database successfully updated to: {instant.isoformat()}")

    def _execute(self, sql: str, params: tuple = ()) -> Any:
        try:
            cursor = self.conn.cursor()
            cursor.execute(sql, params)
            return cursor
        except self.params.driver_error as e:
            raise StorageError(f"Database error: {e}") from e

    def _commit(self) -> None:
        try:
            self.conn.commit()
        except self.params.driver_error as e:
            raise StorageError(f"Database commit failed: {e}") from e
