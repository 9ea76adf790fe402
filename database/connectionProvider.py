"""
Lazily-opened, process-wide PostgreSQL connection.

``ConnectionProvider`` owns a single psycopg2 connection built from
``ConnectionSettings``. It can be constructed and passed around explicitly;
``get_instance`` / ``get_connection`` wrap one shared provider for code that
just wants "the" database handle.

Connections are opened with ``RealDictCursor`` as their cursor factory, so
every row comes back keyed by column name. Driver errors always raise.
"""

from contextlib import contextmanager
from dataclasses import dataclass
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Iterator, Mapping, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from database.connectionSettings import ConnectionSettings
from database.envLoader import PathLike, build_environment

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"

ConnectFn = Callable[..., Any]


class DatabaseConnectionError(RuntimeError):
    """Raised when the database connection cannot be opened."""


@dataclass(frozen=True)
class ConnectionResult:
    """Outcome of a connection attempt: either a live handle or the error."""

    connection: Optional[Any] = None
    error: Optional[DatabaseConnectionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.connection is not None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.connection


class ConnectionProvider:
    """Open one connection on first use and hand the same handle to every caller."""

    def __init__(self, settings: ConnectionSettings, *, connect: Optional[ConnectFn] = None):
        self.settings = settings
        self._connect = connect
        self._connection: Optional[Any] = None
        self._lock = Lock()

    @classmethod
    def from_env_file(
        cls,
        env_file: Optional[PathLike] = None,
        base: Optional[Mapping[str, str]] = None,
        *,
        connect: Optional[ConnectFn] = None,
    ) -> "ConnectionProvider":
        """Build a provider from ``env_file`` (default: the project ``.env``) and ``base``."""
        env = build_environment(env_file or DEFAULT_ENV_FILE, base)
        return cls(ConnectionSettings.from_environment(env), connect=connect)

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    def _open(self) -> Any:
        # psycopg2 binds parameters client-side; callers pass them separately from the SQL
        connect = self._connect or psycopg2.connect
        return connect(cursor_factory=RealDictCursor, **self.settings.connect_kwargs())

    def try_connect(self) -> ConnectionResult:
        """Open the connection if needed; never raises for driver failures.

        A failed attempt leaves nothing cached, so calling again retries.
        """
        connection = self._connection
        if connection is not None:
            return ConnectionResult(connection=connection)

        with self._lock:
            if self._connection is None:
                try:
                    self._connection = self._open()
                except psycopg2.Error as exc:
                    logger.exception("Failed to connect to %s", self.settings.describe())
                    error = DatabaseConnectionError(f"Database connection failed: {exc}")
                    error.__cause__ = exc
                    return ConnectionResult(error=error)
                logger.info("Connected to %s", self.settings.describe())
            return ConnectionResult(connection=self._connection)

    def get_connection(self) -> Any:
        """Return the shared connection, opening it on first call."""
        return self.try_connect().unwrap()

    @staticmethod
    def _rollback_safely(db) -> None:
        try:
            db.rollback()
        except psycopg2.Error:
            logger.exception("Failed to rollback transaction")

    @contextmanager
    def cursor(self) -> Iterator[Any]:
        """Yield a dict-row cursor; commit on success, roll back on error."""
        db = self.get_connection()
        with db.cursor() as cur:
            try:
                yield cur
            except Exception:
                self._rollback_safely(db)
                raise
            db.commit()

    def close(self) -> None:
        """Close the held connection; the next ``get_connection`` reconnects."""
        with self._lock:
            if self._connection is None:
                return
            try:
                self._connection.close()
            finally:
                self._connection = None
            logger.info("Closed connection to %s", self.settings.describe())


_instance: Optional[ConnectionProvider] = None
_instance_lock = Lock()


def get_instance() -> ConnectionProvider:
    """Return the process-wide provider, connecting on the first call.

    Raises ``DatabaseConnectionError`` if the first connection fails; in that
    case no provider is kept and the next call starts over.
    """
    global _instance
    provider = _instance
    if provider is not None:
        return provider

    with _instance_lock:
        if _instance is None:
            provider = ConnectionProvider.from_env_file(DEFAULT_ENV_FILE)
            provider.get_connection()
            _instance = provider
        return _instance


def get_connection() -> Any:
    """Shortcut for ``get_instance().get_connection()``."""
    return get_instance().get_connection()


def reset_instance() -> None:
    """Close and forget the process-wide provider."""
    global _instance
    with _instance_lock:
        provider, _instance = _instance, None
    if provider is not None:
        provider.close()
