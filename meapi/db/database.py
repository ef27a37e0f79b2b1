"""Core storage engine — SQLite snapshots with whole-file commits.

Every session works on a private in-memory copy of the database file.  A
committed transaction writes the entire store back to disk, so commits are
serialised behind a process-wide lock per database file.  The cost of a
commit grows with the size of the store; that is fine for a single profile
aggregate and would not be for many.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any, Callable, Generator, Iterable, Optional, TypeVar

from meapi.db.schema import SCHEMA_DDL
from meapi.errors import StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_locks: dict[Path, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = path.resolve()
    with _locks_guard:
        if key not in _locks:
            _locks[key] = threading.RLock()
        return _locks[key]


class Session:
    """A handle over one in-memory copy of the store."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    @property
    def in_transaction(self) -> bool:
        return self._conn.in_transaction

    # -- query primitives ------------------------------------------------------

    def execute(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Cursor:
        return self._conn.execute(sql, tuple(params))

    def executemany(self, sql: str, rows: Iterable[Iterable[Any]]) -> sqlite3.Cursor:
        return self._conn.executemany(sql, [tuple(r) for r in rows])

    def executescript(self, script: str) -> None:
        self._conn.executescript(script)

    def insert(self, sql: str, params: Iterable[Any] = ()) -> int:
        """Run an INSERT and return the surrogate key it assigned."""
        return self.execute(sql, params).lastrowid

    def fetchone(self, sql: str, params: Iterable[Any] = ()) -> Optional[dict[str, Any]]:
        row = self.execute(sql, params).fetchone()
        return dict(row) if row else None

    def fetchall(self, sql: str, params: Iterable[Any] = ()) -> list[dict[str, Any]]:
        return [dict(r) for r in self.execute(sql, params).fetchall()]

    # -- transaction control ---------------------------------------------------

    def begin(self) -> None:
        self._conn.execute("BEGIN")

    def commit(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("COMMIT")

    def rollback(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    def close(self) -> None:
        self._conn.close()


class Database:
    """
    File-backed SQLite store with explicit transaction scoping.

    ``open()`` loads the file into a fresh in-memory session.
    ``transaction()`` commits and rewrites the file on success, rolls back
    and leaves the file untouched on failure.
    """

    def __init__(self, path: Optional[Path | str] = None):
        from meapi.config import get_db_path
        if path is None:
            self.path: Path = get_db_path()
        elif isinstance(path, str):
            self.path = Path(path)
        else:
            self.path = path
        self._lock = _lock_for(self.path)

    # -- session lifecycle -----------------------------------------------------

    def _ensure_dir(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def open(self) -> Session:
        """Return an independent session over the current on-disk state."""
        conn = sqlite3.connect(":memory:", isolation_level=None, check_same_thread=False)
        try:
            if self.path.exists():
                with closing(sqlite3.connect(str(self.path))) as disk:
                    disk.backup(conn)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except Exception:
            conn.close()
            raise
        return Session(conn)

    def _persist(self, session: Session) -> None:
        """Write the whole session store to disk, replacing the file atomically."""
        self._ensure_dir()
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            with closing(sqlite3.connect(str(tmp))) as disk:
                session.connection.backup(disk)
            os.replace(tmp, self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise

    def init(self) -> None:
        """Create all tables (idempotent)."""
        with self.transaction() as session:
            session.executescript(SCHEMA_DDL)
        logger.info(f"Database ready at {self.path}")

    # -- transaction helpers ---------------------------------------------------

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """Exclusive write transaction: commit-and-persist on success, rollback on exception."""
        with self._lock:
            session = self._open_checked()
            try:
                session.begin()
                yield session
                session.commit()
                self._persist(session)
            except (sqlite3.Error, OSError) as exc:
                session.rollback()
                logger.exception(f"Transaction on {self.path} rolled back")
                raise StorageError() from exc
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def run_in_transaction(self, work: Callable[[Session], T]) -> T:
        with self.transaction() as session:
            return work(session)

    @contextmanager
    def snapshot(self) -> Generator[Session, None, None]:
        """Read-only session; never observes a half-committed write."""
        with self._lock:
            session = self._open_checked()
            try:
                yield session
            except sqlite3.Error as exc:
                logger.exception(f"Read on {self.path} failed")
                raise StorageError() from exc
            finally:
                session.close()

    def _open_checked(self) -> Session:
        try:
            return self.open()
        except (sqlite3.Error, OSError) as exc:
            logger.exception(f"Could not load database {self.path}")
            raise StorageError() from exc

    # -- low-level query helpers -----------------------------------------------

    def fetchone(self, sql: str, params: tuple = ()) -> Optional[dict[str, Any]]:
        with self.snapshot() as session:
            return session.fetchone(sql, params)

    def fetchall(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        with self.snapshot() as session:
            return session.fetchall(sql, params)
