"""
Async database access helpers (raw SQL) over SQLite.

A `Database` is an explicit handle owned by whoever needs it (the relational
catalog). It holds no open connection: every call opens its own connection,
runs inside one transaction, and closes it on every exit path.

sqlite3 is blocking, so each call runs in a worker thread via
`asyncio.to_thread`. Concurrency between writers is left to SQLite's own
locking; `timeout_s` bounds how long a call waits on a locked database.

SQL parameter style:
- sqlite3 uses qmark placeholders: ?, ?, ?
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, TypeVar

from .errors import CorruptStore, StoreUnavailable

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, path: Path | str, *, timeout_s: float = 5.0) -> None:
        self.path = Path(path)
        self.timeout_s = timeout_s

    def __repr__(self) -> str:
        return f"Database(path={str(self.path)!r})"

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """
        Open a connection scoped to one unit of work.

        Commits when the block exits normally, rolls back when it raises,
        and always closes the connection.
        """
        try:
            conn = sqlite3.connect(str(self.path), timeout=self.timeout_s)
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Could not open database at {self.path}: {exc}") from exc

        conn.row_factory = sqlite3.Row
        with closing(conn):
            # `with conn` is the transaction scope, `closing` releases the handle.
            with conn:
                yield conn

    def _run(self, work: Callable[[sqlite3.Connection], T]) -> T:
        try:
            with self.connect() as conn:
                return work(conn)
        except sqlite3.OperationalError as exc:
            logger.error("db_unavailable path=%s error=%s", self.path, exc)
            raise StoreUnavailable(f"Database error: {exc}") from exc
        except sqlite3.DatabaseError as exc:
            # "file is not a database", "database disk image is malformed"
            logger.error("db_corrupt path=%s error=%s", self.path, exc)
            raise CorruptStore(f"Database file is unreadable: {exc}") from exc

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """

        def work(conn: sqlite3.Connection) -> dict[str, Any] | None:
            row = conn.execute(sql, args).fetchone()
            return dict(row) if row is not None else None

        return await asyncio.to_thread(self._run, work)

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """

        def work(conn: sqlite3.Connection) -> list[dict[str, Any]]:
            return [dict(r) for r in conn.execute(sql, args).fetchall()]

        return await asyncio.to_thread(self._run, work)

    async def execute(self, sql: str, *args: Any) -> None:
        """
        Run a statement (UPDATE/DELETE/DDL). No result returned.
        """

        def work(conn: sqlite3.Connection) -> None:
            conn.execute(sql, args)

        await asyncio.to_thread(self._run, work)

    async def insert(self, sql: str, *args: Any) -> int:
        """
        Run an INSERT and return the new row's id.
        """

        def work(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(sql, args)
            if cursor.lastrowid is None:
                raise StoreUnavailable("INSERT did not produce a row id.")
            return int(cursor.lastrowid)

        return await asyncio.to_thread(self._run, work)

    async def executescript(self, script: str) -> None:
        def work(conn: sqlite3.Connection) -> None:
            conn.executescript(script)

        await asyncio.to_thread(self._run, work)
