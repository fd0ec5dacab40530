"""
Prompt storage backend.

Persists prompts and their append-only version ledgers in SQLite:
- prompts (one row per slug, current_version points at the latest version)
- prompt_versions (immutable rows, UNIQUE(prompt_id, version_number))

Every public operation runs inside exactly one transaction. Writers open
theirs with BEGIN IMMEDIATE, which takes SQLite's write lock before
current_version is read, so two writers on the same prompt can never
compute the same next version number.
"""

import logging
import sqlite3
import threading
import time
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from prompt_registry.config import DEFAULT_DATABASE_PATH, normalize_database_path
from prompt_registry.core.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from prompt_registry.core.models import (
    Prompt,
    PromptSummary,
    PromptVersion,
    PromptWithCurrentVersion,
    RegistryStats,
)
from prompt_registry.core.slug import generate_slug, is_blank

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS prompts (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    slug             TEXT UNIQUE NOT NULL,
    title            TEXT NOT NULL,
    description      TEXT,
    current_version  INTEGER NOT NULL DEFAULT 0,
    created_at       DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at       DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS prompt_versions (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    prompt_id      INTEGER NOT NULL,
    version_number INTEGER NOT NULL,
    content        TEXT NOT NULL,
    created_at     DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY(prompt_id) REFERENCES prompts(id),
    UNIQUE(prompt_id, version_number)
);

CREATE INDEX IF NOT EXISTS idx_prompts_created_at ON prompts(created_at);
"""

MEMORY_DATABASE = ":memory:"

# Largest value SQLite can bind as an INTEGER
SQLITE_MAX_INTEGER = 2**63 - 1


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _row_to_prompt(row: sqlite3.Row) -> Prompt:
    return Prompt(
        id=row["id"],
        slug=row["slug"],
        title=row["title"],
        description=row["description"],
        current_version=row["current_version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_version(row: sqlite3.Row) -> PromptVersion:
    return PromptVersion(
        id=row["id"],
        prompt_id=row["prompt_id"],
        version_number=row["version_number"],
        content=row["content"],
        created_at=row["created_at"],
    )


class _ThreadConnection:
    """Holds one thread's connection; the connection closes when the holder is released."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        weakref.finalize(self, conn.close)


class PromptStore:
    """
    Registry store for prompts and their version ledgers.

    File databases get one SQLite connection per thread; an in-memory
    database shares a single connection and serializes every operation
    on the store lock. Writers are always serialized in-process on the
    same lock and across processes by SQLite's write lock.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        busy_timeout: float = 30.0,
    ):
        """
        Open (and if needed create) the registry database.

        Args:
            db_path: SQLite file path, ``sqlite3://`` URL or ``:memory:``
                (default: ./data/prompts.db)
            busy_timeout: Seconds a writer waits for the SQLite write lock

        Raises:
            InternalError: If the database cannot be opened or migrated
        """
        raw_path = str(db_path) if db_path is not None else DEFAULT_DATABASE_PATH
        self._db_path = normalize_database_path(raw_path)
        self._in_memory = self._db_path == MEMORY_DATABASE
        self._busy_timeout = busy_timeout
        self._lock = threading.RLock()
        self._local = threading.local()
        self._connections: weakref.WeakSet[sqlite3.Connection] = weakref.WeakSet()
        self._shared_conn: sqlite3.Connection | None = None
        self._closed = False

        if not self._in_memory:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()
        logger.info(
            f"Database initialized at {self._db_path}",
            extra={"event": "database_initialized", "db_path": self._db_path},
        )

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "PromptStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Connection and transaction plumbing
    # ------------------------------------------------------------------

    def _open_connection(self) -> sqlite3.Connection:
        """
        Open a new autocommit connection and register it for close().

        The registry holds weak references only, so connections owned by
        threads that have exited do not accumulate here.
        """
        conn = sqlite3.connect(
            self._db_path,
            timeout=self._busy_timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        if not self._in_memory:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")
        with self._lock:
            self._connections.add(conn)
        return conn

    def _get_connection(self) -> sqlite3.Connection:
        """Get the connection for the calling thread."""
        if self._closed:
            raise InternalError("Prompt store is closed")

        if self._in_memory:
            if self._shared_conn is None:
                self._shared_conn = self._open_connection()
            return self._shared_conn

        slot: _ThreadConnection | None = getattr(self._local, "slot", None)
        if slot is None:
            # Thread-local storage drops the slot when the thread exits
            slot = _ThreadConnection(self._open_connection())
            self._local.slot = slot
        return slot.conn

    @contextmanager
    def _transaction(self, *, write: bool = False) -> Iterator[sqlite3.Connection]:
        """
        Run the enclosed block in one transaction.

        Commits on normal exit, rolls back on any exception. Write
        transactions start with BEGIN IMMEDIATE and hold the store lock.
        """
        serialize = write or self._in_memory
        if serialize:
            self._lock.acquire()
        try:
            conn = self._get_connection()
            conn.execute("BEGIN IMMEDIATE" if write else "BEGIN")
            try:
                yield conn
                conn.commit()
            except BaseException:
                if conn.in_transaction:
                    try:
                        conn.rollback()
                    except sqlite3.Error:
                        logger.exception("Rollback failed")
                raise
        finally:
            if serialize:
                self._lock.release()

    @contextmanager
    def _store_errors(
        self,
        operation: str,
        *,
        slug: str | None = None,
        version_number: int | None = None,
    ) -> Iterator[None]:
        """Translate sqlite3 failures into InternalError."""
        try:
            yield
        except sqlite3.Error as e:
            logger.error(
                f"Database error during {operation}: {e}",
                extra={"event": "database_error", "operation": operation, "slug": slug},
            )
            raise InternalError(
                f"Database error during {operation}: {e}",
                slug=slug,
                version_number=version_number,
                operation=operation,
            ) from e

    def _init_schema(self) -> None:
        """Create the tables if they don't exist."""
        try:
            with self._lock:
                conn = self._get_connection()
                conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize schema: {e}")
            self.close()
            raise InternalError(
                f"Failed to initialize schema: {e}", operation="init_schema"
            ) from e

    def _log_operation(self, operation: str, start: float, **fields: object) -> None:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Database operation {operation} completed",
            extra={
                "event": "database_operation",
                "operation": operation,
                "duration_ms": round(duration_ms, 2),
                **fields,
            },
        )

    # ------------------------------------------------------------------
    # Row access helpers (must run inside a transaction)
    # ------------------------------------------------------------------

    def _fetch_prompt(self, conn: sqlite3.Connection, slug: str) -> Prompt | None:
        row = conn.execute(
            """
            SELECT id, slug, title, description, current_version, created_at, updated_at
            FROM prompts WHERE slug = ?
            """,
            (slug,),
        ).fetchone()
        return _row_to_prompt(row) if row else None

    def _fetch_version(
        self, conn: sqlite3.Connection, prompt_id: int, version_number: int
    ) -> PromptVersion | None:
        row = conn.execute(
            """
            SELECT id, prompt_id, version_number, content, created_at
            FROM prompt_versions WHERE prompt_id = ? AND version_number = ?
            """,
            (prompt_id, version_number),
        ).fetchone()
        return _row_to_version(row) if row else None

    def _append_version(
        self,
        conn: sqlite3.Connection,
        prompt: Prompt,
        content: str,
        now: str,
    ) -> tuple[Prompt, PromptVersion]:
        """
        Append the next ledger entry and advance current_version.

        The UPDATE is guarded on the current_version that was read, so a
        pointer can only move from N to N+1 alongside the row for N+1.
        """
        next_number = prompt.current_version + 1
        cursor = conn.execute(
            """
            INSERT INTO prompt_versions (prompt_id, version_number, content, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (prompt.id, next_number, content, now),
        )
        version = PromptVersion(
            id=cursor.lastrowid,
            prompt_id=prompt.id,
            version_number=next_number,
            content=content,
            created_at=now,
        )

        cursor = conn.execute(
            """
            UPDATE prompts SET current_version = ?, updated_at = ?
            WHERE id = ? AND current_version = ?
            """,
            (next_number, now, prompt.id, prompt.current_version),
        )
        if cursor.rowcount != 1:
            raise InternalError(
                f"current_version of prompt '{prompt.slug}' moved during version creation",
                slug=prompt.slug,
                version_number=next_number,
            )

        updated = prompt.model_copy(update={"current_version": next_number, "updated_at": now})
        return updated, version

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def create_prompt(
        self,
        title: str,
        content: str,
        *,
        slug: str | None = None,
        description: str | None = None,
    ) -> PromptWithCurrentVersion:
        """
        Create a prompt together with its first version.

        Args:
            title: Prompt title (required, non-blank)
            content: Content of version 1 (required, non-blank)
            slug: Explicit slug, used verbatim; derived from title if omitted
            description: Optional description

        Returns:
            The new prompt merged with version 1

        Raises:
            ValidationError: If title or content is blank
            ConflictError: If the slug is already taken
            InternalError: On backing-store failure
        """
        operation = "create_prompt"
        start = time.perf_counter()

        if is_blank(title):
            raise ValidationError("title cannot be empty", field="title", operation=operation)
        if is_blank(content):
            raise ValidationError("content cannot be empty", field="content", operation=operation)

        if not slug:
            slug = generate_slug(title)
            if not slug:
                raise ValidationError(
                    f"cannot derive a slug from title {title!r}; supply one explicitly",
                    field="slug",
                    operation=operation,
                )

        now = _utcnow()
        with self._store_errors(operation, slug=slug), self._transaction(write=True) as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO prompts
                        (slug, title, description, current_version, created_at, updated_at)
                    VALUES (?, ?, ?, 0, ?, ?)
                    """,
                    (slug, title, description, now, now),
                )
            except sqlite3.IntegrityError as e:
                if "UNIQUE" not in str(e):
                    raise
                logger.warning(
                    f"Slug '{slug}' already exists",
                    extra={"event": "slug_conflict", "slug": slug},
                )
                raise ConflictError(f"prompt with slug '{slug}' already exists", slug=slug) from e

            prompt = Prompt(
                id=cursor.lastrowid,
                slug=slug,
                title=title,
                description=description,
                current_version=0,
                created_at=now,
                updated_at=now,
            )
            prompt, version = self._append_version(conn, prompt, content, now)

        self._log_operation(operation, start, slug=slug, prompt_id=prompt.id)
        return PromptWithCurrentVersion.from_parts(prompt, version)

    def create_version(self, slug: str, content: str) -> PromptWithCurrentVersion:
        """
        Append a new version to an existing prompt.

        Raises:
            ValidationError: If content is blank
            NotFoundError: If the slug is unknown
            InternalError: On backing-store failure
        """
        operation = "create_version"
        start = time.perf_counter()

        if is_blank(content):
            raise ValidationError("content cannot be empty", field="content", operation=operation)

        with self._store_errors(operation, slug=slug), self._transaction(write=True) as conn:
            prompt = self._fetch_prompt(conn, slug)
            if prompt is None:
                raise NotFoundError(
                    f"prompt with slug '{slug}' not found", slug=slug, operation=operation
                )
            prompt, version = self._append_version(conn, prompt, content, _utcnow())

        self._log_operation(operation, start, slug=slug, version_number=version.version_number)
        return PromptWithCurrentVersion.from_parts(prompt, version)

    def get_prompt(self, slug: str) -> PromptWithCurrentVersion:
        """
        Fetch a prompt merged with its current version.

        Raises:
            NotFoundError: If the slug is unknown
            InternalError: If current_version points at a missing ledger entry
        """
        operation = "get_prompt"
        start = time.perf_counter()

        with self._store_errors(operation, slug=slug), self._transaction() as conn:
            prompt = self._fetch_prompt(conn, slug)
            if prompt is None:
                raise NotFoundError(
                    f"prompt with slug '{slug}' not found", slug=slug, operation=operation
                )
            version = self._fetch_version(conn, prompt.id, prompt.current_version)
            if version is None:
                logger.error(
                    f"Prompt '{slug}' points at missing version {prompt.current_version}",
                    extra={"event": "ledger_inconsistent", "slug": slug},
                )
                raise InternalError(
                    f"prompt '{slug}' points at missing version {prompt.current_version}",
                    slug=slug,
                    version_number=prompt.current_version,
                    operation=operation,
                )

        self._log_operation(operation, start, slug=slug)
        return PromptWithCurrentVersion.from_parts(prompt, version)

    def get_version(self, slug: str, version_number: int) -> PromptVersion:
        """
        Fetch one version of a prompt by exact version number.

        Raises:
            NotFoundError: If the prompt or that version does not exist
        """
        operation = "get_version"
        start = time.perf_counter()

        if not 1 <= version_number <= SQLITE_MAX_INTEGER:
            raise NotFoundError(
                f"version {version_number} not found for prompt '{slug}'",
                slug=slug,
                version_number=version_number,
                operation=operation,
            )

        with self._store_errors(
            operation, slug=slug, version_number=version_number
        ), self._transaction() as conn:
            row = conn.execute(
                """
                SELECT pv.id, pv.prompt_id, pv.version_number, pv.content, pv.created_at
                FROM prompt_versions pv
                JOIN prompts p ON p.id = pv.prompt_id
                WHERE p.slug = ? AND pv.version_number = ?
                """,
                (slug, version_number),
            ).fetchone()

        if row is None:
            raise NotFoundError(
                f"version {version_number} not found for prompt '{slug}'",
                slug=slug,
                version_number=version_number,
                operation=operation,
            )

        self._log_operation(operation, start, slug=slug, version_number=version_number)
        return _row_to_version(row)

    def list_prompts(self, limit: int = 100, offset: int = 0) -> list[PromptSummary]:
        """
        List prompts, most recently created first.

        Args:
            limit: Maximum number of prompts to return
            offset: Number of prompts to skip

        Returns:
            Possibly empty list of summaries

        Raises:
            ValidationError: If limit or offset is negative or too large
        """
        operation = "list_prompts"
        start = time.perf_counter()

        if limit < 0:
            raise ValidationError("limit must not be negative", field="limit", operation=operation)
        if offset < 0:
            raise ValidationError("offset must not be negative", field="offset", operation=operation)
        if limit > SQLITE_MAX_INTEGER:
            raise ValidationError("limit is too large", field="limit", operation=operation)
        if offset > SQLITE_MAX_INTEGER:
            raise ValidationError("offset is too large", field="offset", operation=operation)

        with self._store_errors(operation), self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT slug, title, description, current_version, created_at, updated_at
                FROM prompts
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            ).fetchall()

        results = [
            PromptSummary(
                slug=row["slug"],
                title=row["title"],
                description=row["description"],
                current_version=row["current_version"],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            for row in rows
        ]

        self._log_operation(
            operation, start, limit=limit, offset=offset, rows_returned=len(results)
        )
        return results

    def list_versions(self, slug: str) -> list[PromptVersion]:
        """
        List every version of a prompt in ascending version order.

        Raises:
            NotFoundError: If the slug is unknown
        """
        operation = "list_versions"
        start = time.perf_counter()

        with self._store_errors(operation, slug=slug), self._transaction() as conn:
            prompt = self._fetch_prompt(conn, slug)
            if prompt is None:
                raise NotFoundError(
                    f"prompt with slug '{slug}' not found", slug=slug, operation=operation
                )
            rows = conn.execute(
                """
                SELECT id, prompt_id, version_number, content, created_at
                FROM prompt_versions
                WHERE prompt_id = ?
                ORDER BY version_number ASC
                """,
                (prompt.id,),
            ).fetchall()

        versions = [_row_to_version(row) for row in rows]
        self._log_operation(operation, start, slug=slug, rows_returned=len(versions))
        return versions

    def get_stats(self) -> RegistryStats:
        """Count prompts and versions from one consistent snapshot."""
        operation = "get_stats"
        start = time.perf_counter()

        with self._store_errors(operation), self._transaction() as conn:
            total_prompts = conn.execute("SELECT COUNT(*) FROM prompts").fetchone()[0]
            total_versions = conn.execute("SELECT COUNT(*) FROM prompt_versions").fetchone()[0]

        stats = RegistryStats(total_prompts=total_prompts, total_prompt_versions=total_versions)
        self._log_operation(
            operation,
            start,
            total_prompts=total_prompts,
            total_prompt_versions=total_versions,
        )
        return stats

    def verify_ledger(self, slug: str) -> bool:
        """
        Verify a prompt's ledger is exactly 1..current_version.

        Raises:
            NotFoundError: If the slug is unknown
            InternalError: If the ledger has gaps, duplicates or a dangling pointer
        """
        operation = "verify_ledger"

        with self._store_errors(operation, slug=slug), self._transaction() as conn:
            prompt = self._fetch_prompt(conn, slug)
            if prompt is None:
                raise NotFoundError(
                    f"prompt with slug '{slug}' not found", slug=slug, operation=operation
                )
            numbers = [
                row[0]
                for row in conn.execute(
                    "SELECT version_number FROM prompt_versions "
                    "WHERE prompt_id = ? ORDER BY version_number ASC",
                    (prompt.id,),
                )
            ]

        expected = list(range(1, prompt.current_version + 1))
        if numbers != expected:
            raise InternalError(
                f"ledger of prompt '{slug}' is inconsistent",
                slug=slug,
                operation=operation,
                details={"current_version": prompt.current_version, "versions": numbers},
            )
        return True

    def close(self) -> None:
        """
        Close every connection opened by this store.

        Idempotent. Any further operation fails with InternalError.

        Raises:
            InternalError: If a connection fails to close
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            connections = list(self._connections)
            self._connections = weakref.WeakSet()
            self._shared_conn = None

        failures: list[str] = []
        for conn in connections:
            try:
                conn.close()
            except sqlite3.Error as e:
                failures.append(str(e))

        if failures:
            logger.error(f"Failed to close database: {failures}")
            raise InternalError(
                "Failed to close database",
                operation="close",
                details={"errors": failures},
            )
        logger.info("Database closed", extra={"event": "database_closed"})
