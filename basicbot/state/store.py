"""State storage abstractions with SQLite and in-memory implementations."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping, TypeVar

import sqlite3

from .models import RECORD_TYPES, RecordKind

logger = logging.getLogger("basicbot.state")

RecordT = TypeVar("RecordT")


class StateStorage(ABC):
    """Raw persistence of JSON documents keyed by scope, scope key and record kind."""

    @abstractmethod
    def read(self, scope: str, scope_key: str) -> dict[str, dict[str, Any]]:
        """Return every stored document for a scope key, keyed by record kind."""

    @abstractmethod
    def write(self, scope: str, scope_key: str, documents: Mapping[str, dict[str, Any]]) -> None:
        """Persist the given documents, replacing earlier versions."""

    @abstractmethod
    def iter_keys(self, scope: str) -> Iterable[str]:
        """Iterate over known scope keys."""


class SQLiteStateStorage(StateStorage):
    """SQLite-backed document storage, one row per record."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        """Create required tables if they do not exist."""

        with self._connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS records (
                    scope TEXT NOT NULL,
                    scope_key TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    PRIMARY KEY (scope, scope_key, kind)
                );
                """
            )

    def read(self, scope: str, scope_key: str) -> dict[str, dict[str, Any]]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT kind, payload FROM records WHERE scope = ? AND scope_key = ?",
                (scope, scope_key),
            ).fetchall()
        return {row["kind"]: json.loads(row["payload"]) for row in rows}

    def write(self, scope: str, scope_key: str, documents: Mapping[str, dict[str, Any]]) -> None:
        if not documents:
            return
        with self._connection() as conn:
            conn.executemany(
                """
                INSERT INTO records (scope, scope_key, kind, payload) VALUES (?, ?, ?, ?)
                ON CONFLICT(scope, scope_key, kind) DO UPDATE SET payload=excluded.payload
                """,
                [
                    (scope, scope_key, kind, json.dumps(payload, separators=(",", ":")))
                    for kind, payload in documents.items()
                ],
            )

    def iter_keys(self, scope: str) -> Iterable[str]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT DISTINCT scope_key FROM records WHERE scope = ? ORDER BY scope_key",
                (scope,),
            )
            return [row["scope_key"] for row in rows]


class MemoryStateStorage(StateStorage):
    """Dictionary-backed storage for tests and throwaway sessions."""

    def __init__(self) -> None:
        self._documents: dict[tuple[str, str], dict[str, str]] = {}

    def read(self, scope: str, scope_key: str) -> dict[str, dict[str, Any]]:
        stored = self._documents.get((scope, scope_key), {})
        return {kind: json.loads(payload) for kind, payload in stored.items()}

    def write(self, scope: str, scope_key: str, documents: Mapping[str, dict[str, Any]]) -> None:
        stored = self._documents.setdefault((scope, scope_key), {})
        for kind, payload in documents.items():
            stored[kind] = json.dumps(payload)

    def iter_keys(self, scope: str) -> Iterable[str]:
        return sorted(key for stored_scope, key in self._documents if stored_scope == scope)


class StateStore:
    """Scoped record cache over a storage backend.

    Records are loaded on first access and held until ``commit`` writes every
    loaded record for that scope key back to storage in one call.
    """

    def __init__(self, scope: str, storage: StateStorage) -> None:
        self.scope = scope
        self._storage = storage
        self._loaded: dict[str, dict[RecordKind, Any]] = {}

    def _records(self, scope_key: str) -> dict[RecordKind, Any]:
        records = self._loaded.get(scope_key)
        if records is None:
            raw = self._storage.read(self.scope, scope_key)
            records = {}
            for kind_name, payload in raw.items():
                try:
                    kind = RecordKind(kind_name)
                except ValueError:
                    logger.warning("Ignoring unknown record kind %s for %s/%s", kind_name, self.scope, scope_key)
                    continue
                records[kind] = RECORD_TYPES[kind].from_dict(payload)
            self._loaded[scope_key] = records
        return records

    def get(self, scope_key: str, kind: RecordKind) -> Any | None:
        return self._records(scope_key).get(kind)

    def get_or_default(self, scope_key: str, kind: RecordKind, default_factory: Callable[[], RecordT]) -> RecordT:
        records = self._records(scope_key)
        if kind not in records:
            records[kind] = default_factory()
        return records[kind]

    def set(self, scope_key: str, kind: RecordKind, record: Any) -> None:
        self._records(scope_key)[kind] = record

    def commit(self, scope_key: str) -> None:
        records = self._loaded.pop(scope_key, None)
        if records is None:
            return
        self._storage.write(
            self.scope,
            scope_key,
            {kind.value: record.to_dict() for kind, record in records.items()},
        )
        logger.debug("Committed %d record(s) for %s/%s", len(records), self.scope, scope_key)

    def iter_keys(self) -> Iterable[str]:
        return self._storage.iter_keys(self.scope)
