"""Session / result / context / feedback storage behind small interfaces.

Rules
-----
- Values are JSON-compatible dicts/lists; stores hand back copies, so a
  caller mutating a returned value never changes what is stored.
- Expiry is lazy (checked on read) plus an optional periodic sweep.
- The in-memory backend is the default and what tests use; the SQL
  backend persists the same data through SQLAlchemy.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import sessionmaker

from ..config import Settings
from ..models.feedback import FeedbackEntry
from ..models.kv_entry import KVEntry

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

FEEDBACK_MEMORY_LIMIT = 1000


# ---------------------------------------------------------------------------
# Key-value stores
# ---------------------------------------------------------------------------
class KeyValueStore(ABC):
    """set/get/delete with optional per-entry TTL."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None: ...

    @abstractmethod
    def get(self, key: str) -> Optional[Any]: ...

    @abstractmethod
    def delete(self, key: str) -> bool: ...

    @abstractmethod
    def count(self) -> int: ...

    @abstractmethod
    def purge_expired(self) -> int:
        """Drop expired entries; return how many were removed."""


class InMemoryStore(KeyValueStore):
    def __init__(self, clock: Clock = time.time):
        self._clock = clock
        self._data: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds is not None else None
        with self._lock:
            self._data[key] = (copy.deepcopy(value), expires_at)

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and expires_at <= self._clock():
                del self._data[key]
                return None
            return copy.deepcopy(value)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def count(self) -> int:
        with self._lock:
            return len(self._data)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, (_, exp) in self._data.items() if exp is not None and exp <= now]
            for key in expired:
                del self._data[key]
        return len(expired)


class SqlKeyValueStore(KeyValueStore):
    """One namespace inside the shared `kv_entries` table."""

    def __init__(self, session_factory: sessionmaker, namespace: str, clock: Clock = time.time):
        self._session_factory = session_factory
        self.namespace = namespace
        self._clock = clock

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds is not None else None
        payload = json.dumps(value, default=str)
        with self._session_factory() as db:
            entry = db.get(KVEntry, (self.namespace, key))
            if entry is None:
                db.add(KVEntry(namespace=self.namespace, key=key, value=payload, expires_at=expires_at))
            else:
                entry.value = payload
                entry.expires_at = expires_at
            db.commit()

    def get(self, key: str) -> Optional[Any]:
        with self._session_factory() as db:
            entry = db.get(KVEntry, (self.namespace, key))
            if entry is None:
                return None
            if entry.expires_at is not None and entry.expires_at <= self._clock():
                db.delete(entry)
                db.commit()
                return None
            return json.loads(entry.value)

    def delete(self, key: str) -> bool:
        with self._session_factory() as db:
            entry = db.get(KVEntry, (self.namespace, key))
            if entry is None:
                return False
            db.delete(entry)
            db.commit()
            return True

    def count(self) -> int:
        with self._session_factory() as db:
            return db.query(func.count(KVEntry.key)).filter(KVEntry.namespace == self.namespace).scalar() or 0

    def purge_expired(self) -> int:
        with self._session_factory() as db:
            removed = (
                db.query(KVEntry)
                .filter(
                    KVEntry.namespace == self.namespace,
                    KVEntry.expires_at.isnot(None),
                    KVEntry.expires_at <= self._clock(),
                )
                .delete(synchronize_session=False)
            )
            db.commit()
            return removed


# ---------------------------------------------------------------------------
# Feedback log (append-only)
# ---------------------------------------------------------------------------
def _feedback_summary(total: int, positive: int, negative: int) -> Dict[str, Any]:
    return {
        "total": total,
        "positive": positive,
        "negative": negative,
        "positiveRate": round(positive / total * 100, 1) if total else 0.0,
    }


class FeedbackLog(ABC):
    @abstractmethod
    def append(self, record: Dict[str, Any]) -> Dict[str, Any]: ...

    @abstractmethod
    def summary(self) -> Dict[str, Any]: ...

    @abstractmethod
    def recent(self, limit: int = 10) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def count(self) -> int: ...


class InMemoryFeedbackLog(FeedbackLog):
    """Keeps only the most recent FEEDBACK_MEMORY_LIMIT records."""

    def __init__(self, limit: int = FEEDBACK_MEMORY_LIMIT):
        self._records: Deque[Dict[str, Any]] = deque(maxlen=limit)
        self._lock = threading.Lock()

    def append(self, record: Dict[str, Any]) -> Dict[str, Any]:
        entry = {**record, "receivedAt": datetime.now(timezone.utc).isoformat()}
        with self._lock:
            self._records.append(entry)
        return copy.deepcopy(entry)

    def summary(self) -> Dict[str, Any]:
        with self._lock:
            ratings = [r.get("rating") for r in self._records]
        return _feedback_summary(len(ratings), ratings.count("up"), ratings.count("down"))

    def recent(self, limit: int = 10) -> List[Dict[str, Any]]:
        with self._lock:
            records = list(self._records)
        return copy.deepcopy(records[-limit:]) if limit > 0 else []

    def count(self) -> int:
        with self._lock:
            return len(self._records)


class SqlFeedbackLog(FeedbackLog):
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @staticmethod
    def _to_dict(entry: FeedbackEntry) -> Dict[str, Any]:
        return {
            "sessionId": entry.session_id,
            "rating": entry.rating,
            "notes": entry.notes,
            "resultId": entry.result_id,
            "ideaIndex": entry.idea_index,
            "receivedAt": entry.received_at.replace(tzinfo=timezone.utc).isoformat(),
        }

    def append(self, record: Dict[str, Any]) -> Dict[str, Any]:
        entry = FeedbackEntry(
            session_id=record["sessionId"],
            rating=record["rating"],
            notes=record.get("notes") or "",
            result_id=record.get("resultId"),
            idea_index=record.get("ideaIndex"),
        )
        with self._session_factory() as db:
            db.add(entry)
            db.commit()
            db.refresh(entry)
            return self._to_dict(entry)

    def summary(self) -> Dict[str, Any]:
        with self._session_factory() as db:
            rows = dict(db.query(FeedbackEntry.rating, func.count(FeedbackEntry.id)).group_by(FeedbackEntry.rating).all())
        positive = rows.get("up", 0)
        negative = rows.get("down", 0)
        return _feedback_summary(positive + negative, positive, negative)

    def recent(self, limit: int = 10) -> List[Dict[str, Any]]:
        if limit <= 0:
            return []
        with self._session_factory() as db:
            entries = db.query(FeedbackEntry).order_by(FeedbackEntry.id.desc()).limit(limit).all()
            return [self._to_dict(e) for e in reversed(entries)]

    def count(self) -> int:
        with self._session_factory() as db:
            return db.query(func.count(FeedbackEntry.id)).scalar() or 0


# ---------------------------------------------------------------------------
# Bundle
# ---------------------------------------------------------------------------
@dataclass
class Stores:
    sessions: KeyValueStore
    results: KeyValueStore
    contexts: KeyValueStore
    history: KeyValueStore
    feedback: FeedbackLog
    ttl_seconds: int = 3600
    mode: str = "memory"

    def purge_expired(self) -> int:
        removed = sum(
            store.purge_expired() for store in (self.sessions, self.results, self.contexts, self.history)
        )
        if removed:
            logger.info("[STORAGE] Purged %d expired entries", removed)
        return removed

    def stats(self) -> Dict[str, Any]:
        return {
            "sessions": self.sessions.count(),
            "contexts": self.contexts.count(),
            "results": self.results.count(),
            "feedback": self.feedback.count(),
            "mode": self.mode,
        }


def build_memory_stores(ttl_seconds: int = 3600, clock: Clock = time.time) -> Stores:
    return Stores(
        sessions=InMemoryStore(clock),
        results=InMemoryStore(clock),
        contexts=InMemoryStore(clock),
        history=InMemoryStore(clock),
        feedback=InMemoryFeedbackLog(),
        ttl_seconds=ttl_seconds,
        mode="memory",
    )


def build_sql_stores(session_factory: sessionmaker, ttl_seconds: int = 3600, clock: Clock = time.time) -> Stores:
    return Stores(
        sessions=SqlKeyValueStore(session_factory, "sessions", clock),
        results=SqlKeyValueStore(session_factory, "results", clock),
        contexts=SqlKeyValueStore(session_factory, "contexts", clock),
        history=SqlKeyValueStore(session_factory, "history", clock),
        feedback=SqlFeedbackLog(session_factory),
        ttl_seconds=ttl_seconds,
        mode="sql",
    )


def build_stores(settings: Settings) -> Stores:
    if settings.storage_backend == "sql":
        from ..database import init_db, make_engine, make_session_factory

        engine = make_engine(settings.database_url)
        init_db(engine)
        logger.info("[STORAGE] Using SQL storage at %s", engine.url.render_as_string(hide_password=True))
        return build_sql_stores(make_session_factory(engine), settings.cache_ttl_seconds)

    if settings.storage_backend != "memory":
        logger.warning("[STORAGE] Unknown STORAGE_BACKEND=%r, using in-memory storage", settings.storage_backend)
    logger.info("[STORAGE] Using in-memory storage")
    return build_memory_stores(settings.cache_ttl_seconds)
