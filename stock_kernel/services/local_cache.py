"""
LocalCache -- durable key-value storage on the local machine.

Responsibility:
    Reads and writes whole JSON documents by key in the ``cache_entries``
    table. This is the only shared mutable resource of the system; it holds
    the drug collection and the remote store configuration.

Architecture position:
    Kernel > Services -- imperative shell. Each call runs in its own
    transactional scope and commits before returning, so a completed
    ``set`` is durable even if a later remote write fails.

Failure modes:
    - SQLAlchemyError propagates on database failure.
    - ``get_json`` raises ``json.JSONDecodeError`` (a ValueError) for an
      entry that is not valid JSON; callers decide whether that is fatal.
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from stock_kernel.db.engine import session_scope
from stock_kernel.logging_config import get_logger
from stock_kernel.models.cache_entry import CacheEntry

logger = get_logger("services.local_cache")


class LocalCache:
    """Key-value access to the local cache database."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        with session_scope(self._session_factory) as session:
            entry = session.get(CacheEntry, key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        with session_scope(self._session_factory) as session:
            entry = session.get(CacheEntry, key)
            if entry is None:
                session.add(CacheEntry(key=key, value=value))
            else:
                entry.value = value
        logger.debug("local_cache_written", extra={"key": key, "size": len(value)})

    def remove(self, key: str) -> bool:
        """Delete ``key``. Returns False when there was nothing to delete."""
        with session_scope(self._session_factory) as session:
            entry = session.get(CacheEntry, key)
            if entry is None:
                return False
            session.delete(entry)
        logger.debug("local_cache_removed", extra={"key": key})
        return True

    def get_json(self, key: str) -> Any | None:
        raw = self.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set_json(self, key: str, document: Any) -> None:
        self.set(key, json.dumps(document, ensure_ascii=False))
