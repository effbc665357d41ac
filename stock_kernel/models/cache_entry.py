"""
Module: stock_kernel.models.cache_entry
Responsibility: ORM persistence for the local key-value cache.  Each row holds
    one whole JSON document: the serialized drug collection, or the remote
    store configuration.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One row per key (primary key).  Writes replace the whole value; there is
      no partial update of a document.
"""

from datetime import datetime, timezone

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheEntry(Base):
    """A single key-value entry in the local cache."""

    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<CacheEntry {self.key} ({len(self.value)} chars)>"
