"""
Entities -- Drug and its append-only TransactionLog.

Responsibility:
    Defines the two ledger entities and their JSON wire representation
    (camelCase keys, optional log fields omitted when unset).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    APPEND_ONLY_LOG -- ``Drug.logs`` is a tuple; a drug can only gain log
                       entries through ``with_log`` (which returns a new Drug).

Failure modes:
    - ValueError / KeyError / TypeError from ``from_dict`` on malformed input,
      including non-object drugs or log entries and a non-list ``logs``.
      Persistence and import boundaries translate these into typed errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from stock_kernel.domain.values import (
    Presentation,
    StockLevels,
    TransactionType,
    require_count,
    require_mapping,
)

# Wire key <-> attribute name for the optional log fields
_OPTIONAL_LOG_FIELDS: tuple[tuple[str, str], ...] = (
    ("expiry", "expiry"),
    ("location", "location"),
    ("notes", "notes"),
    ("previousValue", "previous_value"),
    ("newValue", "new_value"),
)


@dataclass(frozen=True, slots=True)
class TransactionLog:
    """
    One immutable entry in a drug's audit trail.

    ``quantity`` is zero for EDIT entries. ``expiry`` is set for check-ins,
    ``location`` for check-outs and pharmacy returns, ``notes`` and the
    previous/new available pair for edits.
    """

    id: str
    type: TransactionType
    quantity: int
    timestamp: str
    expiry: str | None = None
    location: str | None = None
    notes: str | None = None
    previous_value: int | None = None
    new_value: int | None = None

    def __post_init__(self) -> None:
        require_count("quantity", self.quantity)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "quantity": self.quantity,
            "timestamp": self.timestamp,
        }
        for wire_key, attr in _OPTIONAL_LOG_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                data[wire_key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransactionLog:
        require_mapping("log entry", data)
        optional = {
            attr: data[wire_key]
            for wire_key, attr in _OPTIONAL_LOG_FIELDS
            if data.get(wire_key) is not None
        }
        return cls(
            id=str(data["id"]),
            type=TransactionType(data["type"]),
            quantity=data["quantity"],
            timestamp=str(data["timestamp"]),
            **optional,
        )


@dataclass(frozen=True, slots=True)
class Drug:
    """
    A controlled drug line and everything recorded against it.

    Contract:
        ``id`` never changes. The drug exclusively owns ``logs``, ordered by
        append order. Mutation happens only through the transaction engine,
        which returns a new Drug.
    """

    id: str
    name: str
    strength: str
    presentation: Presentation
    stock_levels: StockLevels
    created_at: str
    updated_at: str
    logs: tuple[TransactionLog, ...] = field(default_factory=tuple)

    def with_log(
        self,
        log: TransactionLog,
        *,
        updated_at: str,
        **changes: Any,
    ) -> Drug:
        """Return a copy with ``log`` appended, ``updated_at`` bumped and
        any other field ``changes`` applied."""
        return replace(
            self,
            logs=self.logs + (log,),
            updated_at=updated_at,
            **changes,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "strength": self.strength,
            "presentation": self.presentation.value,
            "stockLevels": self.stock_levels.to_dict(),
            "logs": [log.to_dict() for log in self.logs],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Drug:
        require_mapping("drug", data)
        logs = data.get("logs", [])
        if not isinstance(logs, list):
            raise TypeError(f"logs must be a list, got {type(logs).__name__}")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            strength=str(data.get("strength", "")),
            presentation=Presentation(data["presentation"]),
            stock_levels=StockLevels.from_dict(data["stockLevels"]),
            logs=tuple(TransactionLog.from_dict(item) for item in logs),
            created_at=str(data["createdAt"]),
            updated_at=str(data["updatedAt"]),
        )
