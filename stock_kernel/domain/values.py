"""
Values -- Immutable, self-validating stock value objects.

Responsibility:
    Provides the closed vocabularies of the ledger (Presentation,
    TransactionType, StockStatus) and the StockLevels value object that
    every arithmetic transform consumes and produces.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module. No outward dependencies.

Invariants enforced:
    NON_NEGATIVE  -- StockLevels rejects negative or non-integer fields at
                     construction time.
    TOTAL_BALANCE -- ``StockLevels.of()`` derives ``total`` from
                     ``available + ood``; a stored, unbalanced instance is
                     tolerated on read (``is_balanced`` reports it) and
                     corrected by the next arithmetic transform.

Failure modes:
    - ValueError on construction with negative, boolean or non-integer fields
    - ValueError when parsing an unknown presentation or transaction tag
    - TypeError when a wire document is not an object
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Presentation(str, Enum):
    """Closed set of dosage-form tags."""

    AMPOULE = "Ampoule"
    VIAL = "Vial"
    TABLET = "Tablet"
    CAPSULE = "Capsule"
    PATCH = "Patch"
    PRE_FILLED_SYRINGE = "Pre-Filled Syringe"
    POWDER = "Powder"
    BAG = "Bag"
    OTHER = "Other"


class TransactionType(str, Enum):
    """Kinds of entries in a drug's transaction log."""

    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    OOD = "OOD"
    PHARMACY_RETURN = "PHARMACY_RETURN"
    EDIT = "EDIT"


class StockStatus(str, Enum):
    """Alerting band derived from available stock against the minimum."""

    CRITICAL = "critical"
    WARNING = "warning"
    SUFFICIENT = "sufficient"


# Check-out destination that turns a check-out into a pharmacy return
PHARMACY_LOCATION = "Pharmacy"

THEATRE_LOCATIONS: dict[str, tuple[str, ...]] = {
    "emergency": tuple(f"E{i}" for i in range(1, 23)),
    "day": tuple(f"D{i}" for i in range(1, 8)),
    "other": ("Remote", PHARMACY_LOCATION),
}


def require_count(name: str, value: Any) -> None:
    # bool is an int subclass; a True quantity is never meaningful
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def require_mapping(kind: str, data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"{kind} must be an object, got {type(data).__name__}")
    return data


@dataclass(frozen=True, slots=True)
class StockLevels:
    """
    Stock counters for one drug.

    Contract:
        ``total`` is the physical count, ``available`` the usable part of it,
        ``ood`` the out-of-date part. ``minimum_stock`` is the alerting
        threshold only; it never blocks an action.

    Guarantees:
        - Immutable and hashable
        - All four fields are non-negative integers
    """

    total: int
    available: int
    ood: int
    minimum_stock: int

    def __post_init__(self) -> None:
        for name in ("total", "available", "ood", "minimum_stock"):
            require_count(name, getattr(self, name))

    @classmethod
    def of(cls, available: int, ood: int, minimum_stock: int) -> StockLevels:
        """Build balanced levels, deriving ``total`` from its parts."""
        return cls(
            total=available + ood,
            available=available,
            ood=ood,
            minimum_stock=minimum_stock,
        )

    @classmethod
    def empty(cls, minimum_stock: int = 0) -> StockLevels:
        """Zeroed levels for a freshly added drug."""
        return cls.of(0, 0, minimum_stock)

    @property
    def is_balanced(self) -> bool:
        return self.total == self.available + self.ood

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "available": self.available,
            "ood": self.ood,
            "minimumStock": self.minimum_stock,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StockLevels:
        require_mapping("stockLevels", data)
        return cls(
            total=data["total"],
            available=data["available"],
            ood=data["ood"],
            minimum_stock=data["minimumStock"],
        )
