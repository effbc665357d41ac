"""
Action payloads accepted by the transaction engine.

Each action is a frozen dataclass carrying what a form collects. Values are
validated by the engine, not here, so a payload can be built from raw form
input and rejected with a typed error.
"""

from __future__ import annotations

from dataclasses import dataclass

from stock_kernel.domain.values import Presentation


@dataclass(frozen=True)
class CheckIn:
    quantity: int
    expiry: str | None = None


@dataclass(frozen=True)
class CheckOut:
    """Dispensation to a location. ``location == "Pharmacy"`` is a return of
    out-of-date stock instead."""

    quantity: int
    location: str


@dataclass(frozen=True)
class MarkOOD:
    quantity: int


@dataclass(frozen=True)
class EditDetails:
    name: str
    strength: str
    presentation: Presentation | str
    minimum_stock: int


@dataclass(frozen=True)
class AdminEdit:
    """Privileged override of the counters. Bypasses the quantity
    preconditions; ``total`` is recomputed from ``available + ood``."""

    name: str
    strength: str
    presentation: Presentation | str
    minimum_stock: int
    available: int
    ood: int


@dataclass(frozen=True)
class NewDrug:
    name: str
    strength: str
    presentation: Presentation | str
    minimum_stock: int = 0


StockAction = CheckIn | CheckOut | MarkOOD | EditDetails | AdminEdit
