"""
Stock arithmetic -- pure transforms over StockLevels.

Every transform takes the current levels and a quantity and returns new
levels. ``total`` is always recomputed as ``available + ood`` rather than
adjusted on its own, so an unbalanced prior state comes out balanced.

Preconditions (checked by ``check_quantity``, not by the transforms):

    CHECK_IN         0 < qty
    CHECK_OUT        0 < qty <= available
    OOD              0 < qty <= available
    PHARMACY_RETURN  0 < qty <= ood

The transforms still clamp at zero, so an unchecked call can never produce
negative counters. No logging and no side effects in this module.
"""

from __future__ import annotations

from dataclasses import replace

from stock_kernel.domain.entities import Drug
from stock_kernel.domain.values import StockLevels, StockStatus, TransactionType
from stock_kernel.exceptions import InvalidQuantityError

# Status thresholds, as fractions of minimum stock
CRITICAL_RATIO = 0.5
WARNING_RATIO = 1.0


def check_in(levels: StockLevels, quantity: int) -> StockLevels:
    available = levels.available + quantity
    return replace(levels, available=available, total=available + levels.ood)


def check_out(levels: StockLevels, quantity: int) -> StockLevels:
    available = max(0, levels.available - quantity)
    return replace(levels, available=available, total=available + levels.ood)


def mark_ood(levels: StockLevels, quantity: int) -> StockLevels:
    available = max(0, levels.available - quantity)
    ood = levels.ood + quantity
    return replace(levels, available=available, ood=ood, total=available + ood)


def pharmacy_return(levels: StockLevels, quantity: int) -> StockLevels:
    ood = max(0, levels.ood - quantity)
    return replace(levels, ood=ood, total=levels.available + ood)


TRANSFORMS = {
    TransactionType.CHECK_IN: check_in,
    TransactionType.CHECK_OUT: check_out,
    TransactionType.OOD: mark_ood,
    TransactionType.PHARMACY_RETURN: pharmacy_return,
}


def quantity_limit(levels: StockLevels, action: TransactionType) -> int | None:
    """Upper bound for ``action``'s quantity, or None when unbounded."""
    if action in (TransactionType.CHECK_OUT, TransactionType.OOD):
        return levels.available
    if action is TransactionType.PHARMACY_RETURN:
        return levels.ood
    return None


def check_quantity(levels: StockLevels, action: TransactionType, quantity: object) -> int:
    """
    Validate ``quantity`` against the precondition for ``action``.

    Returns the quantity unchanged when valid.

    Raises:
        InvalidQuantityError: non-integer, non-positive, or above the bound.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(action.value, quantity, "quantity must be a whole number")
    if quantity <= 0:
        raise InvalidQuantityError(action.value, quantity, "quantity must be greater than zero")
    limit = quantity_limit(levels, action)
    if limit is not None and quantity > limit:
        pool = "out-of-date" if action is TransactionType.PHARMACY_RETURN else "available"
        raise InvalidQuantityError(
            action.value,
            quantity,
            f"only {limit} {pool} in stock",
            limit=limit,
        )
    return quantity


def stock_status(levels: StockLevels) -> StockStatus:
    """
    Alerting band for the drug.

    A zero minimum never alerts. Otherwise below half the minimum is
    critical, below the minimum is a warning.
    """
    if levels.minimum_stock == 0:
        return StockStatus.SUFFICIENT
    ratio = levels.available / levels.minimum_stock
    if ratio < CRITICAL_RATIO:
        return StockStatus.CRITICAL
    if ratio < WARNING_RATIO:
        return StockStatus.WARNING
    return StockStatus.SUFFICIENT


def stock_percentage(levels: StockLevels) -> int:
    """Available stock as a rounded percentage of the minimum (100 if unset)."""
    if levels.minimum_stock == 0:
        return 100
    # Half-up rounding
    return int(levels.available * 100 / levels.minimum_stock + 0.5)


def has_ood(drug: Drug) -> bool:
    return drug.stock_levels.ood > 0
