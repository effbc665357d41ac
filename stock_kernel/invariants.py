"""
Stock Kernel Invariants Contract.

These invariants are structural law for every drug in the ledger. No
configuration, import path or admin override may disable them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across stock_arithmetic, the transaction engine,
StockLevels construction and the persistence gateway.
"""

from enum import Enum, unique


@unique
class StockInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    TOTAL_BALANCE = "total_balance"
    """``total == available + ood`` after every mutation. Enforced by
    StockLevels construction and by recomputing ``total`` in every
    arithmetic transform."""

    NON_NEGATIVE = "non_negative"
    """``available``, ``ood``, ``total`` and ``minimum_stock`` are never
    negative. Enforced by quantity preconditions and clamping in
    stock_arithmetic."""

    APPEND_ONLY_LOG = "append_only_log"
    """Every action appends exactly one TransactionLog; existing entries are
    never edited. Enforced by the transaction engine."""

    LOCAL_FIRST_DURABILITY = "local_first_durability"
    """The local cache is written before any remote write is attempted, and
    is never rolled back on remote failure. Enforced by PersistenceGateway."""

    LOAD_NEVER_FAILS = "load_never_fails"
    """Loading always yields a usable collection, falling back to the seed
    dataset. Enforced by the ordered data-source chain."""


ALL_STOCK_INVARIANTS: frozenset[StockInvariant] = frozenset(StockInvariant)

# The kernel package may not import from these packages.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "stock_services",
    "stock_config",
)
