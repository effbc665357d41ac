"""
Pure domain layer.

This module contains the ledger entities, stock arithmetic and the
transaction engine, with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Network
- I/O (other than the injected clock)

All domain objects are immutable and deterministic.
"""

from stock_kernel.domain.actions import (
    AdminEdit,
    CheckIn,
    CheckOut,
    EditDetails,
    MarkOOD,
    NewDrug,
    StockAction,
)
from stock_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SequentialClock,
    SystemClock,
    format_timestamp,
)
from stock_kernel.domain.collection import DrugCollection
from stock_kernel.domain.entities import Drug, TransactionLog
from stock_kernel.domain.seed_data import seed_collection
from stock_kernel.domain.stock_arithmetic import (
    has_ood,
    stock_percentage,
    stock_status,
)
from stock_kernel.domain.transaction_engine import EngineResult, TransactionEngine
from stock_kernel.domain.values import (
    PHARMACY_LOCATION,
    THEATRE_LOCATIONS,
    Presentation,
    StockLevels,
    StockStatus,
    TransactionType,
)

__all__ = [
    "AdminEdit",
    "CheckIn",
    "CheckOut",
    "Clock",
    "DeterministicClock",
    "Drug",
    "DrugCollection",
    "EditDetails",
    "EngineResult",
    "MarkOOD",
    "NewDrug",
    "PHARMACY_LOCATION",
    "Presentation",
    "SequentialClock",
    "StockAction",
    "StockLevels",
    "StockStatus",
    "SystemClock",
    "THEATRE_LOCATIONS",
    "TransactionEngine",
    "TransactionLog",
    "TransactionType",
    "format_timestamp",
    "has_ood",
    "seed_collection",
    "stock_percentage",
    "stock_status",
]
