"""
stock_services -- application layer over the stock kernel.

``StockLedgerService`` is what a user interface or script drives: it owns
the in-memory collection, applies actions, persists after every change and
reports sync status.
"""

from stock_services.data_transfer import export_collection, parse_import
from stock_services.ledger_service import StockLedgerService, SyncState

__all__ = [
    "StockLedgerService",
    "SyncState",
    "export_collection",
    "parse_import",
]
