"""Read-only selectors over the drug collection."""

from stock_kernel.selectors.ledger_selector import LedgerSelector, OODSummary, TheatreUsage

__all__ = ["LedgerSelector", "OODSummary", "TheatreUsage"]
