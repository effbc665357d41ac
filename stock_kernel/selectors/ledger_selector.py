"""
Module: stock_kernel.selectors.ledger_selector
Responsibility: Read-only queries over a drug collection: triage ordering,
    log history, theatre usage and out-of-date summaries.
Architecture position: Kernel > Selectors.  May import from domain/ only.
    Selectors NEVER produce a modified collection.

Invariants enforced:
    - Log orderings are stable: entries with equal timestamps keep their
      append order, so clock ties never reorder history.
    - All figures are derived from the logs and stock levels on each call;
      nothing is cached.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from stock_kernel.domain.collection import DrugCollection
from stock_kernel.domain.entities import Drug, TransactionLog
from stock_kernel.domain.stock_arithmetic import stock_status
from stock_kernel.domain.values import PHARMACY_LOCATION, StockStatus, TransactionType

THEATRE_USAGE_LIMIT = 15

# Locations that are not theatres and are left out of usage figures
_NON_THEATRE_LOCATIONS = frozenset({PHARMACY_LOCATION, "Remote"})

_STATUS_ORDER = {
    StockStatus.CRITICAL: 0,
    StockStatus.WARNING: 1,
    StockStatus.SUFFICIENT: 2,
}


@dataclass(frozen=True)
class TheatreUsage:
    location: str
    total: int
    by_drug: dict[str, int] = field(default_factory=dict)

    @property
    def top_drug(self) -> tuple[str, int] | None:
        if not self.by_drug:
            return None
        return max(self.by_drug.items(), key=lambda item: item[1])


@dataclass(frozen=True)
class OODSummary:
    drug_id: str
    drug_name: str
    total_ood: int
    returned: int
    current_ood: int


class LedgerSelector:
    """Read-only views over one DrugCollection."""

    def __init__(self, collection: DrugCollection):
        self.collection = collection

    def drugs_by_priority(self) -> list[Drug]:
        """Critical first, then warning, then sufficient; by name within a band."""
        return sorted(
            self.collection,
            key=lambda drug: (
                _STATUS_ORDER[stock_status(drug.stock_levels)],
                drug.name.casefold(),
            ),
        )

    def status_counts(self) -> dict[StockStatus, int]:
        counts = Counter(stock_status(drug.stock_levels) for drug in self.collection)
        return {status: counts.get(status, 0) for status in StockStatus}

    def logs_newest_first(self, drug_id: str) -> list[TransactionLog]:
        logs = self.collection.require(drug_id).logs
        # Reverse append order first so ties stay newest-appended first
        return sorted(reversed(logs), key=lambda log: log.timestamp, reverse=True)

    def all_logs(self) -> list[tuple[Drug, TransactionLog]]:
        """Every log entry in the ledger, oldest first (stable on ties)."""
        entries = [(drug, log) for drug in self.collection for log in drug.logs]
        return sorted(entries, key=lambda pair: pair[1].timestamp)

    def theatre_usage(self, limit: int = THEATRE_USAGE_LIMIT) -> list[TheatreUsage]:
        """Quantities checked out per theatre, busiest first."""
        totals: Counter[str] = Counter()
        by_location: dict[str, Counter[str]] = {}
        for drug in self.collection:
            for log in drug.logs:
                if log.type is not TransactionType.CHECK_OUT or not log.location:
                    continue
                if log.location in _NON_THEATRE_LOCATIONS:
                    continue
                totals[log.location] += log.quantity
                by_location.setdefault(log.location, Counter())[drug.name] += log.quantity

        ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)[:limit]
        return [
            TheatreUsage(location=location, total=total, by_drug=dict(by_location[location]))
            for location, total in ranked
        ]

    def ood_summary(self) -> list[OODSummary]:
        """Per drug: quantity ever marked OOD, returned to pharmacy, and held now.

        Drugs with no OOD history and no OOD stock are left out.
        """
        summaries = []
        for drug in self.collection:
            marked = sum(log.quantity for log in drug.logs if log.type is TransactionType.OOD)
            returned = sum(
                log.quantity for log in drug.logs if log.type is TransactionType.PHARMACY_RETURN
            )
            if marked > 0 or drug.stock_levels.ood > 0:
                summaries.append(
                    OODSummary(
                        drug_id=drug.id,
                        drug_name=drug.name,
                        total_ood=marked,
                        returned=returned,
                        current_ood=drug.stock_levels.ood,
                    )
                )
        return summaries
