"""
Built-in starter collection.

Used when neither the remote store nor the local cache yields data, and when
a user resets the ledger. Ids and timestamps are fixed so that two seed
loads compare equal.
"""

from __future__ import annotations

from stock_kernel.domain.collection import DrugCollection
from stock_kernel.domain.entities import Drug
from stock_kernel.domain.values import Presentation, StockLevels

SEED_TIMESTAMP = "2024-01-01T00:00:00.000Z"

# (id, name, strength, presentation, available, ood, minimum stock)
_SEED_ROWS: tuple[tuple[str, str, str, Presentation, int, int, int], ...] = (
    ("seed-morphine-10", "Morphine Sulfate", "10mg/1ml", Presentation.AMPOULE, 40, 0, 20),
    ("seed-fentanyl-100", "Fentanyl", "100mcg/2ml", Presentation.AMPOULE, 30, 2, 20),
    ("seed-alfentanil-1", "Alfentanil", "1mg/2ml", Presentation.AMPOULE, 10, 0, 10),
    ("seed-remifentanil-2", "Remifentanil", "2mg", Presentation.VIAL, 12, 0, 10),
    ("seed-ketamine-200", "Ketamine", "200mg/20ml", Presentation.VIAL, 8, 0, 5),
    ("seed-midazolam-5", "Midazolam", "5mg/5ml", Presentation.AMPOULE, 25, 0, 15),
    ("seed-diamorphine-5", "Diamorphine", "5mg", Presentation.POWDER, 6, 1, 10),
    ("seed-oxycodone-5", "Oxycodone", "5mg", Presentation.CAPSULE, 56, 0, 28),
    ("seed-oramorph-10", "Oramorph", "10mg/5ml", Presentation.OTHER, 3, 0, 2),
    ("seed-buprenorphine-5", "Buprenorphine", "5mcg/hr", Presentation.PATCH, 4, 0, 4),
    ("seed-morphine-pfs-1", "Morphine Sulfate", "1mg/1ml 50ml", Presentation.PRE_FILLED_SYRINGE, 5, 0, 4),
    ("seed-fentanyl-bag", "Fentanyl PCA", "500mcg/100ml", Presentation.BAG, 2, 0, 2),
    ("seed-tramadol-50", "Tramadol", "50mg", Presentation.TABLET, 60, 0, 30),
)


def _seed_drug(row: tuple[str, str, str, Presentation, int, int, int]) -> Drug:
    drug_id, name, strength, presentation, available, ood, minimum = row
    return Drug(
        id=drug_id,
        name=name,
        strength=strength,
        presentation=presentation,
        stock_levels=StockLevels.of(available, ood, minimum),
        created_at=SEED_TIMESTAMP,
        updated_at=SEED_TIMESTAMP,
    )


def seed_collection() -> DrugCollection:
    """Return a fresh copy of the starter collection."""
    return DrugCollection(_seed_drug(row) for row in _SEED_ROWS)
