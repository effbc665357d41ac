"""
Bulk export and import of the drug collection as JSON text.

Export is the wire format of the local cache, pretty-printed. Import is
strict: the whole payload is validated before anything is replaced, and
any problem rejects the import with ImportInvalidError naming the first
offending drug.
"""

from __future__ import annotations

import json

from stock_kernel.domain.collection import DrugCollection
from stock_kernel.domain.entities import Drug
from stock_kernel.exceptions import ImportInvalidError

_REQUIRED_KEYS = ("id", "name", "presentation", "stockLevels", "createdAt", "updatedAt")


def export_collection(collection: DrugCollection) -> str:
    return json.dumps(collection.to_list(), indent=2, ensure_ascii=False)


def parse_import(text: str) -> DrugCollection:
    """
    Parse and validate an exported collection.

    Raises:
        ImportInvalidError: not JSON, not a list, a drug missing required
            keys or with malformed values, unbalanced stock levels, or
            duplicate ids.
    """
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ImportInvalidError(f"not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ImportInvalidError("expected a list of drugs")

    drugs: list[Drug] = []
    seen: set[str] = set()
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ImportInvalidError("entry is not an object", index=index)
        missing = [key for key in _REQUIRED_KEYS if not item.get(key)]
        if missing:
            raise ImportInvalidError(f"missing {', '.join(missing)}", index=index)
        try:
            drug = Drug.from_dict(item)
        except (KeyError, TypeError, ValueError) as exc:
            raise ImportInvalidError(f"malformed drug: {exc}", index=index) from exc
        if not drug.stock_levels.is_balanced:
            raise ImportInvalidError("stock total does not equal available + ood", index=index)
        if drug.id in seen:
            raise ImportInvalidError(f"duplicate id {drug.id}", index=index)
        seen.add(drug.id)
        drugs.append(drug)
    return DrugCollection(drugs)
