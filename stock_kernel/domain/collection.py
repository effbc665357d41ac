"""
DrugCollection -- ordered, keyed, immutable set of drugs.

Responsibility:
    Holds the whole ledger as an ``id -> Drug`` map that preserves the order
    drugs were added in. Every mutation returns a new collection and leaves
    the receiver untouched; unchanged Drug objects are shared between the
    old and new collection.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Failure modes:
    - DrugNotFoundError from ``require``/``replace``/``remove`` on unknown ids
    - DuplicateDrugError from ``add`` when the id already exists
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping

from stock_kernel.domain.entities import Drug
from stock_kernel.exceptions import DrugNotFoundError, DuplicateDrugError


class DrugCollection:
    """Immutable ordered mapping of drug id to Drug."""

    __slots__ = ("_drugs",)

    def __init__(self, drugs: Iterable[Drug] = ()):
        by_id: dict[str, Drug] = {}
        for drug in drugs:
            if drug.id in by_id:
                raise DuplicateDrugError(drug.id)
            by_id[drug.id] = drug
        self._drugs: Mapping[str, Drug] = MappingProxyType(by_id)

    @classmethod
    def _from_map(cls, by_id: dict[str, Drug]) -> DrugCollection:
        collection = cls.__new__(cls)
        collection._drugs = MappingProxyType(by_id)
        return collection

    # -- read ---------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._drugs)

    def __iter__(self) -> Iterator[Drug]:
        return iter(self._drugs.values())

    def __contains__(self, drug_id: object) -> bool:
        return drug_id in self._drugs

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DrugCollection):
            return NotImplemented
        return list(self._drugs.items()) == list(other._drugs.items())

    def __repr__(self) -> str:
        return f"DrugCollection({len(self)} drugs)"

    def get(self, drug_id: str) -> Drug | None:
        return self._drugs.get(drug_id)

    def require(self, drug_id: str) -> Drug:
        """Return the drug with ``drug_id`` or raise DrugNotFoundError."""
        try:
            return self._drugs[drug_id]
        except KeyError:
            raise DrugNotFoundError(drug_id) from None

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(self._drugs)

    # -- write (copy-on-write) ----------------------------------------------

    def add(self, drug: Drug) -> DrugCollection:
        if drug.id in self._drugs:
            raise DuplicateDrugError(drug.id)
        by_id = dict(self._drugs)
        by_id[drug.id] = drug
        return self._from_map(by_id)

    def replace(self, drug: Drug) -> DrugCollection:
        """Swap in a new version of an existing drug, keeping its position."""
        if drug.id not in self._drugs:
            raise DrugNotFoundError(drug.id)
        by_id = dict(self._drugs)
        by_id[drug.id] = drug
        return self._from_map(by_id)

    def remove(self, drug_id: str) -> DrugCollection:
        if drug_id not in self._drugs:
            raise DrugNotFoundError(drug_id)
        by_id = dict(self._drugs)
        del by_id[drug_id]
        return self._from_map(by_id)

    def map(self, transform: Callable[[Drug], Drug]) -> DrugCollection:
        """Apply ``transform`` to every drug. It must not change ids."""
        return self._from_map({drug_id: transform(drug) for drug_id, drug in self._drugs.items()})

    # -- wire format --------------------------------------------------------

    def to_list(self) -> list[dict[str, Any]]:
        return [drug.to_dict() for drug in self]

    @classmethod
    def from_list(cls, data: list[dict[str, Any]]) -> DrugCollection:
        if not isinstance(data, list):
            raise TypeError(f"drug collection must be a list, got {type(data).__name__}")
        return cls(Drug.from_dict(item) for item in data)
