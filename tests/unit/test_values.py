"""
Unit tests for StockLevels, TransactionLog and Drug.

Verifies:
- StockLevels construction guards
- camelCase wire format and omission of unset optional log fields
- Drug.with_log appends without touching the original
- from_dict rejects non-object documents, non-list logs and non-count quantities
"""

import pytest

from stock_kernel.domain.entities import Drug, TransactionLog
from stock_kernel.domain.values import (
    PHARMACY_LOCATION,
    THEATRE_LOCATIONS,
    Presentation,
    StockLevels,
    TransactionType,
)


class TestStockLevels:
    def test_of_derives_total(self):
        assert StockLevels.of(7, 3, 5).total == 10

    def test_empty(self):
        empty = StockLevels.empty(minimum_stock=4)
        assert (empty.total, empty.available, empty.ood, empty.minimum_stock) == (0, 0, 0, 4)

    @pytest.mark.parametrize("field", ["total", "available", "ood", "minimum_stock"])
    def test_negative_rejected(self, field):
        values = {"total": 0, "available": 0, "ood": 0, "minimum_stock": 0, field: -1}
        with pytest.raises(ValueError, match=field):
            StockLevels(**values)

    @pytest.mark.parametrize("bad", [1.0, "1", True, None])
    def test_non_integer_rejected(self, bad):
        with pytest.raises(ValueError):
            StockLevels(total=bad, available=0, ood=0, minimum_stock=0)

    def test_unbalanced_state_is_tolerated(self):
        levels = StockLevels(total=5, available=1, ood=1, minimum_stock=0)
        assert not levels.is_balanced

    def test_wire_keys(self):
        assert StockLevels.of(2, 1, 3).to_dict() == {
            "total": 3,
            "available": 2,
            "ood": 1,
            "minimumStock": 3,
        }

    def test_from_dict(self):
        data = {"total": 3, "available": 2, "ood": 1, "minimumStock": 3}
        assert StockLevels.from_dict(data) == StockLevels.of(2, 1, 3)

    @pytest.mark.parametrize("data", [["total"], "10", None])
    def test_from_dict_requires_an_object(self, data):
        with pytest.raises(TypeError, match="stockLevels"):
            StockLevels.from_dict(data)


class TestVocabularies:
    def test_presentations(self):
        assert Presentation("Pre-Filled Syringe") is Presentation.PRE_FILLED_SYRINGE
        assert len(Presentation) == 9

    def test_unknown_presentation(self):
        with pytest.raises(ValueError):
            Presentation("Suppository")

    def test_theatre_locations(self):
        assert len(THEATRE_LOCATIONS["emergency"]) == 22
        assert THEATRE_LOCATIONS["day"][-1] == "D7"
        assert PHARMACY_LOCATION in THEATRE_LOCATIONS["other"]


class TestTransactionLog:
    def test_unset_optionals_omitted(self):
        log = TransactionLog(id="l1", type=TransactionType.OOD, quantity=2, timestamp="t")
        assert log.to_dict() == {"id": "l1", "type": "OOD", "quantity": 2, "timestamp": "t"}

    def test_edit_fields_use_camel_case(self):
        log = TransactionLog(
            id="l1",
            type=TransactionType.EDIT,
            quantity=0,
            timestamp="t",
            notes="Admin edit: No changes",
            previous_value=4,
            new_value=4,
        )
        data = log.to_dict()
        assert data["previousValue"] == 4
        assert data["newValue"] == 4
        assert TransactionLog.from_dict(data) == log

    def test_null_optionals_read_as_unset(self):
        log = TransactionLog.from_dict(
            {"id": "l1", "type": "CHECK_IN", "quantity": 3, "timestamp": "t", "expiry": None}
        )
        assert log.expiry is None

    @pytest.mark.parametrize("quantity", [2.7, True, "3", None])
    def test_non_integer_quantity_rejected(self, quantity):
        with pytest.raises(ValueError, match="quantity must be an integer"):
            TransactionLog(id="l1", type=TransactionType.CHECK_IN, quantity=quantity, timestamp="t")

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            TransactionLog(id="l1", type=TransactionType.CHECK_IN, quantity=-1, timestamp="t")

    def test_from_dict_rejects_fractional_quantity(self):
        with pytest.raises(ValueError):
            TransactionLog.from_dict({"id": "l1", "type": "CHECK_IN", "quantity": 2.7, "timestamp": "t"})

    @pytest.mark.parametrize("data", ["not-a-log", 5, []])
    def test_from_dict_requires_an_object(self, data):
        with pytest.raises(TypeError, match="log entry must be an object"):
            TransactionLog.from_dict(data)


class TestDrug:
    def test_with_log_appends(self, drug_factory):
        drug = drug_factory()
        log = TransactionLog(id="l1", type=TransactionType.CHECK_IN, quantity=1, timestamp="t2")
        updated = drug.with_log(log, updated_at="t2", stock_levels=StockLevels.of(11, 0, 5))
        assert updated.logs == (log,)
        assert updated.updated_at == "t2"
        assert updated.stock_levels.available == 11
        assert drug.logs == ()
        assert drug.stock_levels.available == 10

    def test_wire_format(self, drug_factory):
        data = drug_factory().to_dict()
        assert set(data) == {
            "id",
            "name",
            "strength",
            "presentation",
            "stockLevels",
            "logs",
            "createdAt",
            "updatedAt",
        }
        assert data["presentation"] == "Ampoule"
        assert Drug.from_dict(data) == drug_factory()

    def test_missing_strength_and_logs_default(self):
        drug = Drug.from_dict(
            {
                "id": "x",
                "name": "Ketamine",
                "presentation": "Vial",
                "stockLevels": {"total": 0, "available": 0, "ood": 0, "minimumStock": 0},
                "createdAt": "t",
                "updatedAt": "t",
            }
        )
        assert drug.strength == ""
        assert drug.logs == ()

    @pytest.mark.parametrize("data", [["id"], "drug", 3, None])
    def test_from_dict_requires_an_object(self, data):
        with pytest.raises(TypeError, match="drug must be an object"):
            Drug.from_dict(data)

    @pytest.mark.parametrize("logs", ["abc", {"id": "l1"}, 7])
    def test_logs_must_be_a_list(self, drug_factory, logs):
        data = drug_factory().to_dict()
        data["logs"] = logs
        with pytest.raises(TypeError, match="logs must be a list"):
            Drug.from_dict(data)

    def test_non_object_log_entry_rejected(self, drug_factory):
        data = drug_factory().to_dict()
        data["logs"] = ["not-a-log"]
        with pytest.raises(TypeError, match="log entry"):
            Drug.from_dict(data)
