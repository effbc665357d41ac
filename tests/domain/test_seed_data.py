"""Tests for the built-in starter collection."""

from stock_kernel.domain.seed_data import SEED_TIMESTAMP, seed_collection


class TestSeedCollection:
    def test_not_empty_and_balanced(self):
        seed = seed_collection()
        assert len(seed) > 0
        assert all(drug.stock_levels.is_balanced for drug in seed)

    def test_deterministic(self):
        assert seed_collection() == seed_collection()

    def test_fresh_copy_each_call(self):
        assert seed_collection() is not seed_collection()

    def test_no_history(self):
        seed = seed_collection()
        assert all(drug.logs == () for drug in seed)
        assert all(drug.created_at == SEED_TIMESTAMP for drug in seed)

    def test_unique_names_per_strength(self):
        keys = [(drug.name, drug.strength) for drug in seed_collection()]
        assert len(keys) == len(set(keys))
