"""Fixtures for tests that drive the full ledger service."""

import pytest

from stock_services.ledger_service import StockLedgerService


@pytest.fixture
def service(gateway, engine):
    return StockLedgerService(gateway, engine)


@pytest.fixture
def loaded_service(service, collection):
    """Service holding the two-drug test collection, saved locally."""
    service.save_collection(collection)
    return service
