"""
Pytest fixtures for the stock ledger test suite.

Provides:
- Structured logging for every test, plus a JSON log capture fixture
- An in-memory SQLite local cache, recreated per test
- Deterministic clock and id factory for the transaction engine
- A fake ``requests`` session standing in for the remote store
"""

import json
import logging
from io import StringIO
from itertools import count
from typing import Any

import pytest
import requests

from stock_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from stock_kernel.domain.clock import DeterministicClock
from stock_kernel.domain.collection import DrugCollection
from stock_kernel.domain.entities import Drug
from stock_kernel.domain.transaction_engine import TransactionEngine
from stock_kernel.domain.values import Presentation, StockLevels
from stock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from stock_kernel.services.local_cache import LocalCache
from stock_kernel.services.persistence_gateway import PersistenceGateway
from stock_kernel.services.remote_config import RemoteConfigStore
from stock_kernel.services.remote_store import JsonBinClient

TEST_BASE_URL = "https://remote.test/v3"
TEST_TIMESTAMP = "2024-01-01T00:00:00.000Z"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture stock_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, engine):
            engine.apply(...)
            logs = captured_logs()
            assert any(r["message"] == "action_applied" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("stock_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def clock():
    return DeterministicClock()


@pytest.fixture
def id_factory():
    """Sequential ids: log-1, log-2, ..."""
    counter = count(1)
    return lambda: f"log-{next(counter)}"


@pytest.fixture
def engine(clock, id_factory):
    return TransactionEngine(clock, id_factory)


def make_drug(
    drug_id: str = "drug-1",
    *,
    name: str = "Morphine Sulfate",
    strength: str = "10mg/1ml",
    presentation: Presentation = Presentation.AMPOULE,
    available: int = 10,
    ood: int = 0,
    minimum_stock: int = 5,
    total: int | None = None,
) -> Drug:
    levels = StockLevels(
        total=available + ood if total is None else total,
        available=available,
        ood=ood,
        minimum_stock=minimum_stock,
    )
    return Drug(
        id=drug_id,
        name=name,
        strength=strength,
        presentation=presentation,
        stock_levels=levels,
        created_at=TEST_TIMESTAMP,
        updated_at=TEST_TIMESTAMP,
    )


@pytest.fixture
def drug_factory():
    return make_drug


@pytest.fixture
def collection():
    """Two drugs: drug-1 (10 available) and drug-2 (5 available, 3 OOD)."""
    return DrugCollection(
        [
            make_drug("drug-1", available=10),
            make_drug("drug-2", name="Fentanyl", strength="100mcg/2ml", available=5, ood=3),
        ]
    )


# =============================================================================
# Local cache fixtures
# =============================================================================


@pytest.fixture
def cache_db():
    """Fresh in-memory cache database for one test."""
    init_engine_from_url("sqlite://")
    create_tables()
    yield get_session_factory()
    drop_tables()
    reset_engine()


@pytest.fixture
def local_cache(cache_db):
    return LocalCache(cache_db)


@pytest.fixture
def config_store(local_cache):
    return RemoteConfigStore(local_cache)


# =============================================================================
# Remote store fixtures
# =============================================================================


class FakeResponse:
    """The parts of requests.Response that JsonBinClient reads."""

    def __init__(self, status_code: int = 200, body: Any = None, reason: str = "OK", text: str | None = None):
        self.status_code = status_code
        self.reason = reason
        self._body = body
        self._text = text

    def json(self) -> Any:
        if self._text is not None:
            return json.loads(self._text)
        return self._body


class FakeSession:
    """
    Records requests and answers from a queue of responses.

    Each queued item is a FakeResponse or an exception to raise. When the
    queue is empty, ``default`` answers.
    """

    def __init__(self, default: FakeResponse | Exception | None = None):
        self.calls: list[dict[str, Any]] = []
        self.queue: list[FakeResponse | Exception] = []
        self.default = default or FakeResponse(200, {"record": []})

    def respond(self, *responses: FakeResponse | Exception) -> "FakeSession":
        self.queue.extend(responses)
        return self

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        answer = self.queue.pop(0) if self.queue else self.default
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def offline_session():
    return FakeSession(default=requests.ConnectionError("network unreachable"))


@pytest.fixture
def remote_client(fake_session):
    return JsonBinClient(base_url=TEST_BASE_URL, timeout=2.0, session=fake_session)


@pytest.fixture
def gateway(local_cache, remote_client, config_store):
    return PersistenceGateway(local_cache, remote_client, config_store)


@pytest.fixture
def http_response():
    """Build a fake response: ``http_response(404, body, reason="Not Found")``."""
    return FakeResponse
