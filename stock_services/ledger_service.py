"""
StockLedgerService -- the API the presentation layer talks to.

Responsibility:
    Holds the in-memory drug collection for the life of the process, runs
    every action through the TransactionEngine and persists the whole
    collection through the PersistenceGateway after each mutation.

Architecture position:
    Services -- imperative shell above ``stock_kernel``. Forms call the
    action methods with already-collected input; views read ``collection``
    and ``sync_state``.

Error handling:
    - Ledger errors (InvalidQuantityError, DrugNotFoundError, ...) propagate
      to the caller and leave the collection untouched.
    - Persistence failures after a mutation are NOT raised: the mutation
      stands in memory and in the local cache, and the failure is recorded
      in ``sync_state`` for a sync-error indicator. ``save_collection()``
      called directly does raise them.
    - ``load_collection()`` never raises.

Concurrency:
    Single-threaded. Every save ships the collection as it is at the time
    of the save, so a mutation made while a previous save was failing is
    carried by the next save rather than lost.

Usage:
    service = StockLedgerService.from_settings(get_active_settings())
    service.load_collection()
    service.check_in(drug_id, quantity=10, expiry="2026-03-31")
    if service.sync_state.last_error:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import requests

from stock_config.schema import TrackerSettings
from stock_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from stock_kernel.domain.actions import (
    AdminEdit,
    CheckIn,
    CheckOut,
    EditDetails,
    MarkOOD,
    NewDrug,
    StockAction,
)
from stock_kernel.domain.clock import Clock
from stock_kernel.domain.collection import DrugCollection
from stock_kernel.domain.entities import Drug
from stock_kernel.domain.seed_data import seed_collection
from stock_kernel.domain.transaction_engine import TransactionEngine
from stock_kernel.domain.values import Presentation
from stock_kernel.exceptions import PersistenceError
from stock_kernel.logging_config import get_logger
from stock_kernel.services.local_cache import LocalCache
from stock_kernel.services.persistence_gateway import PersistenceGateway, SaveResult
from stock_kernel.services.remote_config import RemoteConfig, RemoteConfigStore
from stock_kernel.services.remote_store import ConnectionCheck, JsonBinClient
from stock_services.data_transfer import export_collection, parse_import

logger = get_logger("services.ledger_service")


@dataclass
class SyncState:
    """What a sync indicator needs to show."""

    is_syncing: bool = False
    last_error: str | None = None
    last_error_code: str | None = None

    def record_failure(self, exc: PersistenceError) -> None:
        self.last_error = str(exc)
        self.last_error_code = exc.code

    def clear(self) -> None:
        self.last_error = None
        self.last_error_code = None


class StockLedgerService:
    """Process-wide owner of the drug collection."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        engine: TransactionEngine | None = None,
    ):
        self.gateway = gateway
        self.engine = engine or TransactionEngine()
        self.sync_state = SyncState()
        self._collection: DrugCollection | None = None

    @classmethod
    def from_settings(
        cls,
        settings: TrackerSettings,
        *,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
        http_session: requests.Session | None = None,
    ) -> StockLedgerService:
        """Wire up cache database, remote client and engine from settings."""
        init_engine_from_url(settings.cache_url)
        create_tables()
        cache = LocalCache(get_session_factory())
        client = JsonBinClient(
            base_url=settings.remote.base_url,
            timeout=settings.remote.timeout_seconds,
            bin_name=settings.remote.bin_name,
            session=http_session,
        )
        gateway = PersistenceGateway(
            cache,
            client,
            RemoteConfigStore(cache, settings.remote_config_key),
            drugs_key=settings.drugs_key,
        )
        return cls(gateway, TransactionEngine(clock, id_factory))

    # ------------------------------------------------------------------
    # Collection lifecycle
    # ------------------------------------------------------------------

    @property
    def collection(self) -> DrugCollection:
        if self._collection is None:
            self.load_collection()
        return self._collection

    def load_collection(self) -> DrugCollection:
        self.sync_state.is_syncing = True
        try:
            self._collection = self.gateway.load()
        finally:
            self.sync_state.is_syncing = False
        return self._collection

    def reload(self) -> DrugCollection:
        """Load again, e.g. after the remote configuration changed."""
        self.sync_state.clear()
        return self.load_collection()

    def save_collection(self, collection: DrugCollection | None = None) -> SaveResult:
        """
        Persist ``collection`` (default: the current one) and adopt it.

        Raises:
            RemoteUnavailableError / RemoteMalformedError: remote write failed
                after the local cache was written.
        """
        if collection is not None:
            self._collection = collection
        self.sync_state.is_syncing = True
        self.sync_state.clear()
        try:
            return self.gateway.save(self.collection)
        except PersistenceError as exc:
            self.sync_state.record_failure(exc)
            raise
        finally:
            self.sync_state.is_syncing = False

    def _commit(self, collection: DrugCollection) -> None:
        self._collection = collection
        try:
            self.save_collection()
        except PersistenceError:
            logger.warning("autosave_incomplete", extra={"error_code": self.sync_state.last_error_code})

    def get_drug(self, drug_id: str) -> Drug:
        return self.collection.require(drug_id)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _apply(self, drug_id: str, action: StockAction) -> Drug:
        result = self.engine.apply(self.collection, drug_id, action)
        self._commit(result.collection)
        return result.drug

    def check_in(self, drug_id: str, quantity: int, expiry: str | None = None) -> Drug:
        return self._apply(drug_id, CheckIn(quantity=quantity, expiry=expiry))

    def check_out(self, drug_id: str, quantity: int, location: str) -> Drug:
        """Check out to ``location``; ``"Pharmacy"`` returns OOD stock."""
        return self._apply(drug_id, CheckOut(quantity=quantity, location=location))

    def mark_ood(self, drug_id: str, quantity: int) -> Drug:
        return self._apply(drug_id, MarkOOD(quantity=quantity))

    def edit_drug(
        self,
        drug_id: str,
        name: str,
        strength: str,
        presentation: Presentation | str,
        minimum_stock: int,
    ) -> Drug:
        return self._apply(
            drug_id,
            EditDetails(
                name=name,
                strength=strength,
                presentation=presentation,
                minimum_stock=minimum_stock,
            ),
        )

    def admin_edit(
        self,
        drug_id: str,
        name: str,
        strength: str,
        presentation: Presentation | str,
        minimum_stock: int,
        available: int,
        ood: int,
    ) -> Drug:
        return self._apply(
            drug_id,
            AdminEdit(
                name=name,
                strength=strength,
                presentation=presentation,
                minimum_stock=minimum_stock,
                available=available,
                ood=ood,
            ),
        )

    def add_drug(
        self,
        name: str,
        strength: str,
        presentation: Presentation | str,
        minimum_stock: int = 0,
    ) -> Drug:
        result = self.engine.add_drug(
            self.collection,
            NewDrug(name=name, strength=strength, presentation=presentation, minimum_stock=minimum_stock),
        )
        self._commit(result.collection)
        return result.drug

    def delete_drug(self, drug_id: str) -> None:
        self._commit(self.engine.delete_drug(self.collection, drug_id))

    def clear_all_logs(self) -> None:
        self._commit(self.engine.clear_all_logs(self.collection))

    # ------------------------------------------------------------------
    # Data transfer
    # ------------------------------------------------------------------

    def export_data(self) -> str:
        return export_collection(self.collection)

    def import_data(self, text: str) -> DrugCollection:
        """Replace the whole collection with an exported one.

        Raises ImportInvalidError and keeps the current collection when the
        payload does not validate.
        """
        imported = parse_import(text)
        logger.info("collection_imported", extra={"drug_count": len(imported)})
        self._commit(imported)
        return imported

    def reset_data(self) -> DrugCollection:
        """Replace the whole collection with the built-in seed data."""
        seeded = seed_collection()
        logger.warning("collection_reset", extra={"drug_count": len(seeded)})
        self._commit(seeded)
        return seeded

    # ------------------------------------------------------------------
    # Remote configuration
    # ------------------------------------------------------------------

    def get_config(self) -> RemoteConfig | None:
        return self.gateway.get_config()

    def set_config(self, bin_id: str, api_key: str) -> RemoteConfig:
        return self.gateway.set_config(bin_id, api_key)

    def clear_config(self) -> None:
        self.gateway.clear_config()

    def is_configured(self) -> bool:
        return self.gateway.is_remote_configured()

    def test_connection(self, bin_id: str, api_key: str) -> ConnectionCheck:
        return self.gateway.test_connection(bin_id, api_key)

    def migrate(self, api_key: str) -> str:
        return self.gateway.migrate(api_key)
