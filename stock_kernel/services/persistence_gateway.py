"""
PersistenceGateway -- one load/save contract over local cache and remote store.

Responsibility:
    Durably stores and retrieves the whole drug collection, favouring
    availability over consistency. The remote store is an optional sync
    target; the local cache is always written.

Architecture position:
    Kernel > Services -- imperative shell. Composes LocalCache,
    JsonBinClient and RemoteConfigStore; the ledger service facade is its
    only caller.

Invariants enforced:
    LOCAL_FIRST_DURABILITY -- ``save`` writes the local cache before the
                              remote store and never undoes that write.
    LOAD_NEVER_FAILS       -- ``load`` walks remote -> local cache -> seed
                              and returns the first success; the seed source
                              cannot fail.

Failure modes:
    - ``load``: none escape. Each failed source is logged at WARNING.
    - ``save``: RemoteUnavailableError / RemoteMalformedError after the
      local write has completed.
    - ``migrate``: ConfigIncompleteError for an empty key, remote errors
      from document creation. Nothing is persisted on failure.

Usage:
    gateway = PersistenceGateway(cache, client, RemoteConfigStore(cache))
    collection = gateway.load()
    gateway.save(collection)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from stock_kernel.domain.collection import DrugCollection
from stock_kernel.domain.seed_data import seed_collection
from stock_kernel.exceptions import ConfigIncompleteError, PersistenceError, StockKernelError
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.services.data_sources import (
    DEFAULT_DRUGS_KEY,
    DataSource,
    LocalCacheDataSource,
    RemoteDataSource,
    SeedDataSource,
)
from stock_kernel.services.local_cache import LocalCache
from stock_kernel.services.remote_config import RemoteConfig, RemoteConfigStore
from stock_kernel.services.remote_store import ConnectionCheck, JsonBinClient

logger = get_logger("services.persistence_gateway")


@dataclass(frozen=True)
class SaveResult:
    """Outcome of a successful save. ``remote_synced`` is False when no
    remote store is configured."""

    local_saved: bool
    remote_synced: bool


class PersistenceGateway:
    """
    Load/save of the drug collection with ordered fallback.

    Contract:
        ``load`` always returns a usable collection. ``save`` always
        ships the collection it is given, in full; there is no patching and
        no conflict detection between writers.

    Non-goals:
        - No retries. A failed remote save is reported; the next save
          simply sends the then-current collection.
        - No merge of remote and local state.
    """

    def __init__(
        self,
        cache: LocalCache,
        client: JsonBinClient,
        config_store: RemoteConfigStore,
        drugs_key: str = DEFAULT_DRUGS_KEY,
        sources: Sequence[DataSource] | None = None,
    ):
        self._cache = cache
        self._client = client
        self._config_store = config_store
        self._drugs_key = drugs_key
        self._local_source = LocalCacheDataSource(cache, drugs_key)
        self.sources: tuple[DataSource, ...] = tuple(sources) if sources is not None else (
            RemoteDataSource(client, config_store),
            self._local_source,
            SeedDataSource(),
        )
        self.last_load_source: str | None = None

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def load(self) -> DrugCollection:
        """Return the collection from the first data source that succeeds."""
        for source in self.sources:
            if not source.is_enabled():
                continue
            try:
                collection = source.fetch()
            except StockKernelError as exc:
                logger.warning(
                    "load_source_failed",
                    extra={"source": source.name, "error_code": exc.code, "reason": str(exc)},
                )
                continue
            self.last_load_source = source.name
            logger.info("collection_loaded", extra={"source": source.name, "drug_count": len(collection)})
            return collection

        # Only reachable with a custom source list that has no seed fallback
        logger.error("load_all_sources_failed", extra={"sources": [s.name for s in self.sources]})
        self.last_load_source = SeedDataSource.name
        return seed_collection()

    def save(self, collection: DrugCollection) -> SaveResult:
        """
        Persist ``collection`` locally, then remotely when configured.

        Raises:
            RemoteUnavailableError: remote unreachable or non-2xx.
            RemoteMalformedError: remote answered with an unusable body.
        """
        document = collection.to_list()
        self._cache.set_json(self._drugs_key, document)
        logger.info("local_cache_saved", extra={"drug_count": len(collection)})

        config = self._config_store.get()
        if config is None or not config.is_complete:
            return SaveResult(local_saved=True, remote_synced=False)

        with LogContext.bind(store_id=config.bin_id):
            try:
                self._client.replace(config.bin_id, config.api_key, document)
            except PersistenceError:
                logger.error("remote_save_failed", exc_info=True)
                raise
            logger.info("remote_saved", extra={"drug_count": len(collection)})
        return SaveResult(local_saved=True, remote_synced=True)

    def read_local(self) -> DrugCollection:
        """Collection held in the local cache, or the seed collection."""
        try:
            return self._local_source.fetch()
        except PersistenceError as exc:
            logger.info("local_cache_unusable", extra={"error_code": exc.code})
            return seed_collection()

    # ------------------------------------------------------------------
    # Remote configuration
    # ------------------------------------------------------------------

    def is_remote_configured(self) -> bool:
        return self._config_store.is_configured()

    def get_config(self) -> RemoteConfig | None:
        return self._config_store.get()

    def set_config(self, bin_id: str, api_key: str) -> RemoteConfig:
        return self._config_store.set(RemoteConfig(bin_id=bin_id, api_key=api_key))

    def clear_config(self) -> None:
        """Forget the remote store. Remote data is left as it is."""
        self._config_store.clear()

    def test_connection(self, bin_id: str, api_key: str) -> ConnectionCheck:
        """Try a read with unsaved credentials. Persists nothing."""
        result = self._client.check(bin_id.strip(), api_key.strip())
        logger.info(
            "remote_connection_tested",
            extra={"bin_id": bin_id, "ok": result.ok, "reason": result.reason},
        )
        return result

    def migrate(self, api_key: str) -> str:
        """
        Copy the local collection into a newly created remote document and
        switch the configuration to it.

        Not idempotent: every call creates a new remote document.

        Returns:
            The new document's identifier.
        """
        api_key = api_key.strip()
        if not api_key:
            raise ConfigIncompleteError(["api_key"])
        snapshot = self.read_local()
        bin_id = self._client.create(api_key, snapshot.to_list())
        self._config_store.set(RemoteConfig(bin_id=bin_id, api_key=api_key))
        logger.info("migrated_to_remote", extra={"bin_id": bin_id, "drug_count": len(snapshot)})
        return bin_id
