"""
Data sources -- the places a drug collection can be loaded from.

Each source exposes ``is_enabled()`` and ``fetch()``. The persistence
gateway walks an ordered list of sources and takes the first successful
fetch, so adding another backend means appending a source.

    RemoteDataSource      remote store, enabled only when configured
    LocalCacheDataSource  collection entry of the local cache
    SeedDataSource        built-in starter collection, never fails
"""

from __future__ import annotations

import json
from typing import Protocol

from stock_kernel.domain.collection import DrugCollection
from stock_kernel.domain.seed_data import seed_collection
from stock_kernel.exceptions import (
    CacheCorruptError,
    CacheEmptyError,
    ConfigIncompleteError,
    RemoteMalformedError,
    StockKernelError,
)
from stock_kernel.services.local_cache import LocalCache
from stock_kernel.services.remote_config import RemoteConfigStore
from stock_kernel.services.remote_store import JsonBinClient

DEFAULT_DRUGS_KEY = "cdtracker_drugs"

# What a malformed stored document raises while being parsed
_PARSE_ERRORS = (KeyError, TypeError, ValueError, StockKernelError)


class DataSource(Protocol):
    name: str

    def is_enabled(self) -> bool: ...

    def fetch(self) -> DrugCollection: ...


class RemoteDataSource:
    name = "remote"

    def __init__(self, client: JsonBinClient, config_store: RemoteConfigStore):
        self._client = client
        self._config_store = config_store

    def is_enabled(self) -> bool:
        return self._config_store.is_configured()

    def fetch(self) -> DrugCollection:
        config = self._config_store.get()
        if config is None:
            raise ConfigIncompleteError(["api_key", "bin_id"])
        config.require_complete()
        record = self._client.fetch_latest(config.bin_id, config.api_key)
        try:
            return DrugCollection.from_list(record)
        except _PARSE_ERRORS as exc:
            raise RemoteMalformedError("fetch", f"record is not a drug collection: {exc}") from exc


class LocalCacheDataSource:
    name = "local_cache"

    def __init__(self, cache: LocalCache, key: str = DEFAULT_DRUGS_KEY):
        self._cache = cache
        self._key = key

    def is_enabled(self) -> bool:
        return True

    def fetch(self) -> DrugCollection:
        raw = self._cache.get(self._key)
        if raw is None:
            raise CacheEmptyError(self._key)
        try:
            return DrugCollection.from_list(json.loads(raw))
        except _PARSE_ERRORS as exc:
            raise CacheCorruptError(self._key, str(exc)) from exc


class SeedDataSource:
    name = "seed"

    def is_enabled(self) -> bool:
        return True

    def fetch(self) -> DrugCollection:
        return seed_collection()
