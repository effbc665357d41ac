"""
Kernel services -- the imperative shell around the pure domain.

    LocalCache          key-value documents in the local cache database
    JsonBinClient       whole-document remote store over HTTP
    RemoteConfigStore   credential pair for the remote store
    PersistenceGateway  load/save with remote -> local -> seed fallback
"""

from stock_kernel.services.data_sources import (
    DEFAULT_DRUGS_KEY,
    DataSource,
    LocalCacheDataSource,
    RemoteDataSource,
    SeedDataSource,
)
from stock_kernel.services.local_cache import LocalCache
from stock_kernel.services.persistence_gateway import PersistenceGateway, SaveResult
from stock_kernel.services.remote_config import (
    DEFAULT_CONFIG_KEY,
    RemoteConfig,
    RemoteConfigStore,
)
from stock_kernel.services.remote_store import ConnectionCheck, JsonBinClient

__all__ = [
    "DEFAULT_CONFIG_KEY",
    "DEFAULT_DRUGS_KEY",
    "ConnectionCheck",
    "DataSource",
    "JsonBinClient",
    "LocalCache",
    "LocalCacheDataSource",
    "PersistenceGateway",
    "RemoteConfig",
    "RemoteConfigStore",
    "RemoteDataSource",
    "SaveResult",
    "SeedDataSource",
]
