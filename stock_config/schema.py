"""
Tracker settings schema.

Frozen dataclasses produced by the loader. File configuration covers where
the local cache lives and how to talk to the remote store; the remote
credentials themselves are runtime state kept in the local cache.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RemoteStoreSettings:
    """How to reach the remote whole-document store."""

    base_url: str = "https://api.jsonbin.io/v3"
    timeout_seconds: float = 10.0
    bin_name: str = "CDTracker-Drugs"


@dataclass(frozen=True)
class TrackerSettings:
    """Complete runtime settings for the stock ledger."""

    cache_url: str = "sqlite:///~/.cdtracker/cache.db"
    drugs_key: str = "cdtracker_drugs"
    remote_config_key: str = "cdtracker_jsonbin_config"
    log_level: str = "INFO"
    remote: RemoteStoreSettings = field(default_factory=RemoteStoreSettings)
