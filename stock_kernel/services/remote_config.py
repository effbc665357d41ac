"""
Remote store configuration -- the credential pair kept in the local cache.

The configuration is runtime state, not file configuration: it is absent by
default, set explicitly or by a migration, and cleared by a disconnect.
Clearing it forgets the local reference only; remote data is untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from stock_kernel.exceptions import ConfigIncompleteError
from stock_kernel.logging_config import get_logger
from stock_kernel.services.local_cache import LocalCache

logger = get_logger("services.remote_config")

DEFAULT_CONFIG_KEY = "cdtracker_jsonbin_config"


@dataclass(frozen=True)
class RemoteConfig:
    """Identifier of the remote document and the secret that unlocks it."""

    bin_id: str
    api_key: str

    @property
    def missing_fields(self) -> list[str]:
        missing = []
        if not self.api_key:
            missing.append("api_key")
        if not self.bin_id:
            missing.append("bin_id")
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields

    def require_complete(self) -> RemoteConfig:
        if self.missing_fields:
            raise ConfigIncompleteError(self.missing_fields)
        return self

    def to_dict(self) -> dict[str, str]:
        return {"binId": self.bin_id, "apiKey": self.api_key}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemoteConfig:
        return cls(
            bin_id=str(data.get("binId") or ""),
            api_key=str(data.get("apiKey") or ""),
        )

    def __repr__(self) -> str:
        # Never render the secret
        return f"RemoteConfig(bin_id={self.bin_id!r}, api_key='***')"


class RemoteConfigStore:
    """Reads and writes the RemoteConfig entry of the local cache."""

    def __init__(self, cache: LocalCache, key: str = DEFAULT_CONFIG_KEY):
        self._cache = cache
        self._key = key

    def get(self) -> RemoteConfig | None:
        """Stored configuration, or None when absent or unreadable."""
        try:
            data = self._cache.get_json(self._key)
        except ValueError:
            logger.warning("remote_config_unreadable", extra={"key": self._key})
            return None
        if not isinstance(data, dict):
            return None
        return RemoteConfig.from_dict(data)

    def set(self, config: RemoteConfig) -> RemoteConfig:
        """
        Persist ``config``.

        Raises:
            ConfigIncompleteError: a credential or the identifier is empty.
        """
        config = RemoteConfig(bin_id=config.bin_id.strip(), api_key=config.api_key.strip())
        config.require_complete()
        self._cache.set_json(self._key, config.to_dict())
        logger.info("remote_config_saved", extra={"bin_id": config.bin_id})
        return config

    def clear(self) -> None:
        if self._cache.remove(self._key):
            logger.info("remote_config_cleared")

    def is_configured(self) -> bool:
        config = self.get()
        return config is not None and config.is_complete
