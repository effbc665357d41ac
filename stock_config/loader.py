"""
Settings Loader (``stock_config.loader``).

Responsibility
--------------
Loads a YAML settings file, parses it into the frozen
``stock_config.schema`` dataclasses and applies environment overrides.
Callers should use ``stock_config.get_active_settings()`` instead of this
module.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Non-numeric timeout  -> ``ValueError``.
* Unknown log level  -> ``ValueError``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from stock_config.schema import RemoteStoreSettings, TrackerSettings

# Environment variable -> (section, key); section None means top level
ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "STOCK_LEDGER_CACHE_URL": (None, "cache_url"),
    "STOCK_LEDGER_LOG_LEVEL": (None, "log_level"),
    "STOCK_LEDGER_REMOTE_BASE_URL": ("remote", "base_url"),
    "STOCK_LEDGER_REMOTE_TIMEOUT": ("remote", "timeout_seconds"),
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Return a copy of ``data`` with STOCK_LEDGER_* variables applied."""
    merged = dict(data)
    merged["remote"] = dict(data.get("remote") or {})
    for var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if not value:
            continue
        target = merged[section] if section else merged
        target[key] = value
    return merged


def parse_remote(data: dict[str, Any]) -> RemoteStoreSettings:
    defaults = RemoteStoreSettings()
    timeout = float(data.get("timeout_seconds", defaults.timeout_seconds))
    if timeout <= 0:
        raise ValueError(f"remote.timeout_seconds must be positive, got {timeout}")
    return RemoteStoreSettings(
        base_url=str(data.get("base_url") or defaults.base_url),
        timeout_seconds=timeout,
        bin_name=str(data.get("bin_name") or defaults.bin_name),
    )


def parse_settings(data: dict[str, Any]) -> TrackerSettings:
    """Parse a ``TrackerSettings`` from a dict, defaulting absent keys."""
    defaults = TrackerSettings()
    log_level = str(data.get("log_level") or defaults.log_level).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Unknown log level: {log_level}")
    return TrackerSettings(
        cache_url=str(data.get("cache_url") or defaults.cache_url),
        drugs_key=str(data.get("drugs_key") or defaults.drugs_key),
        remote_config_key=str(data.get("remote_config_key") or defaults.remote_config_key),
        log_level=log_level,
        remote=parse_remote(data.get("remote") or {}),
    )


def load_settings(path: Path, environ: Mapping[str, str] | None = None) -> TrackerSettings:
    environ = os.environ if environ is None else environ
    return parse_settings(apply_env_overrides(load_yaml_file(path), environ))
