"""
stock_config -- single public entrypoint for ledger settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  No other component reads settings files or
    STOCK_LEDGER_* environment variables directly.

Resolution order:
    1. ``path`` argument, else the file named by ``STOCK_LEDGER_CONFIG``,
       else the packaged ``defaults.yaml``.
    2. STOCK_LEDGER_* environment overrides on top of the file.

Failure modes:
    - ``FileNotFoundError`` -- the named settings file does not exist.
    - ``ValueError`` -- invalid timeout or log level.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from stock_config.loader import load_settings
from stock_config.schema import RemoteStoreSettings, TrackerSettings

_logger = logging.getLogger("stock_kernel.config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"
CONFIG_PATH_ENV = "STOCK_LEDGER_CONFIG"


def get_active_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> TrackerSettings:
    """Resolve and return the active TrackerSettings."""
    environ = os.environ if environ is None else environ
    source = path or (Path(environ[CONFIG_PATH_ENV]) if environ.get(CONFIG_PATH_ENV) else DEFAULTS_PATH)
    settings = load_settings(Path(source), environ)
    _logger.info(
        "settings_loaded",
        extra={
            "settings_path": str(source),
            "cache_url": settings.cache_url,
            "remote_base_url": settings.remote.base_url,
        },
    )
    return settings


__all__ = [
    "DEFAULTS_PATH",
    "RemoteStoreSettings",
    "TrackerSettings",
    "get_active_settings",
]
