#!/usr/bin/env python3
"""
Command-line maintenance for the controlled-drug stock ledger.

Usage:
    python3 scripts/stock_ledger.py list
    python3 scripts/stock_ledger.py export [--output FILE]
    python3 scripts/stock_ledger.py import FILE
    python3 scripts/stock_ledger.py reset --yes
    python3 scripts/stock_ledger.py remote-status
    python3 scripts/stock_ledger.py remote-test BIN_ID API_KEY
    python3 scripts/stock_ledger.py remote-migrate API_KEY
    python3 scripts/stock_ledger.py remote-disconnect

Settings come from stock_config.get_active_settings() (``--config`` or
STOCK_LEDGER_CONFIG, then STOCK_LEDGER_* variables).

Exit codes: 0 success, 1 operation failed, 2 usage error.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from stock_config import get_active_settings
from stock_kernel.domain.stock_arithmetic import stock_status
from stock_kernel.exceptions import StockKernelError
from stock_kernel.logging_config import configure_logging
from stock_kernel.selectors import LedgerSelector
from stock_services import StockLedgerService


def _parse_args(argv):
    p = argparse.ArgumentParser(description="Controlled-drug stock ledger maintenance")
    p.add_argument("--config", type=Path, default=None, help="Settings YAML file")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Show drugs, most urgent first")

    export = sub.add_parser("export", help="Write the collection as JSON")
    export.add_argument("--output", type=Path, default=None, help="File to write (default: stdout)")

    imp = sub.add_parser("import", help="Replace the collection from an exported JSON file")
    imp.add_argument("file", type=Path)

    reset = sub.add_parser("reset", help="Replace the collection with the seed data")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")

    sub.add_parser("remote-status", help="Show the remote store configuration")

    test = sub.add_parser("remote-test", help="Test credentials without saving them")
    test.add_argument("bin_id")
    test.add_argument("api_key")

    migrate = sub.add_parser("remote-migrate", help="Copy local data to a new remote document")
    migrate.add_argument("api_key")

    sub.add_parser("remote-disconnect", help="Forget the remote store configuration")
    return p.parse_args(argv)


def _cmd_list(service, args):
    for drug in LedgerSelector(service.collection).drugs_by_priority():
        levels = drug.stock_levels
        print(
            f"{stock_status(levels).value:<10} {drug.name} {drug.strength} ({drug.presentation.value})"
            f"  available={levels.available} ood={levels.ood} min={levels.minimum_stock}"
        )
    return 0


def _cmd_export(service, args):
    text = service.export_data()
    if args.output is None:
        print(text)
    else:
        args.output.write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {len(service.collection)} drugs to {args.output}")
    return 0


def _cmd_import(service, args):
    imported = service.import_data(args.file.read_text(encoding="utf-8"))
    print(f"Imported {len(imported)} drugs")
    return _sync_exit(service)


def _cmd_reset(service, args):
    if not args.yes:
        print("Refusing to reset without --yes", file=sys.stderr)
        return 2
    seeded = service.reset_data()
    print(f"Reset to {len(seeded)} seed drugs")
    return _sync_exit(service)


def _cmd_remote_status(service, args):
    config = service.get_config()
    if config is None or not config.is_complete:
        print("Remote store: not configured (local cache only)")
    else:
        print(f"Remote store: bin {config.bin_id}")
    return 0


def _cmd_remote_test(service, args):
    check = service.test_connection(args.bin_id, args.api_key)
    if check:
        print("Connection OK")
        return 0
    print(f"Connection failed: {check.reason}", file=sys.stderr)
    return 1


def _cmd_remote_migrate(service, args):
    bin_id = service.migrate(args.api_key)
    print(f"Created remote bin {bin_id}; remote store configured")
    return 0


def _cmd_remote_disconnect(service, args):
    service.clear_config()
    print("Remote store configuration cleared")
    return 0


def _sync_exit(service):
    if service.sync_state.last_error:
        print(f"Saved locally; remote sync failed: {service.sync_state.last_error}", file=sys.stderr)
        return 1
    return 0


COMMANDS = {
    "list": _cmd_list,
    "export": _cmd_export,
    "import": _cmd_import,
    "reset": _cmd_reset,
    "remote-status": _cmd_remote_status,
    "remote-test": _cmd_remote_test,
    "remote-migrate": _cmd_remote_migrate,
    "remote-disconnect": _cmd_remote_disconnect,
}


def main(argv=None, service=None) -> int:
    args = _parse_args(argv)
    if service is None:
        settings = get_active_settings(args.config)
        configure_logging(level=settings.log_level, stream=sys.stderr)
        service = StockLedgerService.from_settings(settings)

    try:
        return COMMANDS[args.command](service, args)
    except (StockKernelError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
