"""
Stock Kernel - controlled-drug stock ledger.

A local-first, append-only stock ledger with:
- Pure stock arithmetic with a self-correcting total
- One audit log entry per applied action
- Local cache persistence with optional remote whole-document sync
- Ordered fallback loading (remote, local cache, seed data)
"""

__version__ = "0.1.0"
