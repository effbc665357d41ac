"""
Kernel Boundary & Invariants Contract.

Tests that enforce the kernel's architectural boundaries:

1. stock_kernel/** may NOT import stock_services or stock_config. The
   kernel never depends upward.

2. stock_kernel/domain/** may NOT import ORM, DB or network packages.

3. The kernel invariants declaration is complete and non-empty.

These tests read source code via AST -- they cannot break anything.
"""

import ast
from pathlib import Path

from stock_kernel.invariants import (
    ALL_STOCK_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    StockInvariant,
)

ROOT = Path(__file__).resolve().parents[2]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    tree = ast.parse(filepath.read_text(), filename=str(filepath))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for filepath in _python_files(package):
        for lineno, module in _extract_imports(filepath):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {filepath.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestKernelNoUpwardDependencies:
    def test_kernel_files_exist(self):
        assert _python_files("stock_kernel")

    def test_kernel_does_not_import_forbidden_packages(self):
        violations = _violations("stock_kernel", FORBIDDEN_KERNEL_IMPORTS)
        assert not violations, (
            "Kernel boundary violation -- stock_kernel/** must not import "
            "upward packages:\n" + "\n".join(violations)
        )


class TestKernelDomainPurity:
    """stock_kernel/domain/** must not touch the database or the network."""

    FORBIDDEN_MODULES = (
        "sqlalchemy",
        "sqlite3",
        "requests",
        "stock_kernel.db",
        "stock_kernel.models",
        "stock_kernel.services",
    )

    def test_domain_no_io_imports(self):
        violations = _violations("stock_kernel/domain", self.FORBIDDEN_MODULES)
        assert not violations, (
            "Domain purity violation -- stock_kernel/domain/** must not "
            "import I/O packages:\n" + "\n".join(violations)
        )

    def test_selectors_no_io_imports(self):
        violations = _violations("stock_kernel/selectors", self.FORBIDDEN_MODULES)
        assert not violations


class TestInvariantsContract:
    def test_invariants_declared(self):
        assert len(ALL_STOCK_INVARIANTS) == len(StockInvariant) == 5

    def test_every_invariant_is_documented_in_the_code(self):
        """Each invariant name appears in at least one kernel module docstring."""
        sources = "\n".join(path.read_text() for path in _python_files("stock_kernel"))
        missing = [inv.name for inv in StockInvariant if sources.count(inv.name) < 2]
        assert not missing, f"Invariants not referenced outside the contract: {missing}"
