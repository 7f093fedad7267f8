"""hirlint — lints over a compiler's high-level IR.

Two lints ship with the package:

atomic_ordering
    ``load``/``store`` on a standard atomic type with an ordering the
    operation rejects at run time (store with ``Acquire``/``AcqRel``,
    load with ``Release``/``AcqRel``).

large_data_pass_by_val
    Function parameters whose type is a copyable aggregate larger than
    a byte threshold (default: twice the target's pointer size).

Submodules
----------
hir
    The IR the lints walk: items, declarations, expressions, spans.
oracle
    ``TypeOracle`` contract and the table-backed ``TableOracle``.
ordering
    Atomic type catalog and the per-operation ordering validity table.
checkers
    ``Checker`` base class, ``LintContext``, suppressions, registry.
walker
    Source-order traversal dispatching to checker callbacks.
dump
    JSON dump → ``Crate`` + ``TableOracle``.
config
    ``hirlint.toml`` discovery and validation.
reporter
    Terminal, plain, SARIF and HTML rendering.
runner
    ``CheckerRunner`` and the ``hirlint`` command line.

Usage
-----
Command-line::

    python -m hirlint crate.hir.json
    python -m hirlint crate.hir.json --output gcc --allow atomic_ordering

Programmatic::

    from hirlint.dump import load
    from hirlint.runner import CheckerRunner

    loaded = load("crate.hir.json")
    results = CheckerRunner(suppressions=loaded.suppressions).run(
        loaded.crate, loaded.oracle)
    print(results.summary())
"""

from __future__ import annotations

import logging

__version__: str = "0.1.0"

_log = logging.getLogger(__name__)

from hirlint.atomic_ordering import AtomicOrderingChecker  # noqa: E402
from hirlint.checkers import (  # noqa: E402
    Checker,
    CheckerRegistry,
    LintContext,
    SuppressionManager,
)
from hirlint.config import LintConfig, load_config  # noqa: E402
from hirlint.diagnostics import (  # noqa: E402
    Applicability,
    Diagnostic,
    Severity,
    Span,
    Suggestion,
)
from hirlint.errors import ConfigError, DumpError, HirlintError  # noqa: E402
from hirlint.large_data_pass_by_val import LargeDataPassByValChecker  # noqa: E402
from hirlint.oracle import SourceMap, TableOracle, TargetInfo, TypeOracle  # noqa: E402
from hirlint.runner import BUILTIN_LINTS, CheckerRunner, CheckerRunResults  # noqa: E402

__all__: list[str] = [
    # Diagnostic model
    "Applicability",
    "Diagnostic",
    "Severity",
    "Span",
    "Suggestion",
    # Errors
    "HirlintError",
    "ConfigError",
    "DumpError",
    # Oracle
    "SourceMap",
    "TableOracle",
    "TargetInfo",
    "TypeOracle",
    # Checker framework
    "Checker",
    "CheckerRegistry",
    "LintContext",
    "SuppressionManager",
    "LintConfig",
    "load_config",
    # Lints
    "AtomicOrderingChecker",
    "LargeDataPassByValChecker",
    # Runner
    "BUILTIN_LINTS",
    "CheckerRunner",
    "CheckerRunResults",
]
