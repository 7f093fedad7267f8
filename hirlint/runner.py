"""
hirlint/runner.py
═════════════════

Runs the built-in lints over one crate and collects the results; doubles
as the command-line entry point.

Usage
-----
    # Lint a HIR dump with every built-in lint
    python -m hirlint crate.hir.json

    # Only the atomic ordering lint, GCC-style output
    python -m hirlint crate.hir.json --checkers atomic_ordering --output gcc

    # Pin the size threshold and silence a lint
    python -m hirlint crate.hir.json --large-data-size-min-limit 64 \\
        --allow large_data_pass_by_val

Exit codes
----------
    0   Success (warnings do not change the exit code).
    1   One or more diagnostics with severity ERROR were emitted.
    2   Infrastructure failure (missing file, bad dump, bad config).

License: MIT — same as hirlint.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, TextIO, Tuple

from hirlint.atomic_ordering import AtomicOrderingChecker
from hirlint.checkers import (
    CheckerFailure,
    CheckerRegistry,
    LintContext,
    LintRegistration,
    SuppressionManager,
)
from hirlint.config import LintConfig, load_config
from hirlint.diagnostics import Diagnostic, Severity
from hirlint.dump import load
from hirlint.errors import HirlintError
from hirlint.hir import Crate
from hirlint.large_data_pass_by_val import LargeDataPassByValChecker
from hirlint.oracle import TypeOracle
from hirlint.reporter import Reporter
from hirlint.walker import CrateWalker

_log = logging.getLogger(__name__)

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2

OUTPUT_FORMATS = ("human", "json", "gcc", "summary")


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — BUILT-IN LINT TABLE
# ═════════════════════════════════════════════════════════════════════════

BUILTIN_LINTS: Tuple[LintRegistration, ...] = (
    LintRegistration(
        lint_id=AtomicOrderingChecker.name,
        group=AtomicOrderingChecker.group,
        description=AtomicOrderingChecker.description,
        factory=AtomicOrderingChecker.from_config,
    ),
    LintRegistration(
        lint_id=LargeDataPassByValChecker.name,
        group=LargeDataPassByValChecker.group,
        description=LargeDataPassByValChecker.description,
        factory=LargeDataPassByValChecker.from_config,
    ),
)


def default_registry() -> CheckerRegistry:
    """A fresh registry holding every built-in lint."""
    return CheckerRegistry.from_table(BUILTIN_LINTS)


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — RUN RESULTS
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerRunResults:
    """
    Aggregate results from running a suite of checkers.

    Attributes
    ----------
    diagnostics            : All kept diagnostics, in traversal order
    diagnostics_by_checker : Diagnostics grouped by checker name
    failures               : Checker callbacks that raised
    stats                  : Timing and counting statistics
    checker_names          : Names of checkers that were run
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_checker: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    failures: List[CheckerFailure] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)
    checker_names: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity is Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity is Severity.WARNING)

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_lint(self, lint_id: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.lint_id == lint_id]

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.span.file == file]

    def to_json_lines(self) -> str:
        """One JSON object per diagnostic."""
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        """Format all diagnostics in GCC-style."""
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Checker run complete: {self.total_count} diagnostics "
            f"({self.warning_count} warnings, {self.stats.get('suppressed', 0)} suppressed)",
        ]
        for name in self.checker_names:
            count = len(self.diagnostics_by_checker.get(name, []))
            lines.append(f"  {name}: {count} findings")
        if self.failures:
            lines.append(f"  {len(self.failures)} checker failure(s):")
            for failure in self.failures:
                lines.append(
                    f"    {failure.checker_name}.{failure.callback} at {failure.span}: {failure.error}"
                )
        elapsed = self.stats.get("elapsed_ms", 0.0)
        lines.append(f"  elapsed: {elapsed:.1f}ms")
        return "\n".join(lines)


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — RUNNER
# ═════════════════════════════════════════════════════════════════════════

class CheckerRunner:
    """
    Runs a suite of checkers against one crate.

    Usage
    -----
    >>> runner = CheckerRunner(config=LintConfig(large_data_size_min_limit=64))
    >>> results = runner.run(crate, oracle)
    >>> print(results.summary())

    >>> # Or select specific lints:
    >>> results = runner.run(crate, oracle, checkers=["atomic_ordering"])

    Parameters for constructor
    ─────────────────────────
    registry    : CheckerRegistry — defaults to a fresh built-in registry
    suppressions: SuppressionManager — pre-loaded suppression rules
    config      : LintConfig — size limit and globally allowed lints
    options     : dict — free-form options exposed through the context
    """

    def __init__(
        self,
        registry: Optional[CheckerRegistry] = None,
        suppressions: Optional[SuppressionManager] = None,
        config: Optional[LintConfig] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.suppressions = suppressions if suppressions is not None else SuppressionManager()
        self.config = config if config is not None else LintConfig()
        self.options = options or {}
        for lint_id in self.config.allow:
            self.suppressions.add_global_suppression(lint_id)

    def run(
        self,
        crate: Crate,
        oracle: TypeOracle,
        checkers: Optional[Sequence[str]] = None,
        on_diagnostic: Optional[Callable[[Diagnostic], None]] = None,
    ) -> CheckerRunResults:
        """
        Walk *crate* once with the selected checkers.

        Parameters
        ----------
        crate         : the HIR to lint
        oracle        : type/layout/source answers for that HIR
        checkers      : lint ids to run (None = all enabled)
        on_diagnostic : called with each kept diagnostic as it is reported

        Returns
        -------
        CheckerRunResults
        """
        results = CheckerRunResults()
        instances = self.registry.instantiate(self.config, oracle.target, names=checkers)
        results.checker_names = [c.name for c in instances]

        cx = LintContext(
            crate=crate,
            oracle=oracle,
            suppressions=self.suppressions,
            options=self.options,
            on_diagnostic=on_diagnostic,
        )
        walker = CrateWalker(instances, cx)

        t0 = time.monotonic()
        walker.walk(crate)
        elapsed_ms = (time.monotonic() - t0) * 1000.0

        results.diagnostics.extend(cx.diagnostics)
        for diag in cx.diagnostics:
            results.diagnostics_by_checker[diag.checker_name].append(diag)
        results.failures.extend(walker.failures)
        results.stats.update(
            elapsed_ms=elapsed_ms,
            suppressed=cx.suppressed,
            visited_fns=walker.visited_fns,
            visited_exprs=walker.visited_exprs,
        )

        _log.info(
            "linted crate %s with %d checker(s): %d diagnostic(s), %d suppressed, %.1fms",
            crate.name, len(instances), results.total_count, cx.suppressed, elapsed_ms,
        )
        if walker.failures:
            _log.warning("%d checker callback(s) failed", len(walker.failures))
        return results


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — CONVENIENCE ENTRY POINT
# ═════════════════════════════════════════════════════════════════════════

def run_dump(
    dump_file: str,
    checkers: Optional[Sequence[str]] = None,
    output: str = "human",
    allow: Optional[Sequence[str]] = None,
    config_path: Optional[str] = None,
    size_limit: Optional[int] = None,
    stream: Optional[TextIO] = None,
) -> int:
    """
    Load a HIR dump, lint it, and write the diagnostics.

    Parameters
    ----------
    dump_file   : Path to the JSON dump
    checkers    : Lint ids to run (None = all)
    output      : "human", "json", "gcc" or "summary"
    allow       : Lint ids to suppress globally, on top of hirlint.toml
    config_path : Explicit hirlint.toml (None = discover)
    size_limit  : Overrides ``large-data-size-min-limit``
    stream      : Destination (default: stdout)

    Returns
    -------
    Exit code (see module docstring)
    """
    from hirlint import __version__

    out = stream if stream is not None else sys.stdout
    try:
        config = load_config(Path(config_path) if config_path else None)
        config = config.with_overrides(
            large_data_size_min_limit=size_limit,
            allow=tuple(allow or ()),
        )
        loaded = load(dump_file)
    except HirlintError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA

    runner = CheckerRunner(suppressions=loaded.suppressions, config=config)

    if output == "human":
        with Reporter(
            stream=out,
            tool_version=__version__,
            sources=loaded.oracle.sources,
        ) as reporter:
            results = runner.run(
                loaded.crate, loaded.oracle, checkers=checkers, on_diagnostic=reporter.emit,
            )
    else:
        results = runner.run(loaded.crate, loaded.oracle, checkers=checkers)
        if output == "json":
            text = results.to_json_lines()
        elif output == "gcc":
            text = results.to_gcc_format()
        else:
            text = results.summary()
        if text:
            out.write(text + "\n")

    return EXIT_ERROR if results.error_count > 0 else EXIT_OK


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — COMMAND LINE
# ═════════════════════════════════════════════════════════════════════════

def _configure_logging(verbosity: int) -> None:
    """Set up the ``hirlint`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    root = logging.getLogger("hirlint")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        root.addHandler(handler)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Lint a HIR dump for atomic ordering misuse and large by-value arguments",
        prog="hirlint",
    )
    parser.add_argument("dump_file", nargs="?", help="Path to the JSON HIR dump")
    parser.add_argument(
        "--checkers", nargs="*", default=None,
        help="Lint ids to run (default: all)",
    )
    parser.add_argument(
        "--output", choices=OUTPUT_FORMATS,
        default="human", help="Output format",
    )
    parser.add_argument(
        "--allow", nargs="*", default=None,
        help="Lint ids to suppress",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to hirlint.toml (default: discover from the working directory)",
    )
    parser.add_argument(
        "--large-data-size-min-limit", type=int, default=None, dest="size_limit",
        help="Byte threshold for large_data_pass_by_val",
    )
    parser.add_argument(
        "--list-checkers", action="store_true",
        help="List available lints and exit",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase log verbosity (-v INFO, -vv DEBUG)",
    )
    return parser


def _list_checkers(stream: TextIO) -> None:
    for entry in BUILTIN_LINTS:
        stream.write(f"  {entry.lint_id:25s} {entry.description}\n")
        stream.write(f"  {'':25s} group: {entry.group}\n")
        stream.write("\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the hirlint CLI and return the exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if args.list_checkers:
        _list_checkers(sys.stdout)
        return EXIT_OK

    if args.dump_file is None:
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    return run_dump(
        dump_file=args.dump_file,
        checkers=args.checkers,
        output=args.output,
        allow=args.allow,
        config_path=args.config,
        size_limit=args.size_limit,
    )


def _main() -> None:
    """Console-script entry point."""
    sys.exit(main())


__all__ = [
    "EXIT_OK",
    "EXIT_ERROR",
    "EXIT_INFRA",
    "BUILTIN_LINTS",
    "default_registry",
    "CheckerRunResults",
    "CheckerRunner",
    "run_dump",
    "main",
]
