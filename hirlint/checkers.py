"""
hirlint/checkers.py
═══════════════════

Checker framework: the base class every lint derives from, the context
handed to each callback, suppression handling, and the registry that
turns a static table of lint registrations into checker instances.

Architecture
────────────

  ┌──────────────────────────────────────────────────────────┐
  │                    walker.walk_crate                     │
  │       items ─► check_fn / check_trait_item               │
  │       exprs ─► check_expr                                │
  └───────────────┬──────────────────────────────────────────┘
                  │ one callback per node, per checker
  ┌───────────────▼──────────┐   ┌──────────────────────────┐
  │ AtomicOrderingChecker    │   │ LargeDataPassByValChecker│
  └───────────────┬──────────┘   └─────────────┬────────────┘
                  │  queries                   │
  ┌───────────────▼────────────────────────────▼────────────┐
  │         LintContext  (oracle, crate, sink)              │
  │   report() ─► SuppressionManager ─► diagnostics list    │
  │                                  └► on_diagnostic hook  │
  └─────────────────────────────────────────────────────────┘

Checkers hold configuration only.  Everything a run produces lives in
its ``LintContext``, so one checker instance can serve many runs.

License: MIT — same as hirlint.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from hirlint.config import LintConfig
from hirlint.diagnostics import Diagnostic, Severity, Span, Suggestion
from hirlint.hir import Crate, Expr, FnDecl, FnKind, Item, TraitMethod
from hirlint.oracle import TargetInfo, TypeOracle

_log = logging.getLogger(__name__)

ALL_LINTS = "*"


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

class SuppressionManager:
    """
    Manages diagnostic suppressions from multiple sources.

    Sources:
      1. Line-level entries supplied by the host (its ``allow`` attributes)
      2. File-level suppressions (path patterns)
      3. Global suppressions (command line or ``allow`` in hirlint.toml)

    Usage
    -----
    >>> sm = SuppressionManager()
    >>> sm.add_inline_suppression("atomic_ordering", "src/lib.rs", 12)
    >>> sm.add_file_suppression("large_data_pass_by_val", "benches/*")
    >>> sm.add_global_suppression("atomic_ordering")
    >>> if not sm.is_suppressed(diagnostic):
    ...     emit(diagnostic)
    """

    def __init__(self) -> None:
        # {(file, line)} → lint ids suppressed at that location
        self._inline: Dict[Tuple[str, int], Set[str]] = defaultdict(set)
        # file pattern → lint ids
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        self._global: Set[str] = set()

    def add_inline_suppression(self, lint_id: str, file: str, line: int) -> None:
        """Suppress ``lint_id`` on ``line`` of ``file`` (and the line after it)."""
        self._inline[(file, line)].add(lint_id)

    def add_file_suppression(self, lint_id: str, file_pattern: str) -> None:
        """Suppress ``lint_id`` in files matching ``file_pattern``."""
        self._file_level[file_pattern].add(lint_id)

    def add_global_suppression(self, lint_id: str) -> None:
        """Globally suppress ``lint_id``."""
        self._global.add(lint_id)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        """Check whether a diagnostic should be suppressed."""
        lid = diag.lint_id

        if lid in self._global or ALL_LINTS in self._global:
            return True

        span = diag.span

        # Inline (exact line match, or line-1 for a preceding-line allow)
        for line_offset in (0, 1):
            ids = self._inline.get((span.file, span.line - line_offset), set())
            if lid in ids or ALL_LINTS in ids:
                return True

        for pattern, ids in self._file_level.items():
            if lid in ids or ALL_LINTS in ids:
                if pattern == span.file or span.file.endswith(pattern):
                    return True
                if fnmatch(span.file, pattern):
                    return True

        return False

    def filter_diagnostics(self, diagnostics: Iterable[Diagnostic]) -> List[Diagnostic]:
        """Return only non-suppressed diagnostics."""
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — LINT CONTEXT
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class LintContext:
    """
    Shared context passed to every checker callback during one run.

    Attributes
    ----------
    crate         : the HIR being walked (answers parent lookups)
    oracle        : TypeOracle for types, layouts and source text
    suppressions  : SuppressionManager
    options       : user-provided options dict
    diagnostics   : everything reported and not suppressed, in order
    suppressed    : number of diagnostics dropped by suppressions
    on_diagnostic : optional hook called with each kept diagnostic
    """
    crate: Crate
    oracle: TypeOracle
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    options: Dict[str, Any] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    suppressed: int = 0
    on_diagnostic: Optional[Callable[[Diagnostic], None]] = None

    def parent_item(self, hir_id: int) -> Optional[Item]:
        return self.crate.parent_item(hir_id)

    def get_option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)

    def report(self, diag: Diagnostic) -> None:
        """Accept a diagnostic from a checker."""
        if self.suppressions.is_suppressed(diag):
            self.suppressed += 1
            _log.debug("suppressed %s at %s", diag.lint_id, diag.span)
            return
        self.diagnostics.append(diag)
        if self.on_diagnostic is not None:
            self.on_diagnostic(diag)


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — CHECKER BASE CLASS
# ═════════════════════════════════════════════════════════════════════════

class Checker:
    """
    Base class for all lint checkers.

    Visitor callbacks
    ─────────────────
      - ``check_expr(cx, expr)``                          every expression
      - ``check_fn(cx, kind, decl, body, span, hir_id)``  every fn body
      - ``check_trait_item(cx, item)``                    every trait method

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``lint_ids``
      - Override whichever callbacks the lint needs; the rest are no-ops
      - Report through ``self._emit``; never keep per-run state
    """

    name: ClassVar[str] = "base-checker"
    description: ClassVar[str] = ""
    lint_ids: ClassVar[FrozenSet[str]] = frozenset()
    group: ClassVar[str] = ""
    default_severity: ClassVar[Severity] = Severity.WARNING

    def check_expr(self, cx: LintContext, expr: Expr) -> None:
        pass

    def check_fn(
        self,
        cx: LintContext,
        kind: FnKind,
        decl: FnDecl,
        body: Optional[Expr],
        span: Span,
        hir_id: int,
    ) -> None:
        pass

    def check_trait_item(self, cx: LintContext, item: TraitMethod) -> None:
        pass

    def _emit(
        self,
        cx: LintContext,
        lint_id: str,
        span: Span,
        message: str,
        help: Optional[str] = None,
        suggestion: Optional[Suggestion] = None,
    ) -> None:
        """Helper to create and report a diagnostic."""
        cx.report(Diagnostic(
            lint_id=lint_id,
            message=message,
            span=span,
            severity=self.default_severity,
            help=help,
            suggestion=suggestion,
            checker_name=self.name,
        ))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


@dataclass(frozen=True)
class CheckerFailure:
    """A checker callback that raised; recorded instead of aborting the run."""
    checker_name: str
    callback: str
    span: Span
    error: str


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — CHECKER REGISTRY
# ═════════════════════════════════════════════════════════════════════════

CheckerFactory = Callable[[LintConfig, TargetInfo], Checker]


class LintRegistration(NamedTuple):
    """One row of the static lint table."""
    lint_id: str
    group: str
    description: str
    factory: CheckerFactory


class CheckerRegistry:
    """
    Registry of available lints, built from a registration table.

    Usage
    -----
    >>> registry = CheckerRegistry.from_table(BUILTIN_LINTS)
    >>> registry.disable("atomic_ordering")
    >>> checkers = registry.instantiate(LintConfig(), TargetInfo(64))
    """

    def __init__(self) -> None:
        self._lints: Dict[str, LintRegistration] = {}
        self._disabled: Set[str] = set()

    @classmethod
    def from_table(cls, table: Sequence[LintRegistration]) -> CheckerRegistry:
        registry = cls()
        for entry in table:
            registry.register(entry)
        return registry

    def register(self, entry: LintRegistration) -> None:
        if entry.lint_id in self._lints:
            raise ValueError(f"lint {entry.lint_id!r} is already registered")
        self._lints[entry.lint_id] = entry

    def unregister(self, lint_id: str) -> None:
        self._lints.pop(lint_id, None)

    def disable(self, lint_id: str) -> None:
        self._disabled.add(lint_id)

    def enable(self, lint_id: str) -> None:
        self._disabled.discard(lint_id)

    def get_all(self) -> List[LintRegistration]:
        return list(self._lints.values())

    def get_enabled(self) -> List[LintRegistration]:
        return [
            entry for lint_id, entry in self._lints.items()
            if lint_id not in self._disabled
        ]

    def get_by_name(self, lint_id: str) -> Optional[LintRegistration]:
        return self._lints.get(lint_id)

    def filter_by_group(self, group: str) -> List[LintRegistration]:
        return [entry for entry in self._lints.values() if entry.group == group]

    def instantiate(
        self,
        config: LintConfig,
        target: TargetInfo,
        names: Optional[Sequence[str]] = None,
    ) -> List[Checker]:
        """
        Build checker instances, in registration order.

        ``names`` selects lints explicitly (unknown names are skipped
        with a warning); ``None`` means every enabled lint.
        """
        if names is None:
            entries = self.get_enabled()
        else:
            entries = []
            for name in names:
                entry = self.get_by_name(name)
                if entry is None:
                    _log.warning("unknown lint %r ignored", name)
                    continue
                entries.append(entry)
        return [entry.factory(config, target) for entry in entries]

    @property
    def names(self) -> List[str]:
        return sorted(self._lints.keys())


__all__ = [
    "ALL_LINTS",
    "SuppressionManager",
    "LintContext",
    "Checker",
    "CheckerFailure",
    "CheckerFactory",
    "LintRegistration",
    "CheckerRegistry",
]
