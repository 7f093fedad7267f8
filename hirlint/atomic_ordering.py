"""
hirlint/atomic_ordering.py
══════════════════════════

Lint: atomic_ordering  (group: correctness)

Flags ``load`` / ``store`` calls on the standard atomic types whose
ordering argument is one the operation rejects at run time:

    x.store(1, Ordering::Acquire);   // store cannot acquire
    x.load(Ordering::AcqRel);        // load cannot release

Only orderings spelled directly as an ``Ordering`` path are inspected.
An ordering held in a variable or returned by a function is not
followed; such calls are never reported.

License: MIT — same as hirlint.
"""

from __future__ import annotations

import logging
from typing import ClassVar, FrozenSet

from hirlint.checkers import Checker, LintContext
from hirlint.config import LintConfig
from hirlint.hir import Expr, MethodCallExpr, PathExpr
from hirlint.oracle import TargetInfo
from hirlint.ordering import VALIDITY_RULES, OperationKind, OrderingVariant, is_atomic_identity

_log = logging.getLogger(__name__)

LINT_ID = "atomic_ordering"


class AtomicOrderingChecker(Checker):
    """
    Detects invalid memory orderings passed to atomic load/store.

    The receiver must resolve to one of the catalog atomic types by
    exact identity; swap, fetch_* and compare_exchange are not checked.
    """

    name: ClassVar[str] = LINT_ID
    description: ClassVar[str] = "Use of an incorrect atomic ordering will cause panic"
    lint_ids: ClassVar[FrozenSet[str]] = frozenset({LINT_ID})
    group: ClassVar[str] = "correctness"

    @classmethod
    def from_config(cls, config: LintConfig, target: TargetInfo) -> AtomicOrderingChecker:
        return cls()

    def check_expr(self, cx: LintContext, expr: Expr) -> None:
        if not isinstance(expr, MethodCallExpr) or not expr.args:
            return

        receiver_ty = cx.oracle.expr_ty(expr.args[0])
        if receiver_ty is None or not is_atomic_identity(cx.oracle.type_identity(receiver_ty)):
            return

        op = OperationKind.from_method(expr.method)
        if op is None or len(expr.args) <= op.ordering_index:
            return

        ordering_arg = expr.args[op.ordering_index]
        if not isinstance(ordering_arg, PathExpr):
            return
        variant = OrderingVariant.from_segments(ordering_arg.segments)
        if variant is None:
            return

        rule = VALIDITY_RULES[op]
        if rule.allows(variant):
            return

        _log.debug("%s with %s at %s", op.method, variant.value, ordering_arg.span)
        written = cx.oracle.snippet(ordering_arg.span, "::".join(ordering_arg.segments))
        self._emit(
            cx,
            LINT_ID,
            ordering_arg.span,
            f"`{written}` is not a valid `atomic::Ordering` for `{op.method}`",
            help=rule.help_text(),
        )


__all__ = [
    "LINT_ID",
    "AtomicOrderingChecker",
]
