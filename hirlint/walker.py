"""
hirlint/walker.py
═════════════════

Reference tree walker: visits a ``Crate`` in source order and invokes
each checker's callbacks at the matching node kinds.

  FnItem       check_fn(ITEM_FN)    → body expressions
  ImplItem     check_fn(METHOD)     → body expressions      (per method)
  TraitItem    check_trait_item     → check_fn(METHOD) and body if the
                                      method has a default body
  Expr         check_expr (pre-order) → children
  ClosureExpr  check_expr, check_fn(CLOSURE) → body

A callback that raises is logged and recorded as a ``CheckerFailure``;
the walk continues with the next checker.

License: MIT — same as hirlint.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from hirlint.checkers import Checker, CheckerFailure, LintContext
from hirlint.diagnostics import Span
from hirlint.hir import (
    ClosureExpr,
    Crate,
    Expr,
    FnDecl,
    FnItem,
    FnKind,
    ImplItem,
    TraitItem,
    sub_exprs,
)

_log = logging.getLogger(__name__)


class CrateWalker:
    """
    Walks one crate for one set of checkers.

    Usage
    -----
    >>> walker = CrateWalker(checkers, cx)
    >>> walker.walk()
    >>> walker.failures
    []
    """

    def __init__(self, checkers: Sequence[Checker], cx: LintContext) -> None:
        self.checkers = list(checkers)
        self.cx = cx
        self.failures: List[CheckerFailure] = []
        self.visited_exprs = 0
        self.visited_fns = 0

    def walk(self, crate: Optional[Crate] = None) -> None:
        crate = crate if crate is not None else self.cx.crate
        for item in crate.items:
            if isinstance(item, FnItem):
                self._visit_fn(FnKind.item_fn(item), item.decl, item.body, item.span, item.hir_id)
            elif isinstance(item, ImplItem):
                for method in item.items:
                    self._visit_fn(
                        FnKind.method(method.name), method.decl, method.body, method.span, method.hir_id,
                    )
            elif isinstance(item, TraitItem):
                for method in item.items:
                    self._dispatch("check_trait_item", method.span, method)
                    if method.body is not None:
                        self._visit_fn(
                            FnKind.method(method.name), method.decl, method.body, method.span, method.hir_id,
                        )

    # ── traversal ────────────────────────────────────────────────────

    def _visit_fn(
        self,
        kind: FnKind,
        decl: FnDecl,
        body: Optional[Expr],
        span: Span,
        hir_id: int,
    ) -> None:
        self.visited_fns += 1
        self._dispatch("check_fn", span, kind, decl, body, span, hir_id)
        if body is not None:
            self._visit_expr(body)

    def _visit_expr(self, expr: Expr) -> None:
        self.visited_exprs += 1
        self._dispatch("check_expr", expr.span, expr)
        if isinstance(expr, ClosureExpr):
            self._visit_fn(FnKind.closure(), expr.decl, expr.body, expr.span, expr.hir_id)
            return
        for child in sub_exprs(expr):
            self._visit_expr(child)

    def _dispatch(self, callback: str, span: Span, *args: Any) -> None:
        for checker in self.checkers:
            try:
                getattr(checker, callback)(self.cx, *args)
            except Exception as exc:
                # Graceful degradation: record the failure, don't crash the host
                _log.exception("checker %s failed in %s at %s", checker.name, callback, span)
                self.failures.append(CheckerFailure(
                    checker_name=checker.name,
                    callback=callback,
                    span=span,
                    error=f"{type(exc).__name__}: {exc}",
                ))


def walk_crate(crate: Crate, checkers: Sequence[Checker], cx: LintContext) -> List[CheckerFailure]:
    """Walk *crate* once; return any checker failures."""
    walker = CrateWalker(checkers, cx)
    walker.walk(crate)
    return walker.failures


__all__ = [
    "CrateWalker",
    "walk_crate",
]
