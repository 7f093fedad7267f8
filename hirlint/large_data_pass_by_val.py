"""
hirlint/large_data_pass_by_val.py
═════════════════════════════════

Lint: large_data_pass_by_val  (group: perf)

**What it does:** Checks for functions taking arguments by value, where
the argument type is copyable and large enough that passing it by
reference would be cheaper.

**Why is this bad?** Passing large immutable structures by value copies
the underlying data on every call.

**Known problems:** The default limit depends on the target's pointer
width (twice the word size: 16 bytes on 64-bit targets, 8 on 32-bit).
Set ``large-data-size-min-limit`` in hirlint.toml to pin it for a
project.

**Example:**

    // Bad
    fn foo(v: BigStruct) {}

    // Better
    fn foo(v: &BigStruct) {}

Trait implementations are skipped: the trait's own declaration is where
the signature is reported, once.

License: MIT — same as hirlint.
"""

from __future__ import annotations

import logging
from typing import ClassVar, FrozenSet, Optional

from hirlint.checkers import Checker, LintContext
from hirlint.config import LintConfig
from hirlint.diagnostics import Applicability, Span, Suggestion
from hirlint.hir import (
    DEFAULT_ABI,
    Expr,
    FnDecl,
    FnKind,
    FnKindTag,
    ImplItem,
    TraitItem,
    TraitMethod,
)
from hirlint.oracle import TargetInfo

_log = logging.getLogger(__name__)

LINT_ID = "large_data_pass_by_val"
PROC_MACRO_DERIVE = "proc_macro_derive"


class LargeDataPassByValChecker(Checker):
    """
    Detects copyable aggregates larger than ``limit`` bytes passed by value.

    Parameters
    ----------
    limit : byte threshold; a parameter is reported when its size is
            strictly greater
    """

    name: ClassVar[str] = LINT_ID
    description: ClassVar[str] = "functions taking large copyable arguments by value"
    lint_ids: ClassVar[FrozenSet[str]] = frozenset({LINT_ID})
    group: ClassVar[str] = "perf"

    def __init__(self, limit: int) -> None:
        if limit < 0:
            raise ValueError(f"size limit must be non-negative, got {limit}")
        self.limit = limit

    @classmethod
    def from_config(cls, config: LintConfig, target: TargetInfo) -> LargeDataPassByValChecker:
        return cls(config.size_limit(target))

    # ── visitor callbacks ────────────────────────────────────────────

    def check_trait_item(self, cx: LintContext, item: TraitMethod) -> None:
        if item.span.from_expansion:
            return
        self._check_poly_fn(cx, item.hir_id, item.decl, None)

    def check_fn(
        self,
        cx: LintContext,
        kind: FnKind,
        decl: FnDecl,
        body: Optional[Expr],
        span: Span,
        hir_id: int,
    ) -> None:
        if span.from_expansion:
            return

        if kind.tag is FnKindTag.ITEM_FN:
            if kind.abi != DEFAULT_ABI:
                return
            for attr in kind.attrs:
                if attr.has_meta_list and attr.name == PROC_MACRO_DERIVE:
                    return
        elif kind.tag is not FnKindTag.METHOD:
            return

        # Trait impls repeat the trait's signature; trait bodies are
        # covered by check_trait_item.
        parent = cx.parent_item(hir_id)
        if isinstance(parent, TraitItem) or (isinstance(parent, ImplItem) and not parent.is_inherent):
            return

        self._check_poly_fn(cx, hir_id, decl, span)

    # ── per-parameter check ──────────────────────────────────────────

    def _check_poly_fn(
        self,
        cx: LintContext,
        hir_id: int,
        decl: FnDecl,
        span: Optional[Span],
    ) -> None:
        for param, ty in zip(decl.params, cx.oracle.fn_inputs(hir_id)):
            # All spans generated from a proc-macro invocation are the same.
            # This abandons the whole declaration, not just this parameter.
            if span is not None and span == param.span:
                _log.debug("declaration %d shares a span with its parameter; skipped", hir_id)
                return
            if not ty.is_adt or not cx.oracle.is_copy(ty):
                continue
            size = cx.oracle.layout_size(ty)
            if size is None or size <= self.limit:
                continue

            if param.is_self:
                replacement = "&self"
            else:
                replacement = "&" + cx.oracle.snippet(param.span, "_")
            self._emit(
                cx,
                LINT_ID,
                param.span,
                f"this argument ({size} byte) is passed by value, but would be more "
                f"efficient if passed by ref (limit: {self.limit} byte)",
                suggestion=Suggestion(
                    message="consider passing by ref instead",
                    replacement=replacement,
                    applicability=Applicability.UNSPECIFIED,
                ),
            )


__all__ = [
    "LINT_ID",
    "LargeDataPassByValChecker",
]
