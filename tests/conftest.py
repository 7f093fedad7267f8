# tests/conftest.py
"""
Shared fixtures and HIR builders for hirlint tests.
"""

import itertools

import pytest

from hirlint.checkers import LintContext, SuppressionManager
from hirlint.diagnostics import Span
from hirlint.hir import (
    Attribute,
    BlockExpr,
    ClosureExpr,
    Crate,
    FnDecl,
    FnItem,
    ImplItem,
    LitExpr,
    MethodCallExpr,
    Param,
    PathExpr,
    TraitItem,
    TraitMethod,
    Ty,
    TyKind,
)
from hirlint.oracle import TableOracle, TargetInfo
from hirlint.ordering import ATOMIC_MODULE

LIB_RS = "src/lib.rs"


class HirBuilder:
    """
    Builds HIR nodes and fills a ``TableOracle`` alongside them.

    Every node gets a fresh hir_id.  The builder's file is registered
    with empty text, so snippets fall back to their defaults unless a
    test calls ``source``.
    """

    def __init__(self, pointer_width=64, file=LIB_RS):
        self.oracle = TableOracle(target=TargetInfo(pointer_width))
        self.file = file
        self.oracle.sources.add(file, "")
        self._ids = itertools.count(1)

    def next_id(self):
        return next(self._ids)

    def source(self, text):
        self.oracle.sources.add(self.file, text)

    def span(self, line=1, column=1, width=1, expansion=None):
        return Span(self.file, line, column, line, column + width, expansion)

    # ── types ────────────────────────────────────────────────────────

    def adt(self, path, copy=False, size=None):
        ty = Ty(TyKind.ADT, path=path, name=path.rsplit("::", 1)[-1])
        return self.oracle.declare_type(ty, copy=copy, size=size)

    def atomic(self, name="AtomicBool"):
        return self.adt(f"{ATOMIC_MODULE}::{name}", copy=False, size=8)

    # ── expressions ──────────────────────────────────────────────────

    def path(self, *segments, line=1, column=1, ty=None):
        expr = PathExpr(
            self.next_id(),
            self.span(line, column, len("::".join(segments))),
            tuple(segments),
        )
        if ty is not None:
            self.oracle.set_expr_ty(expr, ty)
        return expr

    def lit(self, value, line=1, column=1):
        return LitExpr(self.next_id(), self.span(line, column, len(str(value))), value)

    def method_call(self, method, *args, line=1):
        return MethodCallExpr(self.next_id(), self.span(line, 1, 40), method, tuple(args))

    def atomic_call(self, receiver_ty, method, ordering, line=1):
        """``x.store(1, <ordering>)`` or ``x.load(<ordering>)``."""
        receiver = self.path("x", line=line, column=5, ty=receiver_ty)
        ordering_col = 16 if method == "store" else 12
        ordering_expr = self.path(*ordering.split("::"), line=line, column=ordering_col)
        if method == "store":
            return self.method_call(method, receiver, self.lit(1, line, 13), ordering_expr, line=line)
        return self.method_call(method, receiver, ordering_expr, line=line)

    def block(self, *exprs, line=1):
        return BlockExpr(self.next_id(), self.span(line, 1, 2), tuple(exprs))

    def closure(self, params, body, line=1):
        hir_id = self.next_id()
        self.oracle.set_fn_inputs(hir_id, [ty for _, ty in params])
        return ClosureExpr(hir_id, self.span(line, 1, 10), FnDecl(tuple(p for p, _ in params)), body)

    # ── signatures and items ─────────────────────────────────────────

    def param(self, ty, line=1, column=12, width=1, is_self=False, name="arg", expansion=None):
        return Param(self.span(line, column, width, expansion), is_self=is_self, name=name), ty

    def _decl(self, hir_id, params):
        self.oracle.set_fn_inputs(hir_id, [ty for _, ty in params])
        return FnDecl(tuple(p for p, _ in params))

    def fn(self, name, params=(), body=None, line=1, abi="Rust", attrs=(), span=None):
        hir_id = self.next_id()
        return FnItem(
            hir_id=hir_id,
            name=name,
            span=span if span is not None else self.span(line, 1, 30),
            decl=self._decl(hir_id, params),
            body=body,
            abi=abi,
            attrs=tuple(attrs),
        )

    def impl(self, *methods, self_ty="Foo", trait_ref=None, line=1):
        return ImplItem(self.next_id(), self.span(line, 1, 20), self_ty, trait_ref, tuple(methods))

    def trait_method(self, name, params=(), body=None, line=1, span=None):
        hir_id = self.next_id()
        return TraitMethod(
            hir_id=hir_id,
            name=name,
            span=span if span is not None else self.span(line, 5, 30),
            decl=self._decl(hir_id, params),
            body=body,
        )

    def trait(self, name, *methods, line=1):
        return TraitItem(self.next_id(), name, self.span(line, 1, 20), tuple(methods))

    def crate(self, *items):
        return Crate(tuple(items), name="demo")

    def context(self, crate, suppressions=None):
        return LintContext(
            crate=crate,
            oracle=self.oracle,
            suppressions=suppressions if suppressions is not None else SuppressionManager(),
        )


def derive_attr(name="Foo"):
    return Attribute("proc_macro_derive", (name,))


@pytest.fixture
def hir():
    return HirBuilder()


@pytest.fixture
def hir32():
    return HirBuilder(pointer_width=32)
