"""
hirlint/dump.py
═══════════════

Decoder for HIR dump files: the JSON document a host toolchain writes
after type checking, carrying the program tree together with the
answers the oracle needs (expression types, signatures, copy-ability,
layout sizes, source text).

Top-level layout
────────────────

    {
      "crate":        "demo",
      "target":       {"pointer_width": 64},
      "sources":      {"src/lib.rs": "…"},
      "types":        {"A": {"kind": "adt", "path": "demo::A", "copy": true, "size": 4096}},
      "suppressions": [{"lint": "atomic_ordering", "file": "src/lib.rs", "line": 3}],
      "items":        [ {"kind": "fn" | "impl" | "trait", …} ]
    }

Expressions and functions may omit ``"id"``; missing ids are numbered
after the largest explicit one, and explicit ids must be unique.  Files
absent from ``"sources"`` are read relative to the dump's directory.  Any structural problem raises
``DumpError`` naming the offending JSON path.

License: MIT — same as hirlint.
"""

from __future__ import annotations

import itertools
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Set, Tuple, Union

from hirlint.checkers import SuppressionManager
from hirlint.diagnostics import Span
from hirlint.errors import DumpError
from hirlint.hir import (
    DEFAULT_ABI,
    Attribute,
    BlockExpr,
    CallExpr,
    ClosureExpr,
    Crate,
    Expr,
    FnDecl,
    FnItem,
    ImplItem,
    Item,
    LitExpr,
    MethodCallExpr,
    Param,
    PathExpr,
    TraitItem,
    TraitMethod,
    Ty,
    TyKind,
)
from hirlint.oracle import SourceMap, TableOracle, TargetInfo

_log = logging.getLogger(__name__)

_TY_KINDS: Dict[str, TyKind] = {k.name.lower(): k for k in TyKind}


@dataclass
class LoadedDump:
    """Everything decoded from one dump file."""
    crate: Crate
    oracle: TableOracle
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    source: Optional[Path] = None


# ═════════════════════════════════════════════════════════════════════════
#  DECODER
# ═════════════════════════════════════════════════════════════════════════

class _Decoder:

    def __init__(self, data: Mapping[str, Any], source: Optional[Path]) -> None:
        self.data = data
        self.source = source
        self.types: Dict[str, Ty] = {}
        self.oracle = TableOracle()
        self._ids: Iterator[int] = itertools.count(_max_explicit_id(data) + 1)
        self._seen_ids: Set[int] = set()

    def fail(self, where: str, message: str) -> DumpError:
        return DumpError(f"{where}: {message}", self.source)

    # ── top level ────────────────────────────────────────────────────

    def decode(self) -> LoadedDump:
        if not isinstance(self.data, Mapping):
            raise self.fail("$", "dump must be a JSON object")

        target = self._mapping(self.data.get("target", {}), "$.target")
        try:
            self.oracle.target = TargetInfo(pointer_width=int(target.get("pointer_width", 64)))
        except (TypeError, ValueError) as exc:
            raise self.fail("$.target.pointer_width", str(exc)) from exc

        sources = self._mapping(self.data.get("sources", {}), "$.sources")
        self.oracle.sources = SourceMap(
            {str(k): str(v) for k, v in sources.items()},
            root=Path(self.source).parent if self.source is not None else None,
        )

        for key, raw in self._mapping(self.data.get("types", {}), "$.types").items():
            self._decode_type(str(key), raw)

        items = tuple(
            self._decode_item(raw, f"$.items[{i}]")
            for i, raw in enumerate(self._list(self.data.get("items", []), "$.items"))
        )

        suppressions = SuppressionManager()
        for i, raw in enumerate(self._list(self.data.get("suppressions", []), "$.suppressions")):
            where = f"$.suppressions[{i}]"
            entry = self._mapping(raw, where)
            lint = self._str(entry, "lint", where)
            if "file" in entry and "line" in entry:
                suppressions.add_inline_suppression(lint, self._str(entry, "file", where), self._int(entry, "line", where))
            elif "file" in entry:
                suppressions.add_file_suppression(lint, self._str(entry, "file", where))
            else:
                suppressions.add_global_suppression(lint)

        crate = Crate(items=items, name=str(self.data.get("crate", "crate")))
        _log.info(
            "decoded %d item(s), %d type(s) from %s",
            len(items), len(self.types), self.source or "<memory>",
        )
        return LoadedDump(crate=crate, oracle=self.oracle, suppressions=suppressions, source=self.source)

    def _decode_type(self, key: str, raw: Any) -> None:
        where = f"$.types.{key}"
        entry = self._mapping(raw, where)
        kind_name = str(entry.get("kind", "other")).lower()
        if kind_name not in _TY_KINDS:
            raise self.fail(where, f"unknown type kind {kind_name!r}")
        kind = _TY_KINDS[kind_name]
        path = entry.get("path")
        if kind is TyKind.ADT and not path:
            raise self.fail(where, "nominal types need a `path`")
        size = entry.get("size")
        if size is not None and (isinstance(size, bool) or not isinstance(size, int) or size < 0):
            raise self.fail(where, f"`size` must be a non-negative integer, got {size!r}")
        ty = Ty(kind=kind, path=str(path) if path else None, name=str(entry.get("name", key)))
        self.types[key] = self.oracle.declare_type(ty, copy=bool(entry.get("copy", False)), size=size)

    # ── items ────────────────────────────────────────────────────────

    def _decode_item(self, raw: Any, where: str) -> Item:
        entry = self._mapping(raw, where)
        kind = entry.get("kind")
        if kind == "fn":
            return self._decode_fn(entry, where)
        if kind == "impl":
            trait_ref = entry.get("trait")
            return ImplItem(
                hir_id=self._id(entry, where),
                span=self._span(entry.get("span"), f"{where}.span"),
                self_ty=str(entry.get("self_ty", "")),
                trait_ref=str(trait_ref) if trait_ref is not None else None,
                items=tuple(
                    self._decode_fn(self._mapping(m, f"{where}.items[{i}]"), f"{where}.items[{i}]")
                    for i, m in enumerate(self._list(entry.get("items", []), f"{where}.items"))
                ),
            )
        if kind == "trait":
            return TraitItem(
                hir_id=self._id(entry, where),
                name=self._str(entry, "name", where),
                span=self._span(entry.get("span"), f"{where}.span"),
                items=tuple(
                    self._decode_trait_method(m, f"{where}.items[{i}]")
                    for i, m in enumerate(self._list(entry.get("items", []), f"{where}.items"))
                ),
            )
        raise self.fail(where, f"unknown item kind {kind!r}")

    def _decode_fn(self, entry: Mapping[str, Any], where: str) -> FnItem:
        hir_id = self._id(entry, where)
        return FnItem(
            hir_id=hir_id,
            name=self._str(entry, "name", where),
            span=self._span(entry.get("span"), f"{where}.span"),
            decl=self._decode_decl(hir_id, entry.get("params", []), f"{where}.params"),
            body=self._optional_expr(entry.get("body"), f"{where}.body"),
            abi=str(entry.get("abi", DEFAULT_ABI)),
            attrs=tuple(
                self._decode_attr(a, f"{where}.attrs[{i}]")
                for i, a in enumerate(self._list(entry.get("attrs", []), f"{where}.attrs"))
            ),
        )

    def _decode_trait_method(self, raw: Any, where: str) -> TraitMethod:
        entry = self._mapping(raw, where)
        hir_id = self._id(entry, where)
        return TraitMethod(
            hir_id=hir_id,
            name=self._str(entry, "name", where),
            span=self._span(entry.get("span"), f"{where}.span"),
            decl=self._decode_decl(hir_id, entry.get("params", []), f"{where}.params"),
            body=self._optional_expr(entry.get("body"), f"{where}.body"),
        )

    def _decode_decl(self, hir_id: int, raw: Any, where: str) -> FnDecl:
        params: List[Param] = []
        tys: List[Ty] = []
        for i, p in enumerate(self._list(raw, where)):
            pw = f"{where}[{i}]"
            entry = self._mapping(p, pw)
            params.append(Param(
                span=self._span(entry.get("span"), f"{pw}.span"),
                is_self=bool(entry.get("self", False)),
                name=str(entry.get("name", "")),
            ))
            tys.append(self._type_ref(entry.get("ty"), f"{pw}.ty"))
        self.oracle.set_fn_inputs(hir_id, tys)
        return FnDecl(params=tuple(params))

    def _decode_attr(self, raw: Any, where: str) -> Attribute:
        entry = self._mapping(raw, where)
        args = entry.get("args")
        return Attribute(
            name=self._str(entry, "name", where),
            args=tuple(str(a) for a in self._list(args, f"{where}.args")) if args is not None else None,
        )

    # ── expressions ──────────────────────────────────────────────────

    def _optional_expr(self, raw: Any, where: str) -> Optional[Expr]:
        return None if raw is None else self._decode_expr(raw, where)

    def _decode_expr(self, raw: Any, where: str) -> Expr:
        entry = self._mapping(raw, where)
        kind = entry.get("kind")
        hir_id = self._id(entry, where)
        span = self._span(entry.get("span"), f"{where}.span")

        expr: Expr
        if kind == "path":
            segments = self._list(entry.get("segments"), f"{where}.segments")
            expr = PathExpr(hir_id, span, tuple(str(s) for s in segments))
        elif kind == "lit":
            expr = LitExpr(hir_id, span, entry.get("value"))
        elif kind == "method_call":
            expr = MethodCallExpr(
                hir_id, span, self._str(entry, "method", where), self._exprs(entry.get("args", []), f"{where}.args"),
            )
        elif kind == "call":
            expr = CallExpr(
                hir_id, span,
                self._decode_expr(entry.get("func"), f"{where}.func"),
                self._exprs(entry.get("args", []), f"{where}.args"),
            )
        elif kind == "block":
            expr = BlockExpr(hir_id, span, self._exprs(entry.get("exprs", []), f"{where}.exprs"))
        elif kind == "closure":
            expr = ClosureExpr(
                hir_id, span,
                self._decode_decl(hir_id, entry.get("params", []), f"{where}.params"),
                self._decode_expr(entry.get("body"), f"{where}.body"),
            )
        else:
            raise self.fail(where, f"unknown expression kind {kind!r}")

        if entry.get("ty") is not None:
            self.oracle.set_expr_ty(expr, self._type_ref(entry["ty"], f"{where}.ty"))
        return expr

    def _exprs(self, raw: Any, where: str) -> Tuple[Expr, ...]:
        return tuple(self._decode_expr(e, f"{where}[{i}]") for i, e in enumerate(self._list(raw, where)))

    # ── leaves ───────────────────────────────────────────────────────

    def _type_ref(self, raw: Any, where: str) -> Ty:
        if not isinstance(raw, str):
            raise self.fail(where, "type references must be strings")
        try:
            return self.types[raw]
        except KeyError:
            raise self.fail(where, f"unknown type {raw!r}") from None

    def _span(self, raw: Any, where: str) -> Span:
        entry = self._mapping(raw, where)
        line = self._int(entry, "line", where)
        column = self._int(entry, "column", where)
        expansion = entry.get("expansion")
        return Span(
            file=self._str(entry, "file", where),
            line=line,
            column=column,
            end_line=self._int(entry, "end_line", where) if "end_line" in entry else line,
            end_column=self._int(entry, "end_column", where) if "end_column" in entry else column,
            expansion=str(expansion) if expansion is not None else None,
        )

    def _id(self, entry: Mapping[str, Any], where: str) -> int:
        if entry.get("id") is None:
            return next(self._ids)
        hir_id = self._int(entry, "id", where)
        if hir_id in self._seen_ids:
            raise self.fail(f"{where}.id", f"duplicate id {hir_id}")
        self._seen_ids.add(hir_id)
        return hir_id

    def _mapping(self, raw: Any, where: str) -> Mapping[str, Any]:
        if not isinstance(raw, Mapping):
            raise self.fail(where, "expected an object")
        return raw

    def _list(self, raw: Any, where: str) -> List[Any]:
        if not isinstance(raw, list):
            raise self.fail(where, "expected an array")
        return raw

    def _str(self, entry: Mapping[str, Any], key: str, where: str) -> str:
        value = entry.get(key)
        if not isinstance(value, str):
            raise self.fail(f"{where}.{key}", "expected a string")
        return value

    def _int(self, entry: Mapping[str, Any], key: str, where: str) -> int:
        value = entry.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            raise self.fail(f"{where}.{key}", "expected an integer")
        return value


def _max_explicit_id(node: Any) -> int:
    """Largest ``"id"`` anywhere in the document, or 0."""
    best = 0
    stack = [node]
    while stack:
        cur = stack.pop()
        if isinstance(cur, Mapping):
            raw = cur.get("id")
            if isinstance(raw, int) and not isinstance(raw, bool):
                best = max(best, raw)
            stack.extend(cur.values())
        elif isinstance(cur, list):
            stack.extend(cur)
    return best


# ═════════════════════════════════════════════════════════════════════════
#  PUBLIC ENTRY POINTS
# ═════════════════════════════════════════════════════════════════════════

def loads(data: Union[str, Mapping[str, Any]], source: Optional[Path] = None) -> LoadedDump:
    """Decode a dump from a JSON string or an already-parsed mapping."""
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise DumpError(f"invalid JSON: {exc}", source) from exc
    return _Decoder(data, source).decode()


def load(path: Union[str, Path]) -> LoadedDump:
    """Read and decode the dump file at *path*."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DumpError(f"cannot read dump: {exc}", path) from exc
    return loads(text, source=path)


__all__ = [
    "LoadedDump",
    "load",
    "loads",
]
