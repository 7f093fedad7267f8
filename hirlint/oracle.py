"""
hirlint/oracle.py
═════════════════

The type/layout oracle: everything a check needs to know about the
program that is not written in the tree itself.

``TypeOracle`` is the contract a host toolchain implements.  The
``TableOracle`` below is the reference implementation, backed by plain
tables; ``hirlint.dump`` fills it from a JSON dump and the tests build
it by hand.

Queries
───────
  expr_ty(expr)        resolved type of a sub-expression
  fn_inputs(hir_id)    resolved input types of a function, in order
  is_copy(ty)          can the value be duplicated bitwise?
  layout_size(ty)      byte size, or None for unsized / generic types
  type_identity(ty)    fully-qualified identity of a nominal type
  snippet(span, dflt)  source text covered by a span
  target               target properties (pointer width)

License: MIT — same as hirlint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from hirlint.diagnostics import Span
from hirlint.hir import Expr, Ty

_log = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — TARGET
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TargetInfo:
    """Properties of the compilation target."""
    pointer_width: int = 64  # bits

    def __post_init__(self) -> None:
        if self.pointer_width <= 0 or self.pointer_width % 8:
            raise ValueError(
                f"pointer width must be a positive multiple of 8, got {self.pointer_width}"
            )

    @property
    def pointer_bytes(self) -> int:
        return self.pointer_width // 8


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — ORACLE CONTRACT
# ═════════════════════════════════════════════════════════════════════════

@runtime_checkable
class TypeOracle(Protocol):
    """What the checks may ask the host about a resolved program."""

    @property
    def target(self) -> TargetInfo: ...

    def expr_ty(self, expr: Expr) -> Optional[Ty]: ...

    def fn_inputs(self, hir_id: int) -> Sequence[Ty]: ...

    def is_copy(self, ty: Ty) -> bool: ...

    def layout_size(self, ty: Ty) -> Optional[int]: ...

    def type_identity(self, ty: Ty) -> Optional[str]: ...

    def snippet(self, span: Span, default: str) -> str: ...


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — SOURCE MAP
# ═════════════════════════════════════════════════════════════════════════

class SourceMap:
    """
    Source text lookup by span.

    Files registered with ``add`` win.  Other files are read from disk
    only when a *root* is given, relative names resolving against it, so
    the text never depends on the working directory.  Unknown or
    unreadable files yield the caller's default.
    """

    def __init__(self, files: Optional[Mapping[str, str]] = None, root: Optional[Path] = None) -> None:
        self.root = root
        self._lines: Dict[str, Optional[List[str]]] = {}
        for name, text in (files or {}).items():
            self.add(name, text)

    def add(self, name: str, text: str) -> None:
        self._lines[name] = text.splitlines()

    def lines(self, name: str) -> Optional[List[str]]:
        if name not in self._lines:
            if self.root is None:
                return None
            try:
                text = (self.root / name).read_text(encoding="utf-8", errors="replace")
            except OSError:
                _log.debug("source file %s is not readable", name)
                self._lines[name] = None
            else:
                self._lines[name] = text.splitlines()
        return self._lines[name]

    def line(self, name: str, lineno: int) -> Optional[str]:
        lines = self.lines(name)
        if lines is None or not 1 <= lineno <= len(lines):
            return None
        return lines[lineno - 1]

    def snippet(self, span: Span, default: str) -> str:
        """Text between ``(line, column)`` and ``(end_line, end_column)``."""
        if not span.file or span.line <= 0 or span.column <= 0:
            return default
        lines = self.lines(span.file)
        if lines is None:
            return default
        end_line = span.end_line or span.line
        if end_line < span.line or end_line > len(lines):
            return default
        if end_line == span.line:
            if span.end_column <= span.column:
                return default
            return lines[span.line - 1][span.column - 1:span.end_column - 1] or default
        parts = [lines[span.line - 1][span.column - 1:]]
        parts.extend(lines[span.line:end_line - 1])
        parts.append(lines[end_line - 1][:max(span.end_column - 1, 0)])
        return "\n".join(parts)


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — TABLE-BACKED ORACLE
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TypeInfo:
    """Answers the oracle keeps for one resolved type."""
    copy: bool = False
    size: Optional[int] = None


@dataclass
class TableOracle:
    """
    Reference ``TypeOracle`` backed by lookup tables.

    Attributes
    ----------
    target      : TargetInfo
    expr_types  : hir_id of an expression → its resolved type
    fn_sigs     : hir_id of a function → resolved input types
    type_info   : resolved type → copy-ability and layout size
    sources     : SourceMap used for ``snippet``
    """
    target: TargetInfo = field(default_factory=TargetInfo)
    expr_types: Dict[int, Ty] = field(default_factory=dict)
    fn_sigs: Dict[int, List[Ty]] = field(default_factory=dict)
    type_info: Dict[Ty, TypeInfo] = field(default_factory=dict)
    sources: SourceMap = field(default_factory=SourceMap)

    # ── table population ─────────────────────────────────────────────

    def declare_type(self, ty: Ty, copy: bool = False, size: Optional[int] = None) -> Ty:
        self.type_info[ty] = TypeInfo(copy=copy, size=size)
        return ty

    def set_expr_ty(self, expr: Expr, ty: Ty) -> None:
        self.expr_types[expr.hir_id] = ty

    def set_fn_inputs(self, hir_id: int, tys: Sequence[Ty]) -> None:
        self.fn_sigs[hir_id] = list(tys)

    # ── TypeOracle ───────────────────────────────────────────────────

    def expr_ty(self, expr: Expr) -> Optional[Ty]:
        return self.expr_types.get(expr.hir_id)

    def fn_inputs(self, hir_id: int) -> Sequence[Ty]:
        return self.fn_sigs.get(hir_id, [])

    def is_copy(self, ty: Ty) -> bool:
        info = self.type_info.get(ty)
        return info is not None and info.copy

    def layout_size(self, ty: Ty) -> Optional[int]:
        info = self.type_info.get(ty)
        return info.size if info is not None else None

    def type_identity(self, ty: Ty) -> Optional[str]:
        return ty.path if ty.is_adt else None

    def snippet(self, span: Span, default: str) -> str:
        return self.sources.snippet(span, default)


__all__ = [
    "TargetInfo",
    "TypeOracle",
    "SourceMap",
    "TypeInfo",
    "TableOracle",
]
