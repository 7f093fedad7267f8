"""
hirlint/hir.py
══════════════

In-memory model of a type-resolved program ("HIR").

The lint checks only read the node attributes documented here; resolved
types, copy-ability, layout and source text come from a ``TypeOracle``
(see ``hirlint.oracle``).  A host toolchain either builds these nodes
directly or writes a JSON dump that ``hirlint.dump`` turns into them.

Node families
─────────────

  Expr        PathExpr │ LitExpr │ MethodCallExpr │ CallExpr │ BlockExpr │ ClosureExpr
  Item        FnItem │ ImplItem │ TraitItem
  Signature   FnDecl(params: Param…)
  Crate       items + parent index (hir_id → enclosing item)

Every node that the oracle may be asked about carries a ``hir_id`` that
is unique within its crate.

License: MIT — same as hirlint.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional, Tuple, Union

from hirlint.diagnostics import Span


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — RESOLVED TYPES
# ═════════════════════════════════════════════════════════════════════════

class TyKind(Enum):
    """Discriminant for resolved types."""
    ADT = auto()          # nominal struct / enum / union
    REF = auto()          # &T, &mut T
    PRIMITIVE = auto()    # integers, floats, bool, char
    PARAM = auto()        # generic parameter, still unresolved
    ARRAY = auto()
    TUPLE = auto()
    OTHER = auto()


@dataclass(frozen=True)
class Ty:
    """
    A resolved type as handed out by the oracle.

    ``path`` is the fully-qualified identity for nominal types
    (e.g. ``core::sync::atomic::AtomicBool``) and ``None`` otherwise.
    """
    kind: TyKind
    path: Optional[str] = None
    name: str = ""

    @property
    def is_adt(self) -> bool:
        return self.kind is TyKind.ADT

    def __str__(self) -> str:
        return self.name or self.path or self.kind.name.lower()


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — EXPRESSIONS
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PathExpr:
    """A path as written in the source, e.g. ``Ordering::Acquire``."""
    hir_id: int
    span: Span
    segments: Tuple[str, ...]


@dataclass(frozen=True)
class LitExpr:
    hir_id: int
    span: Span
    value: object = None


@dataclass(frozen=True)
class MethodCallExpr:
    """
    ``receiver.method(arg, …)``.

    ``args[0]`` is the receiver, followed by the explicit arguments.
    """
    hir_id: int
    span: Span
    method: str
    args: Tuple["Expr", ...] = ()


@dataclass(frozen=True)
class CallExpr:
    hir_id: int
    span: Span
    func: "Expr"
    args: Tuple["Expr", ...] = ()


@dataclass(frozen=True)
class BlockExpr:
    hir_id: int
    span: Span
    exprs: Tuple["Expr", ...] = ()


@dataclass(frozen=True)
class ClosureExpr:
    hir_id: int
    span: Span
    decl: "FnDecl"
    body: "Expr"


Expr = Union[PathExpr, LitExpr, MethodCallExpr, CallExpr, BlockExpr, ClosureExpr]


def sub_exprs(expr: Expr) -> Tuple[Expr, ...]:
    """Direct children of *expr*, in source order."""
    if isinstance(expr, MethodCallExpr):
        return expr.args
    if isinstance(expr, CallExpr):
        return (expr.func,) + expr.args
    if isinstance(expr, BlockExpr):
        return expr.exprs
    if isinstance(expr, ClosureExpr):
        return (expr.body,)
    return ()


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — SIGNATURES AND ITEMS
# ═════════════════════════════════════════════════════════════════════════

DEFAULT_ABI = "Rust"


@dataclass(frozen=True)
class Param:
    """
    One declared input of a function.

    ``span`` covers the parameter's type as written (``A`` in
    ``arg: A``), or the receiver (``self``) when ``is_self`` is set.
    """
    span: Span
    is_self: bool = False
    name: str = ""


@dataclass(frozen=True)
class FnDecl:
    params: Tuple[Param, ...] = ()


@dataclass(frozen=True)
class Attribute:
    """``#[name(args…)]``; ``args`` is ``None`` for a bare ``#[name]``."""
    name: str
    args: Optional[Tuple[str, ...]] = None

    @property
    def has_meta_list(self) -> bool:
        return self.args is not None


@dataclass(frozen=True)
class FnItem:
    """A free function, or a method inside an ``impl`` block."""
    hir_id: int
    name: str
    span: Span
    decl: FnDecl
    body: Optional[Expr] = None
    abi: str = DEFAULT_ABI
    attrs: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class ImplItem:
    """``impl [Trait for] SelfTy { … }``; ``trait_ref`` is ``None`` for inherent impls."""
    hir_id: int
    span: Span
    self_ty: str = ""
    trait_ref: Optional[str] = None
    items: Tuple[FnItem, ...] = ()

    @property
    def is_inherent(self) -> bool:
        return self.trait_ref is None


@dataclass(frozen=True)
class TraitMethod:
    """A method declared inside a trait, with or without a default body."""
    hir_id: int
    name: str
    span: Span
    decl: FnDecl
    body: Optional[Expr] = None


@dataclass(frozen=True)
class TraitItem:
    hir_id: int
    name: str
    span: Span
    items: Tuple[TraitMethod, ...] = ()


Item = Union[FnItem, ImplItem, TraitItem]


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — FUNCTION KINDS (what ``check_fn`` is told about)
# ═════════════════════════════════════════════════════════════════════════

class FnKindTag(Enum):
    ITEM_FN = auto()
    METHOD = auto()
    CLOSURE = auto()


@dataclass(frozen=True)
class FnKind:
    """
    What sort of function body the walker is entering.

    ``abi`` and ``attrs`` are only meaningful for ``ITEM_FN``.
    """
    tag: FnKindTag
    name: str = ""
    abi: str = DEFAULT_ABI
    attrs: Tuple[Attribute, ...] = ()

    @classmethod
    def item_fn(cls, item: FnItem) -> FnKind:
        return cls(FnKindTag.ITEM_FN, item.name, item.abi, item.attrs)

    @classmethod
    def method(cls, name: str) -> FnKind:
        return cls(FnKindTag.METHOD, name)

    @classmethod
    def closure(cls) -> FnKind:
        return cls(FnKindTag.CLOSURE)


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — CRATE
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class Crate:
    """
    Root of a HIR tree.

    Keeps an index from the ``hir_id`` of every impl/trait member to the
    item that encloses it, which is what ``LintContext.parent_item``
    answers from.
    """
    items: Tuple[Item, ...] = ()
    name: str = "crate"
    _parents: Dict[int, Item] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        for item in self.items:
            if isinstance(item, (ImplItem, TraitItem)):
                for member in item.items:
                    self._parents[member.hir_id] = item

    def parent_item(self, hir_id: int) -> Optional[Item]:
        """Return the impl or trait that declares *hir_id*, if any."""
        return self._parents.get(hir_id)


__all__ = [
    "TyKind",
    "Ty",
    "PathExpr",
    "LitExpr",
    "MethodCallExpr",
    "CallExpr",
    "BlockExpr",
    "ClosureExpr",
    "Expr",
    "sub_exprs",
    "DEFAULT_ABI",
    "Param",
    "FnDecl",
    "Attribute",
    "FnItem",
    "ImplItem",
    "TraitMethod",
    "TraitItem",
    "Item",
    "FnKindTag",
    "FnKind",
    "Crate",
]
