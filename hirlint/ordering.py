"""
hirlint/ordering.py
═══════════════════

Static data behind the ``atomic_ordering`` lint: the catalog of atomic
wrapper types, the five memory-ordering variants, and which orderings
each atomic operation accepts.

            │ SeqCst  Acquire  Release  AcqRel  Relaxed
  ──────────┼──────────────────────────────────────────
    load    │   ok      ok       ✗        ✗       ok
    store   │   ok      ✗        ok       ✗       ok

Everything in this module is immutable.

License: MIT — same as hirlint.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Sequence, Tuple

ATOMIC_MODULE = "core::sync::atomic"
ORDERING_PATH = f"{ATOMIC_MODULE}::Ordering"

# Matched by exact identity only: a local `struct AtomicBool` is not one of these.
ATOMIC_TYPES: FrozenSet[str] = frozenset(
    f"{ATOMIC_MODULE}::{name}"
    for name in (
        "AtomicBool",
        "AtomicI8",
        "AtomicI16",
        "AtomicI32",
        "AtomicI64",
        "AtomicIsize",
        "AtomicPtr",
        "AtomicU8",
        "AtomicU16",
        "AtomicU32",
        "AtomicU64",
        "AtomicUsize",
    )
)


def is_atomic_identity(identity: Optional[str]) -> bool:
    return identity is not None and identity in ATOMIC_TYPES


class OrderingVariant(Enum):
    """A memory ordering, valued by its name in source."""
    SEQ_CST = "SeqCst"
    ACQUIRE = "Acquire"
    RELEASE = "Release"
    ACQ_REL = "AcqRel"
    RELAXED = "Relaxed"

    @property
    def path(self) -> str:
        return f"{ORDERING_PATH}::{self.value}"

    @property
    def path_segments(self) -> Tuple[str, ...]:
        return tuple(self.path.split("::"))

    @classmethod
    def from_segments(cls, segments: Sequence[str]) -> Optional[OrderingVariant]:
        """
        Resolve a written path to a variant.

        Segments are compared from the last one backwards against the
        canonical path, so ``Acquire``, ``Ordering::Acquire`` and
        ``core::sync::atomic::Ordering::Acquire`` all name ``ACQUIRE``
        while ``Foo::Acquire`` names nothing.
        The re-export spelling ``std::sync::atomic::Ordering::Acquire`` also
        names nothing: only ``core`` is canonical.
        """
        if not segments:
            return None
        for variant in cls:
            canonical = variant.path_segments
            if len(segments) > len(canonical):
                continue
            if all(a == b for a, b in zip(reversed(segments), reversed(canonical))):
                return variant
        return None


class OperationKind(Enum):
    """
    Atomic operations whose ordering argument is checked.

    Each carries the method name and the position of the ordering in
    the call's argument list, where position 0 is the receiver.
    """

    LOAD = ("load", 1)
    STORE = ("store", 2)

    def __init__(self, method: str, ordering_index: int) -> None:
        self.method = method
        self.ordering_index = ordering_index

    @classmethod
    def from_method(cls, name: str) -> Optional[OperationKind]:
        for op in cls:
            if op.method == name:
                return op
        return None


@dataclass(frozen=True)
class ValidityRule:
    disallowed: FrozenSet[OrderingVariant]
    valid_alternatives: Tuple[OrderingVariant, ...]

    def allows(self, variant: OrderingVariant) -> bool:
        return variant not in self.disallowed

    def help_text(self) -> str:
        names = ", ".join(f'"{v.value}"' for v in self.valid_alternatives)
        return f"valid orderings are [{names}]"


VALIDITY_RULES: Mapping[OperationKind, ValidityRule] = MappingProxyType({
    OperationKind.STORE: ValidityRule(
        disallowed=frozenset({OrderingVariant.ACQUIRE, OrderingVariant.ACQ_REL}),
        valid_alternatives=(
            OrderingVariant.SEQ_CST,
            OrderingVariant.RELEASE,
            OrderingVariant.RELAXED,
        ),
    ),
    OperationKind.LOAD: ValidityRule(
        disallowed=frozenset({OrderingVariant.RELEASE, OrderingVariant.ACQ_REL}),
        valid_alternatives=(
            OrderingVariant.SEQ_CST,
            OrderingVariant.ACQUIRE,
            OrderingVariant.RELAXED,
        ),
    ),
})


__all__ = [
    "ATOMIC_MODULE",
    "ORDERING_PATH",
    "ATOMIC_TYPES",
    "is_atomic_identity",
    "OrderingVariant",
    "OperationKind",
    "ValidityRule",
    "VALIDITY_RULES",
]
