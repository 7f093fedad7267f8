"""
hirlint/diagnostics.py
══════════════════════

Diagnostic model shared by every lint check and every renderer.

A check never prints anything.  It builds an immutable ``Diagnostic``
and hands it to the ``LintContext``; the runner and the reporter decide
what happens to it afterwards.

License: MIT — same as hirlint.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — SEVERITY / APPLICABILITY
# ═════════════════════════════════════════════════════════════════════════

class Severity(enum.Enum):
    """
    Diagnostic severity levels.

    Each carries:
      • label       — the word printed in front of the message
      • color       — termcolor colour name
      • sarif_level — SARIF 2.1.0 ``level`` string

    Lints only ever emit ``WARNING``; the other levels exist for the
    renderers (``help`` / ``note`` sub-lines).
    """

    ERROR = ("error", "red", "error")
    WARNING = ("warning", "yellow", "warning")
    NOTE = ("note", "cyan", "note")
    HELP = ("help", "green", "note")

    def __init__(self, label: str, color: str, sarif_level: str) -> None:
        self.label = label
        self.color = color
        self.sarif_level = sarif_level


class Applicability(enum.Enum):
    """
    Confidence tag on a suggested replacement.

    MACHINE_APPLICABLE — can be applied automatically
    MAYBE_INCORRECT    — probably right, but may not compile
    HAS_PLACEHOLDERS   — contains text the user must fill in
    UNSPECIFIED        — a human should confirm before applying
    """
    MACHINE_APPLICABLE = "machine-applicable"
    MAYBE_INCORRECT = "maybe-incorrect"
    HAS_PLACEHOLDERS = "has-placeholders"
    UNSPECIFIED = "unspecified"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — SPANS
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Span:
    """
    A region of source text.

    Coordinates are 1-based.  ``end_column`` is exclusive (points one
    past the last character).  ``expansion`` names the macro that
    produced the span, or is ``None`` for user-written code.
    """
    file: str = ""
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0
    expansion: Optional[str] = None

    @property
    def from_expansion(self) -> bool:
        return self.expansion is not None

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "end_line": self.end_line,
            "end_column": self.end_column,
        }
        if self.expansion is not None:
            result["expansion"] = self.expansion
        return result


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — DIAGNOSTIC
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Suggestion:
    """A replacement for the diagnostic's primary span."""
    message: str
    replacement: str
    applicability: Applicability = Applicability.UNSPECIFIED


@dataclass(frozen=True)
class Diagnostic:
    """
    A single lint finding.

    Attributes
    ----------
    lint_id      : Identifier of the lint (e.g. "atomic_ordering")
    message      : Primary, human-readable description
    span         : Primary source span
    severity     : Always ``Severity.WARNING`` for lints
    help         : Optional help line
    suggestion   : Optional replacement text with its applicability
    checker_name : Name of the checker that produced this
    """
    lint_id: str
    message: str
    span: Span
    severity: Severity = Severity.WARNING
    help: Optional[str] = None
    suggestion: Optional[Suggestion] = None
    checker_name: str = ""

    def to_json(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        result: Dict[str, Any] = {
            "lint": self.lint_id,
            "severity": self.severity.label,
            "message": self.message,
            "span": self.span.to_dict(),
        }
        if self.help is not None:
            result["help"] = self.help
        if self.suggestion is not None:
            result["suggestion"] = {
                "message": self.suggestion.message,
                "replacement": self.suggestion.replacement,
                "applicability": self.suggestion.applicability.value,
            }
        return result

    def to_json_str(self) -> str:
        """Single-line JSON string."""
        return json.dumps(self.to_json())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message [lint]."""
        return f"{self.span}: {self.severity.label}: {self.message} [{self.lint_id}]"


__all__ = [
    "Severity",
    "Applicability",
    "Span",
    "Suggestion",
    "Diagnostic",
]
