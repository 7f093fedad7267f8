"""
hirlint/reporter.py
═══════════════════

Rust-style colourful diagnostic reporter for hirlint runs.

Output formats
──────────────
  • Terminal : colourful Rust-style rendering (default on a TTY)
  • Plain    : one GCC-style line per diagnostic plus its help lines
  • SARIF    : if ``sarif_path`` is given or $HIRLINT_SARIF names a file
  • HTML     : if ``html_path`` is given or $HIRLINT_HTML names a file

Usage
─────
    from hirlint.reporter import Reporter

    with Reporter(sources=oracle.sources) as rep:
        for diag in results.diagnostics:
            rep.emit(diag)

License: MIT — same as hirlint.
"""

from __future__ import annotations

import json
import os
import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

import jinja2
from termcolor import colored, cprint

from hirlint.diagnostics import Diagnostic, Severity, Span
from hirlint.oracle import SourceMap

SARIF_ENV_VAR = "HIRLINT_SARIF"
HTML_ENV_VAR = "HIRLINT_HTML"


# ═════════════════════════════════════════════════════════════════════════
#  STATS
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class ReporterStats:
    """Aggregate counts per severity."""
    error: int = 0
    warning: int = 0
    note: int = 0
    help: int = 0

    def record(self, severity: Severity) -> None:
        """Increment the counter that corresponds to *severity*."""
        setattr(self, severity.label, getattr(self, severity.label) + 1)

    @property
    def total(self) -> int:
        return self.error + self.warning + self.note + self.help

    def summary_line(self) -> str:
        parts: List[str] = []
        if self.error:
            parts.append(f"{self.error} error{'s' if self.error != 1 else ''}")
        if self.warning:
            parts.append(f"{self.warning} warning{'s' if self.warning != 1 else ''}")
        if self.note:
            parts.append(f"{self.note} note{'s' if self.note != 1 else ''}")
        if self.help:
            parts.append(f"{self.help} help")
        if not parts:
            return "no diagnostics emitted"
        return "; ".join(parts) + f" ({self.total} total)"


# ═════════════════════════════════════════════════════════════════════════
#  TERMINAL RENDERER  (Rust-style colourful output)
# ═════════════════════════════════════════════════════════════════════════

class _TerminalRenderer:
    """Render diagnostics to a terminal with colours."""

    def __init__(self, stream: TextIO, sources: Optional[SourceMap]) -> None:
        self._stream = stream
        self._sources = sources

    def render(self, diag: Diagnostic) -> None:
        lines: List[str] = []
        sev = diag.severity

        # ── header: warning[lint]: message ───────────────────────────
        head = colored(f"{sev.label}[{diag.lint_id}]", sev.color, attrs=["bold"])
        lines.append(f"{head}: {colored(diag.message, attrs=['bold'])}")

        span = diag.span
        gutter_w = len(str(span.line)) + 1
        pipe = colored("|", "blue", attrs=["bold"])
        blank_gutter = " " * gutter_w

        arrow = colored("-->", "blue", attrs=["bold"])
        lines.append(f"{blank_gutter}{arrow} {span}")

        # ── source line with caret underline ─────────────────────────
        lines.append(f"{blank_gutter} {pipe}")
        lines.extend(self._render_span(span, sev, gutter_w, pipe))
        lines.append(f"{blank_gutter} {pipe}")

        # ── help / suggestion ────────────────────────────────────────
        if diag.help:
            prefix = colored(Severity.HELP.label, Severity.HELP.color, attrs=["bold"])
            lines.append(f"{blank_gutter} = {prefix}: {diag.help}")
        if diag.suggestion is not None:
            prefix = colored(Severity.HELP.label, Severity.HELP.color, attrs=["bold"])
            lines.append(
                f"{blank_gutter} = {prefix}: {diag.suggestion.message}: "
                f"`{diag.suggestion.replacement}`"
            )

        note = colored(Severity.NOTE.label, Severity.NOTE.color, attrs=["bold"])
        lines.append(f"{blank_gutter} = {note}: `#[{sev.label}(hirlint::{diag.lint_id})]` on by default")

        lines.append("")  # blank separator
        self._stream.write("\n".join(lines) + "\n")
        self._stream.flush()

    def _render_span(self, span: Span, severity: Severity, gutter_w: int, pipe: str) -> List[str]:
        """
        Build the annotated source view.

        Without source text we render a schematic view: line number and
        caret annotation only.
        """
        src_text = self._sources.line(span.file, span.line) if self._sources is not None else None
        line_prefix = colored(str(span.line).rjust(gutter_w), "blue", attrs=["bold"])
        result = [f"{line_prefix} {pipe} {src_text or ''}".rstrip()]

        pad = " " * (span.column - 1) if span.column > 0 else ""
        if span.end_line and span.end_line != span.line and src_text:
            span_len = max(len(src_text) - span.column + 1, 1)
        else:
            span_len = max(span.end_column - span.column, 1)
        marker = colored("^" * span_len, severity.color, attrs=["bold"])
        result.append(f"{' ' * gutter_w} {pipe} {pad}{marker}")
        return result


# ═════════════════════════════════════════════════════════════════════════
#  PLAIN RENDERER  (for log files / non-TTY)
# ═════════════════════════════════════════════════════════════════════════

class _PlainRenderer:
    """Non-coloured renderer — one GCC-style line per diagnostic."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def render(self, diag: Diagnostic) -> None:
        self._stream.write(diag.to_gcc_format() + "\n")
        if diag.help:
            self._stream.write(f"  help: {diag.help}\n")
        if diag.suggestion is not None:
            self._stream.write(
                f"  help: {diag.suggestion.message}: `{diag.suggestion.replacement}`\n"
            )
        self._stream.flush()


# ═════════════════════════════════════════════════════════════════════════
#  SARIF 2.1.0 BUILDER
# ═════════════════════════════════════════════════════════════════════════

class _SarifBuilder:
    """Accumulates diagnostics and writes a SARIF 2.1.0 JSON file."""

    SARIF_VERSION = "2.1.0"
    SARIF_SCHEMA = (
        "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/"
        "Schemata/sarif-schema-2.1.0.json"
    )

    def __init__(self) -> None:
        self._results: List[Dict[str, Any]] = []
        self._rules: Dict[str, Dict[str, Any]] = {}  # lint id → rule obj

    def add(self, diag: Diagnostic) -> None:
        if diag.lint_id not in self._rules:
            self._rules[diag.lint_id] = {
                "id": diag.lint_id,
                "shortDescription": {"text": diag.message},
            }

        span = diag.span
        region: Dict[str, Any] = {"startLine": span.line}
        if span.column:
            region["startColumn"] = span.column
        if span.end_line:
            region["endLine"] = span.end_line
        if span.end_column:
            region["endColumn"] = span.end_column
        result: Dict[str, Any] = {
            "ruleId": diag.lint_id,
            "level": diag.severity.sarif_level,
            "message": {"text": diag.message},
            "locations": [{
                "physicalLocation": {
                    "artifactLocation": {"uri": span.file},
                    "region": region,
                },
            }],
        }
        if diag.help:
            result["message"]["text"] += f"\nhelp: {diag.help}"

        if diag.suggestion is not None:
            result["fixes"] = [{
                "description": {"text": diag.suggestion.message},
                "artifactChanges": [{
                    "artifactLocation": {"uri": span.file},
                    "replacements": [{
                        "deletedRegion": region,
                        "insertedContent": {"text": diag.suggestion.replacement},
                    }],
                }],
            }]
            result.setdefault("properties", {})["applicability"] = (
                diag.suggestion.applicability.value
            )

        self._results.append(result)

    def to_json(self, tool_name: str, version: str) -> str:
        sarif: Dict[str, Any] = {
            "$schema": self.SARIF_SCHEMA,
            "version": self.SARIF_VERSION,
            "runs": [
                {
                    "tool": {
                        "driver": {
                            "name": tool_name,
                            "version": version,
                            "rules": list(self._rules.values()),
                        }
                    },
                    "results": self._results,
                }
            ],
        }
        return json.dumps(sarif, indent=2)

    def write(self, path: str, tool_name: str, version: str) -> None:
        Path(path).write_text(self.to_json(tool_name, version), encoding="utf-8")


# ═════════════════════════════════════════════════════════════════════════
#  HTML BUILDER
# ═════════════════════════════════════════════════════════════════════════

class _HtmlBuilder:
    """Accumulates diagnostics and renders to an HTML file via Jinja2."""

    def __init__(self) -> None:
        self._diagnostics: List[Dict[str, Any]] = []

    def add(self, diag: Diagnostic) -> None:
        self._diagnostics.append({
            "severity": diag.severity.label,
            "lint_id": diag.lint_id,
            "message": diag.message,
            "file": diag.span.file,
            "line": diag.span.line,
            "column": diag.span.column,
            "help": diag.help,
            "suggestion": (
                f"{diag.suggestion.message}: `{diag.suggestion.replacement}`"
                if diag.suggestion is not None else None
            ),
        })

    def render(self) -> str:
        env = jinja2.Environment(autoescape=True)
        tmpl = env.from_string(_DEFAULT_HTML_TEMPLATE)
        return tmpl.render(diagnostics=self._diagnostics, total=len(self._diagnostics))

    def write(self, path: str) -> None:
        Path(path).write_text(self.render(), encoding="utf-8")


# ═════════════════════════════════════════════════════════════════════════
#  REPORTER  (main entry point)
# ═════════════════════════════════════════════════════════════════════════

class Reporter:
    """
    Central diagnostic dispatcher.

    Use as a context manager::

        with Reporter() as rep:
            rep.emit(diag)
        # finish() is called automatically

    Or manually::

        rep = Reporter()
        rep.emit(diag)
        rep.finish()
    """

    def __init__(
        self,
        stream: TextIO = sys.stderr,
        colour: Optional[bool] = None,
        tool_name: str = "hirlint",
        tool_version: str = "0.0.0",
        sources: Optional[SourceMap] = None,
        sarif_path: Optional[str] = None,
        html_path: Optional[str] = None,
    ) -> None:
        self.tool_name = tool_name
        self.tool_version = tool_version
        self.stats = ReporterStats()
        self.diagnostics: List[Diagnostic] = []
        self._stream = stream

        use_colour = colour if colour is not None else hasattr(stream, "isatty") and stream.isatty()
        self._renderer: Union[_TerminalRenderer, _PlainRenderer]
        if use_colour:
            self._renderer = _TerminalRenderer(stream, sources)
        else:
            self._renderer = _PlainRenderer(stream)

        self._sarif_path = sarif_path or os.environ.get(SARIF_ENV_VAR, "")
        self._sarif = _SarifBuilder() if self._sarif_path else None

        self._html_path = html_path or os.environ.get(HTML_ENV_VAR, "")
        self._html = _HtmlBuilder() if self._html_path else None

    # ── context manager ──────────────────────────────────────────────

    def __enter__(self) -> Reporter:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.finish()

    # ── accept ───────────────────────────────────────────────────────

    def emit(self, diag: Diagnostic) -> None:
        """Route the diagnostic to all active outputs and count it."""
        self.stats.record(diag.severity)

        self.diagnostics.append(diag)
        self._renderer.render(diag)

        if self._sarif is not None:
            self._sarif.add(diag)
        if self._html is not None:
            self._html.add(diag)

    # ── finalisation ─────────────────────────────────────────────────

    def finish(self) -> ReporterStats:
        """
        Print the summary line and write SARIF / HTML if configured.

        Returns the final :class:`ReporterStats`.
        """
        summary = self.stats.summary_line()
        if isinstance(self._renderer, _TerminalRenderer):
            colour = "red" if self.stats.error else "yellow" if self.stats.total else "green"
            cprint(f"  ╰─ {summary}", colour, attrs=["bold"], file=self._stream)
        else:
            print(f"  {summary}", file=self._stream)

        if self._sarif is not None:
            self._sarif.write(self._sarif_path, tool_name=self.tool_name, version=self.tool_version)
        if self._html is not None:
            self._html.write(self._html_path)

        return self.stats


# ═════════════════════════════════════════════════════════════════════════
#  DEFAULT HTML TEMPLATE
# ═════════════════════════════════════════════════════════════════════════

_DEFAULT_HTML_TEMPLATE = textwrap.dedent("""\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>hirlint report</title>
  <style>
    :root { --bg: #1e1e2e; --fg: #cdd6f4; --surface: #313244;
            --red: #f38ba8; --yellow: #f9e2af; --green: #a6e3a1;
            --blue: #89b4fa; --border: #45475a; }
    body { font-family: 'Fira Code', monospace; background: var(--bg);
           color: var(--fg); padding: 2rem; }
    .card { background: var(--surface); border: 1px solid var(--border);
            border-radius: 8px; padding: 1rem; margin-bottom: 1rem; }
    .sev-error   { border-left: 4px solid var(--red); }
    .sev-warning { border-left: 4px solid var(--yellow); }
    .loc  { color: var(--blue); font-size: 0.9em; }
    .msg  { margin-top: 0.4rem; }
    .help { color: var(--green); margin-top: 0.3rem; font-size: 0.9em; }
    .summary { margin-top: 2rem; text-align: center; }
  </style>
</head>
<body>
  <h1>hirlint report</h1>
  {% for d in diagnostics %}
  <div class="card sev-{{ d.severity }}">
    <strong>{{ d.severity }}</strong> <code>[{{ d.lint_id }}]</code>
    <span class="loc">{{ d.file }}:{{ d.line }}{% if d.column %}:{{ d.column }}{% endif %}</span>
    <div class="msg">{{ d.message }}</div>
    {% if d.help %}<div class="help">help: {{ d.help }}</div>{% endif %}
    {% if d.suggestion %}<div class="help">help: {{ d.suggestion }}</div>{% endif %}
  </div>
  {% endfor %}
  <div class="summary">{{ total }} diagnostic{{ 's' if total != 1 else '' }} emitted.</div>
</body>
</html>
""")


__all__ = [
    "SARIF_ENV_VAR",
    "HTML_ENV_VAR",
    "ReporterStats",
    "Reporter",
]
