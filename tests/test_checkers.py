# tests/test_checkers.py
"""
Tests for the checker framework: suppressions, context, registry.
"""

from unittest.mock import MagicMock

import pytest

from hirlint.atomic_ordering import AtomicOrderingChecker
from hirlint.checkers import (
    ALL_LINTS,
    Checker,
    CheckerRegistry,
    LintContext,
    LintRegistration,
    SuppressionManager,
)
from hirlint.config import LintConfig
from hirlint.diagnostics import Diagnostic, Span
from hirlint.hir import Crate
from hirlint.large_data_pass_by_val import LargeDataPassByValChecker
from hirlint.oracle import TableOracle, TargetInfo
from hirlint.runner import BUILTIN_LINTS, default_registry


def _diag(lint_id="atomic_ordering", file="src/lib.rs", line=10):
    return Diagnostic(lint_id=lint_id, message="msg", span=Span(file, line, 5, line, 9))


class TestSuppressionManager:

    def test_nothing_suppressed_by_default(self):
        assert not SuppressionManager().is_suppressed(_diag())

    def test_global(self):
        sm = SuppressionManager()
        sm.add_global_suppression("atomic_ordering")
        assert sm.is_suppressed(_diag())
        assert not sm.is_suppressed(_diag("large_data_pass_by_val"))

    def test_global_wildcard(self):
        sm = SuppressionManager()
        sm.add_global_suppression(ALL_LINTS)
        assert sm.is_suppressed(_diag("large_data_pass_by_val"))

    def test_inline_same_line(self):
        sm = SuppressionManager()
        sm.add_inline_suppression("atomic_ordering", "src/lib.rs", 10)
        assert sm.is_suppressed(_diag(line=10))

    def test_inline_preceding_line(self):
        sm = SuppressionManager()
        sm.add_inline_suppression("atomic_ordering", "src/lib.rs", 9)
        assert sm.is_suppressed(_diag(line=10))
        assert not sm.is_suppressed(_diag(line=11))

    def test_inline_other_file(self):
        sm = SuppressionManager()
        sm.add_inline_suppression("atomic_ordering", "src/main.rs", 10)
        assert not sm.is_suppressed(_diag())

    @pytest.mark.parametrize("pattern", ["src/lib.rs", "lib.rs", "src/*.rs"])
    def test_file_patterns(self, pattern):
        sm = SuppressionManager()
        sm.add_file_suppression("atomic_ordering", pattern)
        assert sm.is_suppressed(_diag())

    def test_file_pattern_no_match(self):
        sm = SuppressionManager()
        sm.add_file_suppression("atomic_ordering", "benches/*")
        assert not sm.is_suppressed(_diag())

    def test_filter_diagnostics(self):
        sm = SuppressionManager()
        sm.add_global_suppression("atomic_ordering")
        kept = sm.filter_diagnostics([_diag(), _diag("large_data_pass_by_val")])
        assert [d.lint_id for d in kept] == ["large_data_pass_by_val"]


class TestLintContext:

    def test_report_keeps_and_notifies(self):
        hook = MagicMock()
        cx = LintContext(crate=Crate(), oracle=TableOracle(), on_diagnostic=hook)
        diag = _diag()
        cx.report(diag)
        assert cx.diagnostics == [diag]
        hook.assert_called_once_with(diag)

    def test_report_counts_suppressed(self):
        sm = SuppressionManager()
        sm.add_global_suppression(ALL_LINTS)
        hook = MagicMock()
        cx = LintContext(crate=Crate(), oracle=TableOracle(), suppressions=sm, on_diagnostic=hook)
        cx.report(_diag())
        assert cx.diagnostics == []
        assert cx.suppressed == 1
        hook.assert_not_called()

    def test_get_option(self):
        cx = LintContext(crate=Crate(), oracle=TableOracle(), options={"k": 1})
        assert cx.get_option("k") == 1
        assert cx.get_option("missing", "d") == "d"


class TestCheckerBaseClass:

    def test_callbacks_are_no_ops(self):
        checker = Checker()
        cx = MagicMock()
        checker.check_expr(cx, MagicMock())
        checker.check_fn(cx, MagicMock(), MagicMock(), None, MagicMock(), 1)
        checker.check_trait_item(cx, MagicMock())
        cx.report.assert_not_called()

    def test_emit_fills_checker_name(self):
        cx = MagicMock()
        AtomicOrderingChecker()._emit(cx, "atomic_ordering", Span("a.rs", 1, 1, 1, 2), "m", help="h")
        (diag,), _ = cx.report.call_args
        assert diag.checker_name == "atomic_ordering"
        assert diag.help == "h"

    def test_repr(self):
        assert repr(AtomicOrderingChecker()) == "<AtomicOrderingChecker 'atomic_ordering'>"


class TestCheckerRegistry:

    def test_builtin_table(self):
        assert [e.lint_id for e in BUILTIN_LINTS] == ["atomic_ordering", "large_data_pass_by_val"]
        assert [e.group for e in BUILTIN_LINTS] == ["correctness", "perf"]
        assert BUILTIN_LINTS[0].description == "Use of an incorrect atomic ordering will cause panic"

    def test_registries_are_independent(self):
        first = default_registry()
        second = default_registry()
        first.unregister("atomic_ordering")
        assert second.get_by_name("atomic_ordering") is not None

    def test_duplicate_registration(self):
        registry = default_registry()
        with pytest.raises(ValueError):
            registry.register(BUILTIN_LINTS[0])

    def test_instantiate_all(self):
        checkers = default_registry().instantiate(LintConfig(), TargetInfo(64))
        assert [type(c) for c in checkers] == [AtomicOrderingChecker, LargeDataPassByValChecker]
        assert checkers[1].limit == 16

    def test_instantiate_uses_config(self):
        config = LintConfig(large_data_size_min_limit=100)
        (checker,) = default_registry().instantiate(config, TargetInfo(64), names=["large_data_pass_by_val"])
        assert checker.limit == 100

    def test_instantiate_unknown_name_skipped(self):
        checkers = default_registry().instantiate(LintConfig(), TargetInfo(), names=["nope", "atomic_ordering"])
        assert [c.name for c in checkers] == ["atomic_ordering"]

    def test_disable_enable(self):
        registry = default_registry()
        registry.disable("atomic_ordering")
        assert [e.lint_id for e in registry.get_enabled()] == ["large_data_pass_by_val"]
        registry.enable("atomic_ordering")
        assert len(registry.get_enabled()) == 2

    def test_filter_by_group(self):
        (entry,) = default_registry().filter_by_group("perf")
        assert entry.lint_id == "large_data_pass_by_val"

    def test_custom_registration(self):
        factory = MagicMock(return_value=AtomicOrderingChecker())
        registry = CheckerRegistry.from_table([LintRegistration("custom", "style", "d", factory)])
        config, target = LintConfig(), TargetInfo()
        registry.instantiate(config, target)
        factory.assert_called_once_with(config, target)
        assert registry.names == ["custom"]
