# tests/test_dump.py
"""
Tests for decoding HIR dump files.
"""

import copy
import json
from pathlib import Path

import pytest

from hirlint.diagnostics import Diagnostic, Span
from hirlint.dump import load, loads
from hirlint.errors import DumpError
from hirlint.hir import BlockExpr, FnItem, ImplItem, MethodCallExpr, PathExpr, TraitItem, TyKind
from hirlint.runner import CheckerRunner

DEMO = Path(__file__).parent / "data" / "demo.hir.json"


def _span(line=1, column=1):
    return {"file": "src/lib.rs", "line": line, "column": column}


def _minimal(**extra):
    doc = {
        "types": {"Big": {"kind": "adt", "path": "demo::Big", "copy": True, "size": 64}},
        "items": [{"kind": "fn", "name": "f", "span": _span(), "params": [{"ty": "Big", "span": _span(1, 8)}]}],
    }
    doc.update(extra)
    return doc


class TestLoadDemo:

    def test_structure(self):
        loaded = load(DEMO)
        assert loaded.source == DEMO
        assert loaded.crate.name == "demo"
        flip, consume = loaded.crate.items
        assert isinstance(flip, FnItem) and flip.name == "flip"
        assert isinstance(flip.body, BlockExpr)
        store = flip.body.exprs[0]
        assert isinstance(store, MethodCallExpr)
        assert isinstance(store.args[2], PathExpr)
        assert store.args[2].segments == ("Ordering", "Acquire")
        assert consume.decl.params[0].name == "big"

    def test_oracle_tables(self):
        loaded = load(DEMO)
        oracle = loaded.oracle
        flip, consume = loaded.crate.items
        receiver = flip.body.exprs[0].args[0]
        assert oracle.type_identity(oracle.expr_ty(receiver)) == "core::sync::atomic::AtomicBool"
        (big,) = oracle.fn_inputs(consume.hir_id)
        assert big.kind is TyKind.ADT
        assert oracle.is_copy(big)
        assert oracle.layout_size(big) == 4096
        assert oracle.snippet(consume.decl.params[0].span, "_") == "Big"

    def test_end_to_end(self):
        loaded = load(DEMO)
        results = CheckerRunner(suppressions=loaded.suppressions).run(loaded.crate, loaded.oracle)
        assert [(d.lint_id, str(d.span)) for d in results.diagnostics] == [
            ("atomic_ordering", "src/lib.rs:8:22"),
            ("large_data_pass_by_val", "src/lib.rs:13:21"),
        ]
        atomic, large = results.diagnostics
        assert atomic.message == "`Ordering::Acquire` is not a valid `atomic::Ordering` for `store`"
        assert large.suggestion.replacement == "&Big"

    def test_missing_file(self, tmp_path):
        with pytest.raises(DumpError) as exc_info:
            load(tmp_path / "nope.json")
        assert "nope.json" in str(exc_info.value)


class TestLoads:

    def test_from_string(self):
        loaded = loads(json.dumps(_minimal()))
        (fn,) = loaded.crate.items
        assert fn.span == Span("src/lib.rs", 1, 1, 1, 1)
        assert loaded.oracle.target.pointer_width == 64

    def test_ids_assigned_after_explicit(self):
        doc = _minimal()
        doc["items"].append({"kind": "fn", "id": 40, "name": "g", "span": _span(2)})
        first, second = loads(doc).crate.items
        assert second.hir_id == 40
        assert first.hir_id == 41

    def test_impl_and_trait(self):
        doc = _minimal(items=[
            {"kind": "impl", "self_ty": "Big", "trait": "demo::Tr", "span": _span(),
             "items": [{"kind": "fn", "name": "m", "span": _span(2)}]},
            {"kind": "trait", "name": "Tr", "span": _span(4),
             "items": [{"name": "m", "span": _span(5), "params": [{"ty": "Big", "span": _span(5, 9)}]}]},
        ])
        impl, trait = loads(doc).crate.items
        assert isinstance(impl, ImplItem) and not impl.is_inherent
        assert isinstance(trait, TraitItem)
        crate = loads(doc).crate
        assert crate.parent_item(crate.items[0].items[0].hir_id) is crate.items[0]

    def test_attrs_and_expansion(self):
        doc = _minimal()
        doc["items"][0]["abi"] = "C"
        doc["items"][0]["attrs"] = [{"name": "proc_macro_derive", "args": ["Foo"]}, {"name": "inline"}]
        doc["items"][0]["span"]["expansion"] = "m!"
        (fn,) = loads(doc).crate.items
        assert fn.abi == "C"
        assert fn.attrs[0].has_meta_list
        assert not fn.attrs[1].has_meta_list
        assert fn.span.from_expansion

    def test_suppressions(self):
        doc = _minimal(suppressions=[
            {"lint": "atomic_ordering", "file": "src/lib.rs", "line": 3},
            {"lint": "large_data_pass_by_val", "file": "benches/*"},
            {"lint": "*"},
        ])
        sm = loads(doc).suppressions
        assert sm.is_suppressed(_diag("atomic_ordering", "src/lib.rs", 4))
        assert sm.is_suppressed(_diag("large_data_pass_by_val", "benches/a.rs", 1))
        assert sm.is_suppressed(_diag("other", "x.rs", 1))

    @pytest.mark.parametrize("mutate,where", [
        (lambda d: d.update(items={}), "$.items"),
        (lambda d: d["items"][0].update(kind="mod"), "$.items[0]"),
        (lambda d: d["items"][0]["params"][0].update(ty="Missing"), "$.items[0].params[0].ty"),
        (lambda d: d["items"][0].update(span={"file": "a.rs", "line": "1", "column": 1}), "$.items[0].span.line"),
        (lambda d: d["items"][0].update(body={"kind": "loop", "span": _span()}), "$.items[0].body"),
        (lambda d: d["types"]["Big"].update(kind="pointer"), "$.types.Big"),
        (lambda d: d["types"]["Big"].update(size=-1), "$.types.Big"),
        (lambda d: d["types"]["Big"].pop("path"), "$.types.Big"),
        (lambda d: d.update(target={"pointer_width": 12}), "$.target.pointer_width"),
        (lambda d: d["items"][0].update(id=True), "$.items[0].id"),
    ])
    def test_malformed(self, mutate, where):
        doc = copy.deepcopy(_minimal())
        mutate(doc)
        with pytest.raises(DumpError) as exc_info:
            loads(doc)
        assert where in str(exc_info.value)

    def test_invalid_json(self):
        with pytest.raises(DumpError):
            loads("{not json")

    def test_not_an_object(self):
        with pytest.raises(DumpError):
            loads("[]")

    def test_duplicate_id(self):
        doc = _minimal(items=[
            {"kind": "trait", "name": "Tr", "span": _span(),
             "items": [{"id": 7, "name": "m", "span": _span(2)}]},
            {"kind": "fn", "id": 7, "name": "free", "span": _span(4),
             "params": [{"ty": "Big", "span": _span(4, 12)}]},
        ])
        with pytest.raises(DumpError) as exc_info:
            loads(doc)
        assert "$.items[1].id" in str(exc_info.value)
        assert "duplicate id 7" in str(exc_info.value)

    def test_distinct_ids_keep_free_fn_checked(self):
        doc = _minimal(items=[
            {"kind": "trait", "name": "Tr", "span": _span(),
             "items": [{"id": 7, "name": "m", "span": _span(2)}]},
            {"kind": "fn", "id": 8, "name": "free", "span": _span(4),
             "params": [{"ty": "Big", "span": _span(4, 12)}]},
        ])
        loaded = loads(doc)
        results = CheckerRunner().run(loaded.crate, loaded.oracle)
        assert [str(d.span) for d in results.diagnostics] == ["src/lib.rs:4:12"]

    def test_invalid_utf8_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_bytes(b"\xff\xfe{}")
        with pytest.raises(DumpError) as exc_info:
            load(path)
        assert "bad.json" in str(exc_info.value)


def _diag(lint_id, file, line):
    return Diagnostic(lint_id=lint_id, message="m", span=Span(file, line, 1, line, 2))


class TestSourceLookup:

    def test_unlisted_file_read_next_to_dump(self, tmp_path, monkeypatch):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "lib.rs").write_text("fn f(a: Big) {}\n")
        dump = tmp_path / "crate.json"
        dump.write_text(json.dumps(_minimal()))
        monkeypatch.chdir(tmp_path / "src")
        loaded = load(dump)
        assert loaded.oracle.snippet(Span("src/lib.rs", 1, 9, 1, 12), "_") == "Big"

    def test_in_memory_dump_never_reads_disk(self, tmp_path, monkeypatch):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "lib.rs").write_text("fn f(a: Big) {}\n")
        monkeypatch.chdir(tmp_path)
        loaded = loads(_minimal())
        assert loaded.oracle.snippet(Span("src/lib.rs", 1, 9, 1, 12), "_") == "_"
        assert loaded.oracle.sources.line("src/lib.rs", 1) is None
