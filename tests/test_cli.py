# tests/test_cli.py
"""
Tests for the ``hirlint`` command line.
"""

import json
import logging
from pathlib import Path

import pytest

from hirlint.config import CONFIG_ENV_VAR, CONFIG_FILENAME
from hirlint.reporter import HTML_ENV_VAR, SARIF_ENV_VAR
from hirlint.runner import EXIT_INFRA, EXIT_OK, main, run_dump

DEMO = str((Path(__file__).parent / "data" / "demo.hir.json").resolve())


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for var in (CONFIG_ENV_VAR, SARIF_ENV_VAR, HTML_ENV_VAR):
        monkeypatch.delenv(var, raising=False)
    yield
    # main() attaches a stderr handler; drop it so the next test's capture is used
    logger = logging.getLogger("hirlint")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


class TestMain:

    def test_json_output(self, capsys):
        assert main([DEMO, "--output", "json"]) == EXIT_OK
        lines = capsys.readouterr().out.splitlines()
        assert [json.loads(line)["lint"] for line in lines] == ["atomic_ordering", "large_data_pass_by_val"]

    def test_gcc_output(self, capsys):
        assert main([DEMO, "--output", "gcc"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "src/lib.rs:8:22: warning: `Ordering::Acquire` is not a valid" in out
        assert "src/lib.rs:13:21: warning: this argument (4096 byte)" in out

    def test_human_output(self, capsys):
        assert main([DEMO]) == EXIT_OK
        out = capsys.readouterr().out
        assert "help: consider passing by ref instead: `&Big`" in out
        assert "2 warnings (2 total)" in out

    def test_summary_output(self, capsys):
        assert main([DEMO, "--output", "summary"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "2 diagnostics" in out
        assert "large_data_pass_by_val: 1 findings" in out

    def test_select_checkers(self, capsys):
        main([DEMO, "--output", "gcc", "--checkers", "large_data_pass_by_val"])
        out = capsys.readouterr().out.strip().splitlines()
        assert len(out) == 1
        assert out[0].endswith("[large_data_pass_by_val]")

    def test_allow(self, capsys):
        main([DEMO, "--output", "gcc", "--allow", "atomic_ordering"])
        out = capsys.readouterr().out
        assert "[atomic_ordering]" not in out
        assert "[large_data_pass_by_val]" in out

    def test_size_limit_flag(self, capsys):
        main([DEMO, "--output", "gcc", "--large-data-size-min-limit", "4096"])
        assert "[large_data_pass_by_val]" not in capsys.readouterr().out

    def test_discovered_config(self, tmp_path, capsys):
        (tmp_path / CONFIG_FILENAME).write_text('allow = ["large_data_pass_by_val"]\n')
        main([DEMO, "--output", "gcc"])
        assert "[large_data_pass_by_val]" not in capsys.readouterr().out

    def test_explicit_config(self, tmp_path, capsys):
        cfg = tmp_path / "custom.toml"
        cfg.write_text("large-data-size-min-limit = 8192\n")
        main([DEMO, "--output", "gcc", "--config", str(cfg)])
        assert "[large_data_pass_by_val]" not in capsys.readouterr().out

    def test_bad_config(self, tmp_path):
        cfg = tmp_path / "custom.toml"
        cfg.write_text("unknown-key = 1\n")
        assert main([DEMO, "--config", str(cfg)]) == EXIT_INFRA

    def test_negative_limit(self):
        assert main([DEMO, "--large-data-size-min-limit", "-1"]) == EXIT_INFRA

    def test_missing_dump(self, tmp_path):
        assert main([str(tmp_path / "missing.json")]) == EXIT_INFRA

    def test_malformed_dump(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"items": [{"kind": "mod"}]}')
        assert main([str(bad)]) == EXIT_INFRA

    def test_undecodable_dump(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_bytes(b"\xff\xfe")
        assert main([str(bad)]) == EXIT_INFRA

    def test_undecodable_config(self, tmp_path):
        cfg = tmp_path / "custom.toml"
        cfg.write_bytes(b"allow = [\"\xff\"]\n")
        assert main([DEMO, "--config", str(cfg)]) == EXIT_INFRA

    def test_duplicate_id_dump(self, tmp_path):
        doc = json.loads(Path(DEMO).read_text())
        doc["items"][1]["id"] = doc["items"][0]["id"] = 7
        bad = tmp_path / "dup.json"
        bad.write_text(json.dumps(doc))
        assert main([str(bad)]) == EXIT_INFRA

    def test_no_dump_argument(self):
        assert main([]) == EXIT_INFRA

    def test_list_checkers(self, capsys):
        assert main(["--list-checkers"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "atomic_ordering" in out
        assert "group: perf" in out


class TestRunDump:

    def test_sarif_via_env(self, tmp_path, monkeypatch, capsys):
        sarif = tmp_path / "out.sarif"
        monkeypatch.setenv(SARIF_ENV_VAR, str(sarif))
        assert run_dump(DEMO) == EXIT_OK
        results = json.loads(sarif.read_text())["runs"][0]["results"]
        assert len(results) == 2
