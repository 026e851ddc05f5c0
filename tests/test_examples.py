"""
Integration tests: run `codedash` end-to-end against the bundled example project.

These exercise the whole pipeline (load → settings → classify → evaluate →
report) through the CLI entry point, so they catch regressions that unit
tests can't — e.g. yaml config changes, argument wiring, output formats.

Each test:
  1. Calls `codedash.cli.main([...])` (or the module via a subprocess)
  2. Asserts the exit code
  3. Checks the printed text or JSON
"""
from __future__ import annotations

import importlib.util
import json
import subprocess
import sys
from pathlib import Path

import pytest

from codedash.cli import main
from codedash.schema import REPORT_SCHEMA, SWEEP_SCHEMA, validate_report

EXAMPLE_DIR = Path(__file__).parent.parent / "examples" / "auth-service"
ENRICHED    = EXAMPLE_DIR / "enriched.json"
CONFIG      = EXAMPLE_DIR / "codedash.yaml"


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


def _load_example_module(name: str):
    spec = importlib.util.spec_from_file_location(f"example_{name}", EXAMPLE_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


# ── codedash run ──────────────────────────────────────────────────────────────

class TestRunCommand:
    def test_text_report(self, capsys):
        assert _run(["run", str(ENRICHED), "--config", str(CONFIG)]) == 0
        out = capsys.readouterr().out
        assert "Total: 17 nodes" in out
        assert "Excluded: 2 nodes" in out
        assert "--- Top 10 ---" in out
        assert "9 nodes (52.9%)" in out

    def test_discovers_config_in_cwd(self, capsys, monkeypatch):
        monkeypatch.chdir(EXAMPLE_DIR)
        assert _run(["run", "enriched.json", "--top", "3"]) == 0
        out = capsys.readouterr().out
        assert "Excluded: 2 nodes" in out
        assert "--- Top 3 ---" in out

    def test_default_preset_without_config(self, capsys, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        assert _run(["run", str(ENRICHED), "--json"]) == 0
        doc = json.loads(capsys.readouterr().out)
        assert [b["percept"] for b in doc["bindings"]] == [
            "hue", "size", "border", "opacity", "clarity",
        ]
        assert doc["groups"] == []

    def test_json_output(self, capsys):
        assert _run(["run", str(ENRICHED), "--config", str(CONFIG), "--json"]) == 0
        doc = json.loads(capsys.readouterr().out)
        validate_report(doc)
        assert doc["schema"] == REPORT_SCHEMA
        assert doc["total"] == 17
        assert doc["excluded"] == 2

    def test_out_file(self, tmp_path, capsys):
        out = tmp_path / "report.json"
        assert _run(["run", str(ENRICHED), "--config", str(CONFIG), "--out", str(out)]) == 0
        doc = json.loads(out.read_text())
        assert [g["name"] for g in doc["groups"]] == ["auth", "crypto", "other"]

    def test_domain_filter(self, capsys):
        assert _run(["run", str(ENRICHED), "--config", str(CONFIG), "--domain", "crypto"]) == 0
        breakdown = capsys.readouterr().out.split("--- Domains ---")[1]
        assert "crypto" in breakdown
        assert "auth" not in breakdown

    def test_verbose_to_stderr(self, capsys):
        assert _run(["run", str(ENRICHED), "--config", str(CONFIG), "--verbose"]) == 0
        err = capsys.readouterr().err
        assert "[codedash] loaded 17 nodes" in err
        assert "[codedash] 6 bindings" in err

    def test_missing_config(self, capsys, tmp_path):
        assert _run(["run", str(ENRICHED), "--config", str(tmp_path / "nope.yaml")]) == 1
        assert "error: Config file not found" in capsys.readouterr().err

    def test_missing_source(self, capsys, tmp_path):
        assert _run(["run", str(tmp_path / "nope.json"), "--config", str(CONFIG)]) == 1
        assert "error:" in capsys.readouterr().err

    def test_duplicate_percept_is_user_error(self, capsys, tmp_path):
        cfg = tmp_path / "codedash.yaml"
        cfg.write_text(
            "bindings:\n"
            "  - {index: lines, percept: size}\n"
            "  - {index: params, percept: size}\n"
        )
        assert _run(["run", str(ENRICHED), "--config", str(cfg)]) == 1
        assert "percept 'size' used more than once" in capsys.readouterr().err

    def test_unknown_normalizer_is_user_error(self, capsys, tmp_path):
        cfg = tmp_path / "codedash.yaml"
        cfg.write_text("bindings:\n  - {index: lines, percept: size, normalize: zscore}\n")
        assert _run(["run", str(ENRICHED), "--config", str(cfg)]) == 1
        assert "unknown normalizer 'zscore'" in capsys.readouterr().err


# ── codedash sweep ────────────────────────────────────────────────────────────

class TestSweepCommand:
    def test_text(self, capsys):
        assert _run(["sweep", str(ENRICHED)]) == 0
        out = capsys.readouterr().out
        assert "=== Phase 3: Recommended 5 Bindings ===" in out
        assert "bindings:" in out

    def test_json_top(self, capsys):
        assert _run(["sweep", str(ENRICHED), "--top", "3", "--json"]) == 0
        doc = json.loads(capsys.readouterr().out)
        assert doc["schema"] == SWEEP_SCHEMA
        assert [s["percept"] for s in doc["selected"]] == ["hue", "size", "border"]

    def test_generated_config_runs(self, capsys, tmp_path):
        assert _run(["sweep", str(ENRICHED), "--top", "4"]) == 0
        snippet = capsys.readouterr().out.split("=== Generated Config (codedash.yaml) ===\n")[1]
        cfg = tmp_path / "codedash.yaml"
        cfg.write_text(snippet)

        assert _run(["run", str(ENRICHED), "--config", str(cfg), "--json"]) == 0
        doc = json.loads(capsys.readouterr().out)
        assert len(doc["bindings"]) == 4

    def test_bad_source(self, capsys, tmp_path):
        bad = tmp_path / "enriched.json"
        bad.write_text(json.dumps({"files": "nope"}))
        assert _run(["sweep", str(bad)]) == 1
        assert "error: enriched.json must contain a 'files' array" in capsys.readouterr().err


# ── Python API example ────────────────────────────────────────────────────────

class TestCustomExample:
    def test_custom_settings_resolve(self):
        custom = _load_example_module("custom")
        instance = custom.init(ENRICHED, custom.settings(), registry=custom.registry())
        keys = [b.key for b in instance.settings.bindings]
        assert keys == ["hue", "size", "border", "opacity", "clarity", "glow"]
        assert instance.settings.bindings[-1].resolved.name == "minmax"

    def test_custom_report(self):
        custom = _load_example_module("custom")
        report = custom.init(ENRICHED, custom.settings(), registry=custom.registry()).run()
        glow = {e.percept["glow"] for e in report.entries if "glow" in e.percept}
        assert glow <= {0.0, 0.5, 1.0}
        # classes and zero-parameter functions have no density
        assert report.valid["glow"] < report.total

    def test_custom_main(self, capsys):
        assert _load_example_module("custom").main() == 0
        assert "Total: 17 nodes" in capsys.readouterr().out


# ── Installed entry point ─────────────────────────────────────────────────────

class TestModuleEntryPoint:
    def test_python_m(self):
        result = subprocess.run(
            [sys.executable, "-m", "codedash.cli", "run", "enriched.json", "--json"],
            cwd=str(EXAMPLE_DIR),
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, result.stderr
        assert json.loads(result.stdout)["total"] == 17
