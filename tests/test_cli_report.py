from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

from instrument_batch import cli
from instrument_batch.config import load_run_config
from instrument_batch.util.errors import ConfigError, ExitCode


def _write_jsonl(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def snapshots(tmp_path: Path) -> tuple[Path, Path]:
    stored = _write_jsonl(
        tmp_path / "stored.jsonl",
        [
            '{"symbol": "MSFT", "currency": "USD"}',
            '{"symbol": "GOOG", "currency": "USD", "loadedAt": "2024-01-01T00:00:00Z"}',
        ],
    )
    incoming = _write_jsonl(
        tmp_path / "incoming.jsonl",
        [
            '{"symbol": "AAPL", "name": "Apple Inc.", "currency": "USD"}',
            '{"symbol": "MSFT", "currency": "EUR"}',
            '{"symbol": "GOOG", "currency": "USD", "loadedAt": "2025-01-01T00:00:00Z"}',
        ],
    )
    return stored, incoming


def _single_run_dir(base: Path) -> Path:
    runs = [p for p in base.iterdir() if p.is_dir()]
    assert len(runs) == 1
    return runs[0]


def test_cmd_report_writes_artifacts(tmp_path: Path, snapshots) -> None:
    stored, incoming = snapshots
    _, cfg = load_run_config(
        argv=["report", "--stored", str(stored), "--incoming", str(incoming), "--outdir", str(tmp_path / "out")]
    )

    assert cli.cmd_report(cfg) == 0

    run_dir = _single_run_dir(tmp_path / "out")
    assert (run_dir / "report.txt").read_text(encoding="utf-8") == (
        "Added\n  - AAPL (Apple Inc.)\nUpdated\n  - MSFT\nStale\n  - GOOG\n"
    )
    summary = json.loads((run_dir / "report_summary.json").read_text(encoding="utf-8"))
    assert summary == {"added": 1, "updated": 1, "stale": 1, "total": 3}
    assert (run_dir / "logs" / "report.log").exists()


def test_cmd_report_without_stored_marks_everything_added(tmp_path: Path, snapshots) -> None:
    _, incoming = snapshots
    _, cfg = load_run_config(argv=["report", "--incoming", str(incoming), "--outdir", str(tmp_path / "out")])

    cli.cmd_report(cfg)

    text = (_single_run_dir(tmp_path / "out") / "report.txt").read_text(encoding="utf-8")
    assert text.startswith("Added\n  - AAPL (Apple Inc.)\n  - MSFT\n  - GOOG\nUpdated\nStale\n")


def test_cmd_report_requires_incoming(tmp_path: Path) -> None:
    _, cfg = load_run_config(argv=["report", "--outdir", str(tmp_path)])

    with pytest.raises(ConfigError):
        cli.cmd_report(cfg)


def test_main_maps_input_errors_to_exit_code(tmp_path: Path, monkeypatch) -> None:
    bad = _write_jsonl(tmp_path / "bad.jsonl", ["{not json"])
    monkeypatch.setattr(sys, "argv", ["instrument-batch", "report", "--incoming", str(bad), "--outdir", str(tmp_path)])
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)

    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    assert excinfo.value.code == int(ExitCode.INPUT_ERROR)


def test_main_success_exit_code(tmp_path: Path, snapshots, monkeypatch) -> None:
    stored, incoming = snapshots
    monkeypatch.setattr(
        sys,
        "argv",
        ["instrument-batch", "report", "--stored", str(stored), "--incoming", str(incoming), "--outdir", str(tmp_path)],
    )
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)

    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    assert excinfo.value.code == 0


def test_cmd_report_prints_report_when_log_level_is_warning(tmp_path: Path, snapshots, capsys) -> None:
    stored, incoming = snapshots
    _, cfg = load_run_config(
        argv=[
            "report",
            "--stored",
            str(stored),
            "--incoming",
            str(incoming),
            "--outdir",
            str(tmp_path / "out"),
            "--log-level",
            "WARNING",
        ]
    )
    root = logging.getLogger()
    previous = root.level
    root.setLevel(logging.WARNING)
    try:
        cli.cmd_report(cfg)
    finally:
        root.setLevel(previous)

    out = capsys.readouterr().out
    assert "Added\n  - AAPL (Apple Inc.)\nUpdated\n  - MSFT\nStale\n  - GOOG\n" in out
