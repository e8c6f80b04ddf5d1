from __future__ import annotations

import io
import json
import logging
import os

from instrument_batch.ledger import OutcomeLedger
from instrument_batch.logging import (
    JsonFormatter,
    LogConfig,
    PlainFormatter,
    add_run_log_file,
    setup_logging,
    setup_report_logger,
)
from instrument_batch.report import LoggingSink, OutcomeReporter


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="unit",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_skips_non_serializable_extras() -> None:
    record = _record()
    record.good = {"a": 1, "b": [1, 2]}
    record.bad = {"obj": object()}

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "hello"
    assert payload["good"] == {"a": 1, "b": [1, 2]}
    assert "bad" not in payload


def test_plain_formatter_prefixes_step_and_phase() -> None:
    record = _record("Report complete")
    record.step = "report"
    record.phase = "complete"
    record.duration_ms = 12

    text = PlainFormatter().format(record)

    assert text.endswith("INFO unit: [report:complete] Report complete (duration_ms=12)")


def test_add_run_log_file_writes(tmp_path) -> None:
    if getattr(setup_logging, "_configured", False):
        setattr(setup_logging, "_configured", False)
    setup_logging(LogConfig(level="INFO", json_logs=False))

    log_path = tmp_path / "logs" / "report.log"
    add_run_log_file(log_path)
    add_run_log_file(log_path)

    root = logging.getLogger()
    file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
    assert len([h for h in file_handlers if h.baseFilename == os.path.abspath(log_path)]) == 1

    logging.getLogger("unit.test").info("file log test")

    assert "file log test" in log_path.read_text(encoding="utf-8")


def test_plain_formatter_prints_report_lines_bare() -> None:
    record = _record("  - AAPL")
    record.step = "report"
    record.phase = "emit"

    assert PlainFormatter().format(record) == "  - AAPL"


def test_report_logger_ignores_root_level() -> None:
    root = logging.getLogger()
    previous = root.level
    root.setLevel(logging.ERROR)
    buf = io.StringIO()
    try:
        logger = setup_report_logger(stream=buf)
        OutcomeReporter(LoggingSink(logger)).report(OutcomeLedger())
    finally:
        root.setLevel(previous)

    assert buf.getvalue() == "Added\nUpdated\nStale\n"
    assert logger.propagate is False
