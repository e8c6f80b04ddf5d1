from __future__ import annotations

import logging
import sys

from .config import RunConfig, dump_config, load_run_config
from .instruments import load_jsonl
from .ledger.classify import build_ledger
from .logging import LogConfig, add_run_log_file, get_logger, setup_logging, setup_report_logger
from .report.artifacts import summarize, write_report
from .report.reporter import render_report
from .report.sinks import LoggingSink
from .step import ReportStep, StepTimers, log_event
from .util.errors import ConfigError, as_exit_code
from .util.rich_summary import render_report_summary_table

LOG = get_logger(__name__)


def cmd_report(cfg: RunConfig) -> int:
    if not cfg.incoming:
        raise ConfigError("--incoming must be provided for report")
    timers = StepTimers()
    add_run_log_file(cfg.outdir / "logs" / "report.log")
    log_event(
        LOG,
        logging.INFO,
        "Write phase started",
        step="write",
        phase="start",
        timers=timers,
        config=dump_config(cfg),
    )

    stored = load_jsonl(cfg.stored) if cfg.stored else []
    incoming = load_jsonl(cfg.incoming)
    ledger = build_ledger(stored, incoming, key_field=cfg.key_field)
    log_event(
        LOG,
        logging.INFO,
        "Write phase complete",
        step="write",
        phase="complete",
        timers=timers,
        entries=len(ledger),
    )

    step = ReportStep(ledger, LoggingSink(setup_report_logger(json_logs=cfg.json_logs)), timers=timers)
    token = step.process()

    summary = summarize(ledger)
    write_report(cfg.outdir, render_report(ledger), summary)
    render_report_summary_table(
        enabled=cfg.summary_table,
        status=token,
        summary=summary,
        outdir=str(cfg.outdir),
    )
    return 0


def main() -> None:
    try:
        command, cfg = load_run_config()
        setup_logging(LogConfig(level=cfg.log_level, json_logs=cfg.json_logs))

        if command == "report":
            code = cmd_report(cfg)
        else:
            raise ConfigError(f"Unknown command: {command}")

        sys.exit(code)
    except SystemExit:
        raise
    except BrokenPipeError:
        # stdout closed early (e.g. piped to head)
        sys.exit(0)
    except Exception as e:
        setup_logging(LogConfig())
        LOG.error("Execution failed", extra={"error": str(e)})
        sys.exit(as_exit_code(e))


if __name__ == "__main__":
    main()
