from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, Mapping, Optional, Union

from .ledger.outcome import LedgerEntry, OutcomeLedger, RecordId
from .logging import get_logger
from .report.artifacts import summarize
from .report.reporter import OutcomeReporter
from .report.sinks import LineSink

LOG = get_logger(__name__)


class StepTimers:
    def __init__(self) -> None:
        self._starts: Dict[str, float] = {}

    def start(self, key: str) -> None:
        self._starts[key] = perf_counter()

    def finish(self, key: str) -> Optional[int]:
        started = self._starts.pop(key, None)
        if started is None:
            return None
        return int((perf_counter() - started) * 1000)


def log_event(
    logger: Any,
    level: int,
    message: str,
    *,
    step: str,
    phase: str,
    timers: Optional[StepTimers] = None,
    timer_key: Optional[str] = None,
    **extra: Any,
) -> None:
    key = timer_key or step
    duration_ms = None
    if timers is not None:
        if phase == "start":
            timers.start(key)
        elif phase in {"complete", "error"}:
            duration_ms = timers.finish(key)
    payload: Dict[str, Any] = {"step": step, "phase": phase, "event": f"{step}.{phase}"}
    if duration_ms is not None:
        payload["duration_ms"] = duration_ms
    payload.update(extra)
    logger.log(level, message, extra=payload)


class ReportStep:
    """
    Batch step that reports the outcome of a finished write phase.

    The ledger is validated when the step is built and frozen before any line is
    emitted; process() returns the completion token for the job runtime.
    """

    name = "report"

    def __init__(
        self,
        ledger: Union[OutcomeLedger, Mapping[RecordId, LedgerEntry]],
        sink: LineSink,
        *,
        timers: Optional[StepTimers] = None,
    ) -> None:
        self._ledger = OutcomeLedger.from_mapping(ledger)
        self._reporter = OutcomeReporter(sink)
        self._timers = timers or StepTimers()

    @property
    def ledger(self) -> OutcomeLedger:
        return self._ledger

    def process(self) -> str:
        self._ledger.freeze()
        log_event(
            LOG,
            logging.INFO,
            "Report started",
            step=self.name,
            phase="start",
            timers=self._timers,
            entries=len(self._ledger),
        )
        try:
            token = self._reporter.report(self._ledger)
        except Exception as e:
            log_event(
                LOG,
                logging.ERROR,
                "Report failed",
                step=self.name,
                phase="error",
                timers=self._timers,
                error=str(e),
            )
            raise
        log_event(
            LOG,
            logging.INFO,
            "Report complete",
            step=self.name,
            phase="complete",
            timers=self._timers,
            **summarize(self._ledger),
        )
        return token
