from __future__ import annotations

from .reporter import COMPLETION_TOKEN, SECTIONS, OutcomeReporter, partition, render_report
from .sinks import LineSink, ListSink, LoggingSink, StreamSink

__all__ = [
    "COMPLETION_TOKEN",
    "SECTIONS",
    "LineSink",
    "ListSink",
    "LoggingSink",
    "OutcomeReporter",
    "StreamSink",
    "partition",
    "render_report",
]
