from __future__ import annotations

import logging
from typing import List, Optional, Protocol, TextIO, runtime_checkable

from ..util.errors import ReportError


@runtime_checkable
class LineSink(Protocol):
    """
    Append-only, order-preserving destination for report lines.
    Implementations raise ReportError when a line cannot be written.
    """

    def emit(self, line: str) -> None:
        ...


class ListSink:
    """Collects emitted lines in memory."""

    def __init__(self) -> None:
        self.lines: List[str] = []

    def emit(self, line: str) -> None:
        self.lines.append(line)

    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)


class StreamSink:
    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def emit(self, line: str) -> None:
        try:
            self._stream.write(line + "\n")
        except (OSError, ValueError) as e:
            raise ReportError(f"Failed to write report line: {e}") from e


def _handle_or_raise(handler: logging.Handler, record: logging.LogRecord) -> None:
    """
    Pass record to handler, turning the handler's error hook into a ReportError.
    Handler.emit reports its own failures through handleError and returns normally.
    """

    def _fail(failed: logging.LogRecord) -> None:
        raise ReportError(f"Log handler {handler!r} failed to write a report line")

    had_override = "handleError" in handler.__dict__
    saved = handler.__dict__.get("handleError")
    handler.handleError = _fail  # type: ignore[method-assign]
    try:
        delivered = handler.handle(record)
    finally:
        if had_override:
            handler.handleError = saved  # type: ignore[method-assign]
        else:
            del handler.handleError
    if not delivered:
        raise ReportError(f"Log handler {handler!r} filtered out a report line")


class LoggingSink:
    """
    One log record per report line, tagged with the report step.

    Lines go straight to the handlers that would receive them. A logger level,
    logger filter or missing handler that would drop a line raises ReportError,
    as does any handler write failure.
    """

    def __init__(self, logger: logging.Logger, level: int = logging.INFO) -> None:
        self._logger = logger
        self._level = level

    def _handlers(self) -> List[logging.Handler]:
        found: List[logging.Handler] = []
        current: Optional[logging.Logger] = self._logger
        while current is not None:
            found.extend(current.handlers)
            if not current.propagate:
                break
            current = current.parent
        return [h for h in found if self._level >= h.level]

    def emit(self, line: str) -> None:
        name = self._logger.name
        if not self._logger.isEnabledFor(self._level):
            raise ReportError(
                f"Logger '{name}' drops {logging.getLevelName(self._level)} records; report would be lost"
            )
        record = self._logger.makeRecord(
            name,
            self._level,
            "(report)",
            0,
            line,
            (),
            None,
            extra={"step": "report", "phase": "emit"},
        )
        if not self._logger.filter(record):
            raise ReportError(f"Logger '{name}' filtered out a report line")
        handlers = self._handlers()
        if not handlers:
            raise ReportError(f"Logger '{name}' has no handler for report lines")
        for handler in handlers:
            _handle_or_raise(handler, record)
