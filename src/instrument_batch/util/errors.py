from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    OK = 0
    CONFIG_ERROR = 2
    INPUT_ERROR = 3
    LEDGER_ERROR = 4
    REPORT_ERROR = 5


class BatchError(Exception):
    """Base error for the instrument batch pipeline."""


class ConfigError(BatchError):
    """Raised for configuration or argument issues."""


class InputError(BatchError):
    """Raised when an instrument snapshot cannot be read or parsed."""


class LedgerError(BatchError):
    """Raised when the outcome ledger is populated incorrectly."""


class LedgerShapeError(LedgerError, TypeError):
    """Raised when a handoff value is not a valid outcome ledger."""


class ReportError(BatchError):
    """Raised when report lines cannot be emitted or written."""


def as_exit_code(exc: BaseException) -> int:
    if isinstance(exc, (ConfigError, ValueError)):
        return int(ExitCode.CONFIG_ERROR)
    if isinstance(exc, InputError):
        return int(ExitCode.INPUT_ERROR)
    if isinstance(exc, LedgerError):
        return int(ExitCode.LEDGER_ERROR)
    if isinstance(exc, (ReportError, BatchError)):
        return int(ExitCode.REPORT_ERROR)
    return 1
