from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..ledger.outcome import LedgerEntry, Outcome, OutcomeLedger
from ..util.errors import ReportError
from .sinks import LineSink

COMPLETION_TOKEN = "reported"
BULLET_PREFIX = "  - "


@dataclass(frozen=True)
class Section:
    header: str
    outcome: Outcome


SECTIONS: Tuple[Section, ...] = (
    Section("Added", Outcome.CREATED),
    Section("Updated", Outcome.UPDATED),
    Section("Stale", Outcome.UNCHANGED),
)

if {s.outcome for s in SECTIONS} != set(Outcome) or len(SECTIONS) != len(Outcome):
    raise RuntimeError("Every Outcome needs exactly one report section")


def partition(ledger: OutcomeLedger) -> Dict[Outcome, List[LedgerEntry]]:
    """
    Split ledger entries by outcome in one pass, keeping ledger order inside
    each group. Every entry lands in exactly one group.
    """
    groups: Dict[Outcome, List[LedgerEntry]] = {s.outcome: [] for s in SECTIONS}
    for entry in ledger.values():
        groups[entry.outcome].append(entry)
    return groups


def render_value(value: object) -> str:
    return str(value)


def render_report(ledger: OutcomeLedger) -> List[str]:
    groups = partition(ledger)
    lines: List[str] = []
    for section in SECTIONS:
        lines.append(section.header)
        lines.extend(BULLET_PREFIX + render_value(entry.value) for entry in groups[section.outcome])
    return lines


class OutcomeReporter:
    """
    Emits the Added/Updated/Stale report for a ledger through a sink.

    All lines are rendered before the first one is emitted, so a rendering
    problem never leaves a truncated report behind.
    """

    def __init__(self, sink: LineSink) -> None:
        if not isinstance(sink, LineSink):
            raise TypeError(f"sink must provide emit(line), got {type(sink).__name__}")
        self._sink = sink

    def report(self, ledger: OutcomeLedger) -> str:
        if not isinstance(ledger, OutcomeLedger):
            ledger = OutcomeLedger.from_mapping(ledger)
        for line in render_report(ledger):
            try:
                self._sink.emit(line)
            except ReportError:
                raise
            except Exception as e:
                raise ReportError(f"Report sink failed: {e}") from e
        return COMPLETION_TOKEN
