from __future__ import annotations

from collections.abc import Hashable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..util.errors import LedgerError, LedgerShapeError

RecordId = Hashable


class Outcome(str, Enum):
    """Result of writing one record during a batch run."""

    CREATED = "created"
    UPDATED = "updated"
    # inspected this run, nothing to write
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class LedgerEntry:
    value: Any
    outcome: Outcome

    def __post_init__(self) -> None:
        if not isinstance(self.outcome, Outcome):
            raise LedgerShapeError(f"Ledger entry outcome must be an Outcome, got {self.outcome!r}")


class OutcomeLedger:
    """
    Per-run record of every processed instrument and its write outcome.

    The write phase calls record() once per instrument. freeze() ends
    population; the reporting step only reads a frozen ledger.
    """

    def __init__(self) -> None:
        self._entries: Dict[RecordId, LedgerEntry] = {}
        self._frozen = False

    @classmethod
    def from_mapping(cls, data: Any) -> OutcomeLedger:
        """
        Validate a handoff value and build a frozen ledger from it.
        Raises LedgerShapeError when data is not a mapping of record ids to LedgerEntry.
        """
        if isinstance(data, OutcomeLedger):
            data.freeze()
            return data
        if not isinstance(data, Mapping):
            raise LedgerShapeError(f"Expected a mapping of record ids to ledger entries, got {type(data).__name__}")
        ledger = cls()
        for record_id, entry in data.items():
            if not isinstance(entry, LedgerEntry):
                raise LedgerShapeError(
                    f"Ledger value for {record_id!r} must be a LedgerEntry, got {type(entry).__name__}"
                )
            ledger._add(record_id, entry)
        ledger.freeze()
        return ledger

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def record(self, record_id: RecordId, value: Any, outcome: Outcome) -> LedgerEntry:
        if self._frozen:
            raise LedgerError(f"Ledger is frozen; cannot record {record_id!r}")
        entry = LedgerEntry(value=value, outcome=outcome)
        self._add(record_id, entry)
        return entry

    def _add(self, record_id: RecordId, entry: LedgerEntry) -> None:
        if not isinstance(record_id, Hashable):
            raise LedgerShapeError(f"Record id must be hashable, got {type(record_id).__name__}")
        if record_id in self._entries:
            raise LedgerError(f"Record {record_id!r} already recorded in this run")
        self._entries[record_id] = entry

    def get(self, record_id: RecordId) -> Optional[LedgerEntry]:
        return self._entries.get(record_id)

    def values(self) -> List[LedgerEntry]:
        return list(self._entries.values())

    def items(self) -> List[Tuple[RecordId, LedgerEntry]]:
        return list(self._entries.items())

    def counts(self) -> Dict[Outcome, int]:
        out = {outcome: 0 for outcome in Outcome}
        for entry in self._entries.values():
            out[entry.outcome] += 1
        return out

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RecordId]:
        return iter(self._entries)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._entries

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"OutcomeLedger({len(self._entries)} entries, {state})"
