from __future__ import annotations

from .classify import build_ledger, classify_outcome, stable_record_hash
from .outcome import LedgerEntry, Outcome, OutcomeLedger, RecordId

__all__ = [
    "LedgerEntry",
    "Outcome",
    "OutcomeLedger",
    "RecordId",
    "build_ledger",
    "classify_outcome",
    "stable_record_hash",
]
