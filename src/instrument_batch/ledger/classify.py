from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, Iterable, Optional

from ..instruments import Instrument
from ..logging import get_logger
from ..util.errors import InputError
from .outcome import Outcome, OutcomeLedger

LOG = get_logger(__name__)

EXCLUDED_FROM_HASH = {"loadedAt", "updatedAt"}


def _clean_for_hash(obj: Any) -> Any:
    """
    Return an object suitable for deterministic hashing:
    - remove excluded keys from dicts
    - sort dict keys
    - keep lists order as-is
    """
    if isinstance(obj, dict):
        return {k: _clean_for_hash(v) for k, v in sorted(obj.items()) if k not in EXCLUDED_FROM_HASH}
    if isinstance(obj, list):
        return [_clean_for_hash(x) for x in obj]
    return obj


def stable_record_hash(record: Dict[str, Any]) -> str:
    """
    SHA256 of an instrument record with transient load timestamps removed.
    """
    payload = json.dumps(_clean_for_hash(record), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def classify_outcome(previous: Optional[Dict[str, Any]], current: Dict[str, Any]) -> Outcome:
    if previous is None:
        return Outcome.CREATED
    if stable_record_hash(previous) != stable_record_hash(current):
        return Outcome.UPDATED
    return Outcome.UNCHANGED


def _record_key(record: Dict[str, Any], key_field: str) -> str:
    raw = record.get(key_field)
    key = "" if raw is None else str(raw).strip()
    if not key:
        raise InputError(f"Instrument record is missing '{key_field}'")
    return key


def _index_by_key(records: Iterable[Dict[str, Any]], key_field: str) -> Dict[str, Dict[str, Any]]:
    by: Dict[str, Dict[str, Any]] = {}
    for r in records:
        key = _record_key(r, key_field)
        if key in by:
            raise InputError(f"Stored snapshot has more than one record for {key_field}={key!r}")
        by[key] = r
    return by


def build_ledger(
    stored: Iterable[Dict[str, Any]],
    incoming: Iterable[Dict[str, Any]],
    *,
    key_field: str = "symbol",
) -> OutcomeLedger:
    """
    Classify every incoming instrument against the stored snapshot and return a
    frozen ledger. Stored instruments that are not in the incoming batch were not
    processed this run and stay out of the ledger.
    """
    stored_by = _index_by_key(stored, key_field)
    ledger = OutcomeLedger()
    for record in incoming:
        key = _record_key(record, key_field)
        outcome = classify_outcome(stored_by.get(key), record)
        ledger.record(key, Instrument.from_record(record, key_field=key_field), outcome)
    ledger.freeze()
    LOG.debug(
        "Ledger built",
        extra={"stored_total": len(stored_by), "ledger_total": len(ledger)},
    )
    return ledger
