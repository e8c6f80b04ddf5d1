from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, TypedDict

from .util.errors import InputError

INSTRUMENT_FIELDS = ("symbol", "name", "currency", "exchange", "isin")


class InstrumentRecord(TypedDict, total=False):
    symbol: str
    name: Optional[str]
    currency: Optional[str]
    exchange: Optional[str]
    isin: Optional[str]
    loadedAt: str
    attributes: Dict[str, Any]


@dataclass(frozen=True)
class Instrument:
    symbol: str
    name: Optional[str] = None
    currency: Optional[str] = None
    exchange: Optional[str] = None
    isin: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_record(cls, record: Dict[str, Any], key_field: str = "symbol") -> Instrument:
        """
        Build an instrument from a snapshot record. The ticker always comes from
        "symbol"; key_field only stands in for it when the record has no symbol.
        """
        symbol = record.get("symbol")
        if symbol is None or not str(symbol).strip():
            symbol = record.get(key_field)
        if symbol is None or not str(symbol).strip():
            raise InputError(f"Instrument record is missing 'symbol' and '{key_field}'")
        extra = {k: v for k, v in record.items() if k not in INSTRUMENT_FIELDS}
        return cls(
            symbol=str(symbol).strip(),
            name=record.get("name") or None,
            currency=record.get("currency") or None,
            exchange=record.get("exchange") or None,
            isin=record.get("isin") or None,
            attributes=extra,
        )

    def __str__(self) -> str:
        if self.name:
            return f"{self.symbol} ({self.name})"
        return self.symbol


def load_jsonl(path: Path) -> List[Dict[str, Any]]:
    """
    Read an instrument snapshot (one JSON object per line). Blank lines are skipped.
    """
    if not path.exists():
        raise InputError(f"Snapshot file not found: {path}")
    recs: List[Dict[str, Any]] = []
    with path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                raise InputError(f"{path}:{lineno}: invalid JSON ({e.msg})") from e
            if not isinstance(obj, dict):
                raise InputError(f"{path}:{lineno}: expected a JSON object")
            recs.append(obj)
    return recs
