from __future__ import annotations

from pathlib import Path

import pytest

from instrument_batch.instruments import Instrument, load_jsonl
from instrument_batch.util.errors import InputError


def test_instrument_renders_symbol_and_name() -> None:
    assert str(Instrument(symbol="AAPL")) == "AAPL"
    assert str(Instrument(symbol="AAPL", name="Apple Inc.")) == "AAPL (Apple Inc.)"


def test_from_record_keeps_extra_fields_as_attributes() -> None:
    inst = Instrument.from_record({"symbol": " MSFT ", "currency": "USD", "lotSize": 1})

    assert inst.symbol == "MSFT"
    assert inst.currency == "USD"
    assert inst.name is None
    assert inst.attributes == {"lotSize": 1}


def test_from_record_requires_key() -> None:
    with pytest.raises(InputError):
        Instrument.from_record({"symbol": "  "})


def test_load_jsonl_skips_blank_lines(tmp_path: Path) -> None:
    path = tmp_path / "instruments.jsonl"
    path.write_text('{"symbol": "AAPL"}\n\n{"symbol": "MSFT"}\n', encoding="utf-8")

    assert load_jsonl(path) == [{"symbol": "AAPL"}, {"symbol": "MSFT"}]


def test_load_jsonl_reports_bad_line(tmp_path: Path) -> None:
    path = tmp_path / "instruments.jsonl"
    path.write_text('{"symbol": "AAPL"}\n{oops\n', encoding="utf-8")

    with pytest.raises(InputError, match=":2:"):
        load_jsonl(path)


def test_load_jsonl_rejects_non_objects(tmp_path: Path) -> None:
    path = tmp_path / "instruments.jsonl"
    path.write_text('["AAPL"]\n', encoding="utf-8")

    with pytest.raises(InputError):
        load_jsonl(path)


def test_load_jsonl_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InputError):
        load_jsonl(tmp_path / "missing.jsonl")


def test_from_record_keeps_symbol_with_other_key_field() -> None:
    inst = Instrument.from_record({"isin": "US0378331005", "symbol": "AAPL", "figi": "BBG000B9XRY4"}, key_field="figi")

    assert inst.symbol == "AAPL"
    assert inst.isin == "US0378331005"
    assert inst.attributes == {"figi": "BBG000B9XRY4"}


def test_from_record_falls_back_to_key_when_symbol_missing() -> None:
    inst = Instrument.from_record({"isin": "US0378331005", "name": "Apple"}, key_field="isin")

    assert str(inst) == "US0378331005 (Apple)"
