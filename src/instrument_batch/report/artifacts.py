from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Sequence, Tuple

from ..ledger.outcome import OutcomeLedger
from ..util.errors import ReportError
from .reporter import SECTIONS


def summarize(ledger: OutcomeLedger) -> Dict[str, int]:
    """Counts per report section, keyed by lower-cased header, plus total."""
    counts = ledger.counts()
    summary = {s.header.lower(): counts[s.outcome] for s in SECTIONS}
    summary["total"] = len(ledger)
    return summary


def write_report(outdir: Path, lines: Sequence[str], summary: Dict[str, Any]) -> Tuple[Path, Path]:
    """
    Write report.txt and report_summary.json to outdir, returning their paths.
    """
    report_path = outdir / "report.txt"
    summary_path = outdir / "report_summary.json"
    try:
        outdir.mkdir(parents=True, exist_ok=True)
        report_path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        summary_path.write_text(
            json.dumps(summary, sort_keys=True, separators=(",", ":"), ensure_ascii=False),
            encoding="utf-8",
        )
    except OSError as e:
        raise ReportError(f"Failed to write report artifacts to {outdir}: {e}") from e
    return report_path, summary_path
