from __future__ import annotations

from datetime import datetime, timezone


def utc_run_stamp() -> str:
    """Compact UTC stamp used to name per-run output directories."""
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
