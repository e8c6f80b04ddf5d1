from __future__ import annotations

import argparse
import json
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .util.time import utc_run_stamp

# --------
# Defaults
# --------
DEFAULT_KEY_FIELD = "symbol"
DEFAULT_OUT_BASE = "out"
ALLOWED_CONFIG_KEYS = {
    "stored",
    "incoming",
    "outdir",
    "key_field",
    "json_logs",
    "log_level",
    "summary_table",
}
BOOL_CONFIG_KEYS = {"json_logs", "summary_table"}
PATH_CONFIG_KEYS = {"stored", "incoming", "outdir"}
STR_CONFIG_KEYS = {"key_field", "log_level"}


@dataclass(frozen=True)
class RunConfig:
    outdir: Path
    stored: Optional[Path] = None
    incoming: Optional[Path] = None
    key_field: str = DEFAULT_KEY_FIELD
    json_logs: bool = False
    log_level: str = "INFO"
    summary_table: bool = False


def _parse_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to parse config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Top-level config must be an object")
    return data


def _env_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    return raw


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None:
        return None
    raw = raw.strip().lower()
    if not raw:
        return None
    return raw in {"1", "true", "yes", "on"}


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        raw = value.strip().lower()
        if raw in {"1", "true", "yes", "on"}:
            return True
        if raw in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"Config field '{key}' must be a boolean")


def _normalize_config_file(data: Dict[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(data.keys()) - ALLOWED_CONFIG_KEYS)
    if unknown:
        warnings.warn(f"Unknown config keys ignored: {', '.join(unknown)}")
    normalized: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in ALLOWED_CONFIG_KEYS:
            continue
        if value is None:
            continue
        if key in BOOL_CONFIG_KEYS:
            normalized[key] = _coerce_bool(key, value)
        elif key in PATH_CONFIG_KEYS:
            if not isinstance(value, (str, Path)):
                raise ValueError(f"Config field '{key}' must be a string path")
            normalized[key] = value
        elif key in STR_CONFIG_KEYS:
            if not isinstance(value, str):
                raise ValueError(f"Config field '{key}' must be a string")
            normalized[key] = value
    return normalized


def _compact_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Drop keys with None values so they don't override lower-precedence config.
    """
    return {k: v for k, v in data.items() if v is not None}


def _timestamp_dir(base: Optional[Union[str, Path]]) -> Path:
    return Path(base or DEFAULT_OUT_BASE) / utc_run_stamp()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="instrument-batch", description="Instrument batch outcome reporting")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_report = subparsers.add_parser("report", help="Classify an incoming batch and report outcomes")
    p_report.add_argument("--config", type=Path, help="Optional YAML/JSON config file")
    p_report.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable JSON logs",
    )
    p_report.add_argument("--log-level", default=None, help="Log level (INFO, DEBUG, ...)")
    p_report.add_argument("--stored", type=Path, default=None, help="Stored instruments snapshot (JSONL)")
    p_report.add_argument("--incoming", type=Path, default=None, help="Incoming instrument batch (JSONL)")
    p_report.add_argument("--outdir", type=Path, default=None, help="Output base directory (out/TS)")
    p_report.add_argument(
        "--key-field",
        default=None,
        help=f"Record field used as the instrument key (default: {DEFAULT_KEY_FIELD})",
    )
    p_report.add_argument(
        "--summary-table",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Print a summary table after the report",
    )
    return parser


def load_run_config(
    args: Optional[argparse.Namespace] = None,
    argv: Optional[list[str]] = None,
) -> Tuple[str, RunConfig]:
    """
    Build RunConfig by merging defaults, optional config file, env vars, and CLI args.
    Precedence (low -> high): defaults < config file < env < CLI.
    """
    ns = args if args is not None else build_parser().parse_args(argv)

    base: Dict[str, Any] = {
        "stored": None,
        "incoming": None,
        "outdir": None,
        "key_field": DEFAULT_KEY_FIELD,
        "json_logs": False,
        "log_level": "INFO",
        "summary_table": False,
    }

    file_cfg: Dict[str, Any] = {}
    if getattr(ns, "config", None):
        file_cfg = _normalize_config_file(_parse_config_file(Path(ns.config)))

    env_cfg: Dict[str, Any] = _compact_dict(
        {
            "stored": _env_str("INSTR_BATCH_STORED"),
            "incoming": _env_str("INSTR_BATCH_INCOMING"),
            "outdir": _env_str("INSTR_BATCH_OUTDIR"),
            "key_field": _env_str("INSTR_BATCH_KEY_FIELD"),
            "json_logs": _env_bool("INSTR_BATCH_JSON_LOGS"),
            "log_level": _env_str("INSTR_BATCH_LOG_LEVEL"),
            "summary_table": _env_bool("INSTR_BATCH_SUMMARY_TABLE"),
        }
    )

    cli_cfg: Dict[str, Any] = _compact_dict(
        {
            "stored": getattr(ns, "stored", None),
            "incoming": getattr(ns, "incoming", None),
            "outdir": getattr(ns, "outdir", None),
            "key_field": getattr(ns, "key_field", None),
            "json_logs": getattr(ns, "json_logs", None),
            "log_level": getattr(ns, "log_level", None),
            "summary_table": getattr(ns, "summary_table", None),
        }
    )

    merged = {**base, **file_cfg, **env_cfg, **cli_cfg}

    cfg = RunConfig(
        outdir=_timestamp_dir(merged.get("outdir")),
        stored=Path(merged["stored"]) if merged.get("stored") else None,
        incoming=Path(merged["incoming"]) if merged.get("incoming") else None,
        key_field=str(merged.get("key_field") or DEFAULT_KEY_FIELD),
        json_logs=bool(merged["json_logs"]),
        log_level=str(merged.get("log_level") or "INFO").upper(),
        summary_table=bool(merged["summary_table"]),
    )
    return ns.command, cfg


def dump_config(cfg: RunConfig) -> Dict[str, Any]:
    return {
        "outdir": str(cfg.outdir),
        "stored": str(cfg.stored) if cfg.stored else None,
        "incoming": str(cfg.incoming) if cfg.incoming else None,
        "key_field": cfg.key_field,
        "json_logs": cfg.json_logs,
        "log_level": cfg.log_level,
        "summary_table": cfg.summary_table,
    }
