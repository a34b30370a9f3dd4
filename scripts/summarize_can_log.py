#!/usr/bin/env python3
"""
Summarize a CAN CSV log before building a route log from it.

Reports message counts, per-bus inter-message intervals and detected
logging gaps as JSON (stdout, or --out).

Usage:
  python scripts/summarize_can_log.py drive_can.csv --out summary.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np

from route_log import (
    CANLogError,
    CANMessage,
    build_route_timeline,
    find_missing_can_messages,
    load_params,
    read_alerts,
    read_can_log,
)
from route_log.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

NS_PER_MS = 1_000_000
NS_PER_S = 1_000_000_000
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _sanitize(value):
    if isinstance(value, dict):
        return {k: _sanitize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sanitize(v) for v in value]
    if isinstance(value, np.ndarray):
        return _sanitize(value.tolist())
    if isinstance(value, (float, np.floating)):
        if not np.isfinite(value):
            return None
        return float(value)
    if isinstance(value, (int, np.integer)):
        return int(value)
    return value


def write_json(path: Optional[Path], payload: Dict) -> None:
    text = json.dumps(_sanitize(payload), indent=2, sort_keys=True, allow_nan=False)
    if path is None:
        print(text)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        handle.write(text + "\n")


def basic_stats(values: np.ndarray) -> Dict[str, float]:
    if values.size == 0:
        return {
            "count": 0,
            "mean": float("nan"),
            "p50": float("nan"),
            "p95": float("nan"),
            "max": float("nan"),
        }
    p50, p95 = np.percentile(values, [50, 95])
    return {
        "count": int(values.size),
        "mean": float(np.mean(values)),
        "p50": float(p50),
        "p95": float(p95),
        "max": float(np.max(values)),
    }


def bus_summary(messages: Sequence[CANMessage]) -> Dict[str, Dict]:
    """Message count and inter-message interval stats (ms) per bus."""
    by_bus: Dict[int, List[int]] = {}
    for m in messages:
        by_bus.setdefault(m.bus_no, []).append(m.timestamp)

    out = {}
    for bus_no in sorted(by_bus):
        ts = np.asarray(by_bus[bus_no], dtype=np.int64)
        intervals_ms = np.diff(ts) / NS_PER_MS
        out[str(bus_no)] = {
            "messages": int(ts.size),
            "unique_ids": len({m.can_id for m in messages if m.bus_no == bus_no}),
            "interval_ms": basic_stats(intervals_ms),
        }
    return out


def gap_summary(messages: Sequence[CANMessage], threshold_ns: int) -> List[Dict]:
    alerts = find_missing_can_messages(messages, threshold_ns)
    gaps = []
    for start, end in zip(alerts[::2], alerts[1::2]):
        gaps.append({
            "start_ns": start.timestamp,
            "end_ns": end.timestamp,
            "duration_s": (end.timestamp - start.timestamp) / NS_PER_S,
        })
    return gaps


def summarize(
    csv_log: Path,
    ts_offset_ns: Optional[int] = None,
    params_file: Optional[str] = None,
    alerts_file: Optional[Path] = None,
) -> Dict:
    params = load_params(params_file)
    messages, ts_offs = read_can_log(
        csv_log, ts_offset_ns, params['can_log']['direction_markers']
    )
    alerts = read_alerts(alerts_file) if alerts_file is not None else []
    timeline = build_route_timeline(messages, alerts=alerts, params=params)

    duration_s = 0.0
    if messages:
        duration_s = (messages[-1].timestamp - messages[0].timestamp) / NS_PER_S

    return {
        "path": str(csv_log),
        "messages": len(messages),
        "ts_offset_ns": ts_offs,
        "duration_s": duration_s,
        "buses": bus_summary(messages),
        "gaps": gap_summary(messages, params['gaps']['missing_threshold_ns']),
        "operator_alerts": len(alerts),
        "timeline_entries": len(timeline),
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Summarize a CAN CSV log.")
    parser.add_argument("csv_log", type=Path, help="CAN log in CSV format (SavvyCAN or plain).")
    parser.add_argument(
        "--ts-offset-ns",
        type=int,
        default=None,
        help="Timestamp offset in ns. Default: first message is at 0.",
    )
    parser.add_argument("--params", default=None, help="Optional JSON params file.")
    parser.add_argument("--alerts", type=Path, default=None, help="Optional JSON alerts file.")
    parser.add_argument("--out", type=Path, default=None, help="Output JSON path (default: stdout).")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Log level (default: ROUTE_LOG_LEVEL or INFO).",
    )
    args = parser.parse_args(argv)

    try:
        setup_logging(args.log_level)
        summary = summarize(args.csv_log, args.ts_offset_ns, args.params, args.alerts)
    except (CANLogError, ValueError, OSError) as exc:
        cause = f" ({exc.__cause__})" if exc.__cause__ is not None else ""
        print(f"Failed to summarize {args.csv_log}: {exc}{cause}", file=sys.stderr)
        return 1

    write_json(args.out, summary)
    if args.out is not None:
        logger.info("Summary written to %s", args.out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
