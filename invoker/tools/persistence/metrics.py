"""In-process counters and latency aggregates for record store operations.

Keyed by (op, table). Relies on the GIL for the simple dict updates; good
enough for the audit/workflow tables which see a handful of writes per
invocation.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

_counter: Dict[Tuple[str, str], int] = {}
_errors: Dict[Tuple[str, str], int] = {}
_latency: Dict[Tuple[str, str], Dict[str, float]] = {}


def inc(op: str, table: str):
    key = (op, table)
    _counter[key] = _counter.get(key, 0) + 1


def inc_error(op: str, table: str):
    key = (op, table)
    _errors[key] = _errors.get(key, 0) + 1


def observe(op: str, table: str, ms: float):  # min/max/count/total
    key = (op, table)
    bucket = _latency.setdefault(key, {"count": 0, "total": 0.0, "min": ms, "max": ms})
    bucket["count"] += 1
    bucket["total"] += ms
    bucket["min"] = min(bucket["min"], ms)
    bucket["max"] = max(bucket["max"], ms)


def reset():
    _counter.clear()
    _errors.clear()
    _latency.clear()


def snapshot() -> List[dict]:
    out = []
    for (op, table), c in _counter.items():
        row = {"op": op, "table": table, "count": c, "errors": _errors.get((op, table), 0)}
        lat = _latency.get((op, table))
        if lat and lat["count"]:
            row.update({
                "lat_min_ms": round(lat["min"], 2),
                "lat_max_ms": round(lat["max"], 2),
                "lat_avg_ms": round(lat["total"] / lat["count"], 2),
            })
        out.append(row)
    return sorted(out, key=lambda r: (r["op"], r["table"]))

__all__ = ["inc", "inc_error", "observe", "reset", "snapshot"]
