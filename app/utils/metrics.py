# =============================================
# File: app/utils/metrics.py
# Purpose: In-process counters & latency stats for /metrics
# =============================================
from __future__ import annotations
from typing import Dict, Any, List
import threading
import time

_lock = threading.Lock()

# Counters
_counters: Dict[str, int] = {
    "requests_total": 0,
    "request_errors_total": 0,
    "recommendations_served_total": 0,
    "empty_results_total": 0,
    "signal_failures_total": 0,
}

# Labeled counters
_signal_failures: Dict[str, int] = {}   # signal name -> count

# Per-endpoint latency samples (bounded) and counters for avg/p95
_MAX_SAMPLES: int = 1000
_endpoint_latency: Dict[str, List[float]] = {}   # key: "METHOD /path" -> [ms]
_endpoint_counts: Dict[str, int] = {}            # key: "METHOD /path" -> count


def _avg(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _p95(values: List[float]) -> float:
    if not values:
        return 0.0
    xs = sorted(values)
    idx = int(0.95 * (len(xs) - 1))
    return xs[idx]


def record_request() -> None:
    with _lock:
        _counters["requests_total"] += 1


def record_request_error() -> None:
    with _lock:
        _counters["request_errors_total"] += 1


def record_recommendation(served: int) -> None:
    with _lock:
        _counters["recommendations_served_total"] += int(served)
        if served == 0:
            _counters["empty_results_total"] += 1


def record_signal_failure(signal: str) -> None:
    with _lock:
        _counters["signal_failures_total"] += 1
        _signal_failures[signal] = _signal_failures.get(signal, 0) + 1


def record_endpoint(method: str, path: str, latency_ms: float) -> None:
    key = f"{method.upper()} {path}"
    with _lock:
        _endpoint_counts[key] = _endpoint_counts.get(key, 0) + 1
        buf = _endpoint_latency.setdefault(key, [])
        buf.append(float(latency_ms))
        # bound buffer
        if len(buf) > _MAX_SAMPLES:
            del buf[: len(buf) - _MAX_SAMPLES]


def snapshot() -> Dict[str, Any]:
    with _lock:
        perf: Dict[str, Dict[str, float]] = {}
        for key, buf in _endpoint_latency.items():
            perf[key] = {
                "count": float(_endpoint_counts.get(key, 0)),
                "avg_latency_ms": _avg(buf),
                "p95_latency_ms": _p95(buf),
            }
        return {
            "counters": dict(_counters),
            "signal_failures": dict(_signal_failures),
            "performance": {
                "endpoints": perf,
                "generated_at": time.time(),
            },
        }


def reset() -> None:
    with _lock:
        for k in _counters:
            _counters[k] = 0
        _signal_failures.clear()
        _endpoint_latency.clear()
        _endpoint_counts.clear()
