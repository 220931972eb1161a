"""
Stage latency metrics.

``timed_operation`` wraps a pipeline stage (validation, rendering) and emits
one sample when the stage ends: always as a debug log line, and as a CSV row
under ``METRICS_DIR`` when ``METRICS_ENABLED`` is set. A failing write is
logged and never reaches the request.
"""

from __future__ import annotations

import csv
import os
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from dotenv import load_dotenv

from telemetry.logging_utils import get_logger

load_dotenv()

logger = get_logger(__name__)

DEFAULT_METRICS_DIR = Path(__file__).resolve().parent.parent / "metrics"
CSV_FILENAME = "agreement_metrics.csv"
CSV_COLUMNS = ["timestamp", "component", "detail", "latency_ms", "outcome", "agreement_number"]
_TRUTHY = {"1", "true", "yes", "on"}

_write_lock = threading.Lock()


def metrics_enabled() -> bool:
    return (os.getenv("METRICS_ENABLED") or "").strip().lower() in _TRUTHY


def metrics_path() -> Path:
    return Path(os.getenv("METRICS_DIR") or DEFAULT_METRICS_DIR) / CSV_FILENAME


def _append_row(path: Path, row: Dict[str, Any]) -> None:
    with _write_lock:
        path.parent.mkdir(parents=True, exist_ok=True)
        new_file = not path.exists()
        with path.open("a", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
            if new_file:
                writer.writeheader()
            writer.writerow({key: "" if value is None else value for key, value in row.items()})


def log_metric(
    component: str,
    detail: Optional[str],
    *,
    latency_ms: Optional[float] = None,
    outcome: str = "ok",
    agreement_number: Optional[str] = None,
) -> None:
    row = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "component": component,
        "detail": detail or "",
        "latency_ms": None if latency_ms is None else round(latency_ms, 3),
        "outcome": outcome,
        "agreement_number": agreement_number,
    }
    logger.debug("metric", extra=row)
    if not metrics_enabled():
        return
    path = metrics_path()
    try:
        _append_row(path, row)
    except OSError as exc:
        logger.warning("metric_write_failed", extra={"error": str(exc), "path": str(path)})


@dataclass
class StageTimer:
    component: str
    detail: Optional[str]
    agreement_number: Optional[str] = None
    outcome: str = "ok"
    started: float = field(default_factory=time.perf_counter)

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started) * 1000

    def done(self) -> None:
        log_metric(
            self.component,
            self.detail,
            latency_ms=self.elapsed_ms(),
            outcome=self.outcome,
            agreement_number=self.agreement_number,
        )


@contextmanager
def timed_operation(
    component: str, detail: Optional[str], agreement_number: Optional[str] = None
) -> Iterator[StageTimer]:
    """Time the ``with`` body; an exception marks the sample as ``error`` and propagates."""
    timer = StageTimer(component, detail, agreement_number)
    try:
        yield timer
    except Exception:
        timer.outcome = "error"
        raise
    finally:
        timer.done()


def fetch_metrics(limit: int = 500) -> List[Dict[str, Any]]:
    """The most recent ``limit`` samples, oldest first."""
    path = metrics_path()
    if not path.exists():
        return []
    try:
        with path.open("r", newline="", encoding="utf-8") as f:
            return list(deque(csv.DictReader(f), maxlen=limit))
    except OSError as exc:
        logger.warning("metric_read_failed", extra={"error": str(exc), "path": str(path)})
        return []


def _as_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def summarize_metrics(records: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Per-component average and max latency plus error counts."""
    latencies: Dict[str, List[float]] = {}
    errors: Dict[str, int] = {}
    for row in records:
        component = row.get("component") or "unknown"
        latency = _as_float(row.get("latency_ms"))
        if latency is not None:
            latencies.setdefault(component, []).append(latency)
        if row.get("outcome") == "error":
            errors[component] = errors.get(component, 0) + 1
    return {
        "average_latency_ms": {name: round(sum(vals) / len(vals), 3) for name, vals in latencies.items()},
        "max_latency_ms": {name: max(vals) for name, vals in latencies.items()},
        "errors": errors,
        "sample_size": len(records),
    }
