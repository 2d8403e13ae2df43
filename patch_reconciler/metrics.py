"""
Reconcile metrics — tracks reconciliation outcomes in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".patch_reconciler"
_METRICS_FILE = "reconcile_metrics.jsonl"


def _metrics_path(metrics_dir: str | None = None) -> str:
    """Return the absolute path to the metrics file."""
    base = metrics_dir or os.path.join(os.getcwd(), _METRICS_DIR)
    return os.path.join(base, _METRICS_FILE)


def log_reconcile_metric(data: dict, metrics_dir: str | None = None) -> None:
    """Append a single reconciliation metric entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (file, kind, status, tier, duration_ms, ...).
    metrics_dir:
        Directory holding the log. Defaults to ``.patch_reconciler`` in CWD.
    """
    path = _metrics_path(metrics_dir)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[Reconcile] Failed to write metrics: %s", exc)


def read_reconcile_stats(
    last_n: int = 50,
    metrics_dir: str | None = None,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Parameters
    ----------
    last_n:
        Number of most recent entries to include.
    metrics_dir:
        Directory holding the log. Defaults to ``.patch_reconciler`` in CWD.

    Returns
    -------
    dict
        ``total``, ``success_rate``, ``statuses`` and ``tiers`` (both as
        percentages of ``total``), and ``avg_duration_ms``.
    """
    path = _metrics_path(metrics_dir)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[Reconcile] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total": 0,
            "success_rate": 0.0,
            "statuses": {},
            "tiers": {},
            "avg_duration_ms": 0.0,
        }

    total = len(entries)
    successes = sum(1 for e in entries if e.get("status") == "staged")
    durations = [e["duration_ms"] for e in entries if "duration_ms" in e]
    statuses = Counter(e.get("status", "unknown") for e in entries)
    tiers = Counter(e["tier"] for e in entries if e.get("tier"))

    return {
        "total": total,
        "success_rate": successes / total * 100,
        "statuses": {
            status: count / total * 100
            for status, count in statuses.most_common()
        },
        "tiers": {
            tier: count / total * 100
            for tier, count in tiers.most_common()
        },
        "avg_duration_ms": sum(durations) / len(durations) if durations else 0.0,
    }
