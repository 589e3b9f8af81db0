"""
Metrics Module
Tracks how chat queries were resolved, with timestamps
"""

import time
from collections import defaultdict

metrics = {
    "queries": 0,
    "sources": defaultdict(int),  # resolution source: count
    "entries_taught": 0,
    "entries_imported": 0,
    "lookup_times": [],  # list of (timestamp, duration) tuples
}


def record_query(source: str, duration: float):
    metrics["queries"] += 1
    metrics["sources"][source] += 1
    metrics["lookup_times"].append((time.time(), duration))


def record_ingest(count: int, taught: bool = False):
    if taught:
        metrics["entries_taught"] += count
    else:
        metrics["entries_imported"] += count


def reset_metrics():
    metrics["queries"] = 0
    metrics["sources"].clear()
    metrics["entries_taught"] = 0
    metrics["entries_imported"] = 0
    metrics["lookup_times"].clear()


def prepare_metrics():
    """Prepare metrics with computed rates and averages"""
    queries = metrics["queries"]
    sources = metrics["sources"]
    answered = queries - sources.get("none", 0)
    answer_rate = (answered / queries * 100) if queries > 0 else 0

    durations = [duration for _, duration in metrics["lookup_times"]]
    avg_time = sum(durations) / len(durations) if durations else 0

    return {
        "queries": queries,
        "answered": answered,
        "answer_rate": round(answer_rate, 2),
        "per_source": dict(sources),
        "entries_taught": metrics["entries_taught"],
        "entries_imported": metrics["entries_imported"],
        "avg_lookup_ms": round(avg_time * 1000, 2),
    }
