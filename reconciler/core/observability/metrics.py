from __future__ import annotations

from collections import Counter
from typing import Dict

from prometheus_client import Counter as PromCounter

# Named counters (in-process, used by tests and reports)
_NAMED = Counter()

_PROM_PATCH_OUTCOMES = PromCounter(
    "reconciler_patch_outcomes_total",
    "Conditional module patch outcomes",
    ["outcome"],
)

_PROM_TASKS_DISABLED = PromCounter(
    "reconciler_tasks_disabled_total",
    "Tasks disabled by reconciliation passes",
)


def reset_metrics() -> None:
    """
    Test helper: clears the in-process counters to avoid cross-test leakage.
    Prometheus counters are process-wide and are left alone.
    """
    _NAMED.clear()


def inc_patch_outcome(outcome: str) -> None:
    if not outcome:
        return
    _NAMED[f"patch_{outcome}"] += 1
    _PROM_PATCH_OUTCOMES.labels(outcome=outcome).inc()


def inc_tasks_disabled(count: int) -> None:
    if count <= 0:
        return
    _NAMED["tasks_disabled"] += int(count)
    _PROM_TASKS_DISABLED.inc(count)


def snapshot_named() -> Dict[str, int]:
    return dict(_NAMED)
