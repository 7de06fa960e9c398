"""Process-wide runtime flags shared across modules."""
from __future__ import annotations

_scheduler_active = False
_last_dispatch_run: dict[str, object] = {}


def set_scheduler_active(active: bool) -> None:
    global _scheduler_active
    _scheduler_active = active


def is_scheduler_active() -> bool:
    return _scheduler_active


def record_dispatch_run(**stats: object) -> None:
    """Remember the outcome of the last notification delivery run (for /health)."""

    _last_dispatch_run.clear()
    _last_dispatch_run.update(stats)


def last_dispatch_run() -> dict[str, object]:
    return dict(_last_dispatch_run)
