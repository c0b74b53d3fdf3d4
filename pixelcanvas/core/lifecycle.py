"""Lifecycle Rules — pure state-machine logic for project timers and promotion.

Invariants:
    - ACTIVE -> FINISHED is the only status transition; there is no reverse
    - Public promotion is one-way and requires FINISHED
    - Public views require FINISHED and is_public
    - Deadlines are informational (UI countdown, see ProjectState.seconds_remaining);
      nothing here expires a project

Design Decisions:
    - parse_timer keeps legacy lenience behind a flag: lenient mode degrades unknown
      selectors to UNLIMITED, strict mode raises InvalidTimerError at the boundary
"""

import logging
from datetime import datetime

from pixelcanvas.core.domain_types import ProjectStatus, TimerSelector
from pixelcanvas.core.errors import ErrorContext, InvalidTimerError, LifecycleError
from pixelcanvas.core.project_state import ProjectState

logger = logging.getLogger(__name__)


def parse_timer(raw: str | TimerSelector | None, lenient: bool = True) -> TimerSelector:
    """Map a client-supplied selector to TimerSelector."""
    if isinstance(raw, TimerSelector):
        return raw
    try:
        return TimerSelector(raw)
    except ValueError:
        if not lenient:
            raise InvalidTimerError(str(raw))
        logger.warning(f"Unknown timer selector {raw!r}, using unlimited")
        return TimerSelector.UNLIMITED


def compute_deadline(timer: TimerSelector, started_at: datetime) -> datetime | None:
    """Wall-clock deadline for a timer; None when the timer has no deadline."""
    duration = timer.duration
    if duration is None:
        return None
    return started_at + duration


def ensure_can_publish(project: ProjectState) -> None:
    if project.status is not ProjectStatus.FINISHED:
        raise LifecycleError(
            "Only finished projects can be made public",
            ErrorContext(project_id=project.id),
        )


def is_publicly_listed(project: ProjectState) -> bool:
    return project.is_finished and project.is_public
