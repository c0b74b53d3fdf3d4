"""Project State — in-memory representation of a project during live editing.

Invariants:
    - grid is always a decoded Grid (never the stored text form)
    - is_finished is False for every ProjectState held by the registry
    - to_dict() is JSON-safe (datetimes as ISO-8601 strings, enums as values)
    - While active, finished_at is the timer deadline; seconds_remaining counts
      down to it and is None once finished or for unlimited timers

Design Decisions:
    - Dataclass, not ORM object: the registry outlives any DB session
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from pixelcanvas.core.domain_types import Grid, ProjectId, ProjectStatus, TimerSelector, UserId


@dataclass
class ProjectState:
    """One project as held in memory by the registry and gallery."""

    id: ProjectId
    name: str
    xsize: int
    ysize: int
    owner_id: UserId | None = None
    owner_name: str | None = None
    grid: Grid = field(default_factory=list)
    is_finished: bool = False
    is_public: bool = False
    timer: TimerSelector = TimerSelector.UNLIMITED
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def status(self) -> ProjectStatus:
        return ProjectStatus.FINISHED if self.is_finished else ProjectStatus.ACTIVE

    def seconds_remaining(self, now: datetime | None = None) -> float | None:
        """UI countdown to the timer deadline. Never negative."""
        if self.is_finished or self.finished_at is None:
            return None
        deadline = self.finished_at
        if deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=timezone.utc)
        now = now or datetime.now(timezone.utc)
        return max(0.0, (deadline - now).total_seconds())

    def to_dict(self, include_grid: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "owner_id": self.owner_id,
            "owner_name": self.owner_name,
            "xsize": self.xsize,
            "ysize": self.ysize,
            "is_finished": self.is_finished,
            "is_public": self.is_public,
            "timer": self.timer.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "seconds_remaining": self.seconds_remaining(),
        }
        if include_grid:
            data["grid"] = self.grid
        return data
