"""Project Registry — authoritative in-memory collection of active projects.

Invariants:
    - Holds only unfinished projects; finishing or deleting removes the entry
    - Order is insertion order; first_id() is the "current" selection after a removal
    - apply_pixel_edit never raises for an unknown project (stale edits are no-ops)
    - Every grid mutation goes through apply_pixel_edit

Design Decisions:
    - Explicitly constructed object held on app.state (no module-level dict)
    - Synchronous methods only: on a single asyncio loop each call is atomic
      between awaits, so no lock is needed
    - Linear scans over a list: a process holds tens of live canvases, not thousands
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from pixelcanvas.core.domain_types import Color, ProjectId
from pixelcanvas.core.grid import set_cell
from pixelcanvas.core.project_state import ProjectState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PixelEdit:
    """One pixel delta emitted by an editor."""
    project_id: ProjectId
    x: int
    y: int
    color: Color


class ProjectRegistry:
    """Ordered roster of live projects. Single source of truth for editing state."""

    def __init__(self, projects: Iterable[ProjectState] = ()):
        self._projects: list[ProjectState] = list(projects)

    def __len__(self) -> int:
        return len(self._projects)

    def __iter__(self) -> Iterator[ProjectState]:
        return iter(self._projects)

    def find_by_id(self, project_id: ProjectId) -> ProjectState | None:
        for project in self._projects:
            if project.id == project_id:
                return project
        return None

    def index_of(self, project_id: ProjectId) -> int:
        for i, project in enumerate(self._projects):
            if project.id == project_id:
                return i
        return -1

    def apply_pixel_edit(self, edit: PixelEdit) -> bool:
        """Paint one pixel. Returns False (and logs) when the project is gone.

        Out-of-bounds coordinates still raise IndexError from set_cell.
        """
        project = self.find_by_id(edit.project_id)
        if project is None:
            logger.warning(
                f"Pixel edit for unknown project {edit.project_id} ignored",
                extra={"project_id": edit.project_id},
            )
            return False
        set_cell(project.grid, edit.x, edit.y, edit.color)
        return True

    def add_project(self, project: ProjectState) -> None:
        self._projects.append(project)

    def remove_at(self, index: int) -> ProjectState:
        return self._projects.pop(index)

    def remove_by_id(self, project_id: ProjectId) -> ProjectState | None:
        index = self.index_of(project_id)
        if index == -1:
            return None
        return self.remove_at(index)

    def first_id(self) -> ProjectId | None:
        return self._projects[0].id if self._projects else None

    def snapshot(self) -> list[dict]:
        """JSON-safe view of every live project, grids included."""
        return [project.to_dict() for project in self._projects]
