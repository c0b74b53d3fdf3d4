"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO
"""

from typing import Protocol

from pixelcanvas.core.domain_types import ProjectId, TimerSelector, UserId
from pixelcanvas.core.project_state import ProjectState


class Connection(Protocol):
    """Anything the broadcaster can push JSON frames to (a WebSocket, a test fake)."""
    async def send_json(self, data: dict) -> None: ...


class ProjectStore(Protocol):
    """Contract for project persistence — implemented by services/project_store.py."""
    async def load_active_projects(self) -> list[ProjectState]: ...
    async def load_finished_projects(self) -> list[ProjectState]: ...
    async def load_project_by_id(self, project_id: ProjectId) -> ProjectState: ...
    async def persist_project_state(self, project: ProjectState) -> None: ...
    async def create_project(
        self, owner_id: UserId, owner_name: str, name: str,
        width: int, height: int, timer: TimerSelector,
    ) -> ProjectId: ...
    async def mark_finished(self, project_id: ProjectId) -> None: ...
    async def delete_project(self, project_id: ProjectId) -> None: ...
    async def set_public(self, project_id: ProjectId, value: bool) -> bool: ...
    async def permitted_project_ids(self, user_id: UserId) -> set[ProjectId]: ...


class ModerationStore(Protocol):
    """Contract for rating/flag aggregation — implemented by services/moderation_store.py."""
    async def average_rating(self, project_id: ProjectId) -> float | None: ...
    async def flag_count(self, project_id: ProjectId) -> int: ...
