"""Lifecycle Manager — orchestrates project creation, saving, finishing and promotion.

Invariants:
    - Store write always completes (or fails) before the registry reflects the change
      and before any caller broadcasts it
    - Store failures on save/finish/delete are logged and returned in the outcome;
      the in-memory transition still happens (callers proceed with in-memory state)
    - A failed project insert on create leaves the registry untouched and raises
    - Finishing removes the project from the registry; there is no way back
    - Public promotion requires a finished project and is never revoked

Design Decisions:
    - LifecycleOutcome carries the store error instead of raising it, so the realtime
      dispatcher can both acknowledge the failure and keep broadcasting
    - Timer parsing lenience comes from Settings (legacy clients send free-form strings)
"""

import logging
from dataclasses import dataclass

from pixelcanvas.core.domain_types import ProjectId
from pixelcanvas.core.errors import DatabaseError, ErrorContext, LifecycleError, ResourceNotFoundError
from pixelcanvas.core.lifecycle import ensure_can_publish, parse_timer
from pixelcanvas.core.project_state import ProjectState
from pixelcanvas.core.registry import ProjectRegistry
from pixelcanvas.core.repository_protocols import ProjectStore
from pixelcanvas.infrastructure.tokens import Identity

logger = logging.getLogger(__name__)


@dataclass
class LifecycleOutcome:
    """Result of a lifecycle step: the affected project plus any store failure."""
    project: ProjectState | None
    store_error: DatabaseError | None = None

    @property
    def ok(self) -> bool:
        return self.store_error is None


class LifecycleManager:
    """Moves projects through ACTIVE -> FINISHED -> (public) against store and registry."""

    def __init__(
        self,
        store: ProjectStore,
        registry: ProjectRegistry,
        lenient_timer: bool = True,
        max_grid_size: int = 128,
    ):
        self._store = store
        self._registry = registry
        self._lenient_timer = lenient_timer
        self._max_grid_size = max_grid_size

    @property
    def registry(self) -> ProjectRegistry:
        return self._registry

    async def create_project(
        self,
        owner: Identity,
        name: str,
        width: int,
        height: int,
        timer: str | None = None,
    ) -> ProjectState:
        """Insert via the store, then add the freshly loaded project to the registry."""
        selector = parse_timer(timer, lenient=self._lenient_timer)
        if width > self._max_grid_size or height > self._max_grid_size:
            logger.warning(
                f"Requested grid {width}x{height} clamped to {self._max_grid_size}",
            )
            width = min(width, self._max_grid_size)
            height = min(height, self._max_grid_size)
        project_id = await self._store.create_project(
            owner.user_id, owner.name, name, width, height, selector,
        )
        project = await self._store.load_project_by_id(project_id)
        self._registry.add_project(project)
        logger.info(
            f"Project {project_id} created by user {owner.user_id}",
            extra={"project_id": project_id, "user_id": owner.user_id},
        )
        return project

    def _require_live(self, project_id: ProjectId) -> ProjectState:
        project = self._registry.find_by_id(project_id)
        if project is None:
            raise ResourceNotFoundError(
                "Project", str(project_id), ErrorContext(project_id=project_id),
            )
        return project

    async def save_project(self, project_id: ProjectId) -> LifecycleOutcome:
        project = self._require_live(project_id)
        try:
            await self._store.persist_project_state(project)
        except DatabaseError as e:
            logger.error(
                f"Saving project {project_id} failed: {e.message}",
                extra={"project_id": project_id, "error_code": e.code},
            )
            return LifecycleOutcome(project, e)
        return LifecycleOutcome(project)

    async def finish_project(self, project_id: ProjectId) -> LifecycleOutcome:
        """Persist the current grid, mark finished, then drop it from the registry."""
        project = self._require_live(project_id)
        store_error: DatabaseError | None = None
        try:
            await self._store.persist_project_state(project)
            await self._store.mark_finished(project_id)
        except DatabaseError as e:
            logger.error(
                f"Finishing project {project_id} failed in store: {e.message}",
                extra={"project_id": project_id, "error_code": e.code},
            )
            store_error = e
        self._registry.remove_by_id(project_id)
        project.is_finished = True
        return LifecycleOutcome(project, store_error)

    async def delete_project(self, project_id: ProjectId) -> LifecycleOutcome:
        """Hard delete of an unfinished project from store and registry."""
        if self._registry.find_by_id(project_id) is None:
            stored = await self._store.load_project_by_id(project_id)
            if stored.is_finished:
                raise LifecycleError(
                    "Finished projects cannot be deleted",
                    ErrorContext(project_id=project_id),
                )
        store_error: DatabaseError | None = None
        try:
            await self._store.delete_project(project_id)
        except DatabaseError as e:
            logger.error(
                f"Deleting project {project_id} failed in store: {e.message}",
                extra={"project_id": project_id, "error_code": e.code},
            )
            store_error = e
        removed = self._registry.remove_by_id(project_id)
        if removed is None:
            logger.info(
                f"Delete for project {project_id} not in registry",
                extra={"project_id": project_id},
            )
        return LifecycleOutcome(removed, store_error)

    async def publish_project(self, project_id: ProjectId, value: bool = True) -> ProjectState:
        """Promote a finished project to the public gallery (one-way)."""
        if not value:
            raise LifecycleError(
                "Public promotion cannot be revoked",
                ErrorContext(project_id=project_id),
            )
        project = await self._store.load_project_by_id(project_id)
        ensure_can_publish(project)
        project.is_public = await self._store.set_public(project_id, True)
        return project
