"""Project Store Adapter — translates between ProjectState and persisted rows.

Invariants:
    - Owns the grid codec boundary: rows hold text, ProjectState holds a decoded Grid
    - Every operation opens its own session via the session manager (no held sessions)
    - persist_project_state writes grid + dimensions only. The in-memory grid is
      rebound to the decoded text before the write, so edits applied while the
      write is in flight land on the new list and are never reverted
    - create_project is two units of work: project row, then owner grant
      * project insert fails -> DatabaseError raised, grant never written
      * grant insert fails   -> logged, project kept (orphan; see find_orphaned_projects)

Design Decisions:
    - Non-atomic create kept on purpose: ownership can be re-granted by an operator,
      and find_orphaned_projects is the reconciliation hook that surfaces the gap
    - Lookup misses on load_project_by_id raise ResourceNotFoundError; mutation helpers
      on missing rows are silent no-ops (stale realtime events must not crash callers)
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, select, update

from pixelcanvas.core.domain_types import ProjectId, TimerSelector, UserId
from pixelcanvas.core.errors import DatabaseError, ErrorContext, ResourceNotFoundError
from pixelcanvas.core.grid import deserialize_grid, serialize_grid
from pixelcanvas.core.lifecycle import compute_deadline, parse_timer
from pixelcanvas.core.project_state import ProjectState
from pixelcanvas.infrastructure.database import DatabaseSessionManager
from pixelcanvas.models import Flag, Project, ProjectPermission, Rating

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProjectStoreAdapter:
    """Async persistence for projects and permission grants."""

    def __init__(self, db: DatabaseSessionManager, default_color: str = "#FFF"):
        self._db = db
        self._default_color = default_color

    def _to_state(self, row: Project) -> ProjectState:
        return ProjectState(
            id=row.id,
            name=row.name,
            xsize=row.xsize,
            ysize=row.ysize,
            owner_id=row.owner_id,
            owner_name=row.owner_name,
            grid=deserialize_grid(
                row.grid, row.xsize, row.ysize, self._default_color,
            ),
            is_finished=row.is_finished,
            is_public=row.is_public,
            timer=parse_timer(row.timer, lenient=True),
            started_at=row.started_at,
            finished_at=row.finished_at,
        )

    async def _load_where(self, finished: bool) -> list[ProjectState]:
        async with self._db.session() as db:
            result = await db.execute(
                select(Project)
                .where(Project.is_finished == finished)
                .order_by(Project.id),
            )
            return [self._to_state(row) for row in result.scalars().all()]

    # ─── Reads ───────────────────────────────────────────────────

    async def load_active_projects(self) -> list[ProjectState]:
        return await self._load_where(False)

    async def load_finished_projects(self) -> list[ProjectState]:
        return await self._load_where(True)

    async def load_project_by_id(self, project_id: ProjectId) -> ProjectState:
        async with self._db.session() as db:
            row = await db.get(Project, project_id)
            if row is None:
                raise ResourceNotFoundError(
                    "Project", str(project_id), ErrorContext(project_id=project_id),
                )
            return self._to_state(row)

    # ─── Writes ──────────────────────────────────────────────────

    async def persist_project_state(self, project: ProjectState) -> None:
        """Write grid and dimensions. The in-memory grid is resynced from the text first."""
        grid_text = serialize_grid(project.grid)
        project.grid = deserialize_grid(
            grid_text, project.xsize, project.ysize, self._default_color,
        )
        async with self._db.session() as db:
            await db.execute(
                update(Project)
                .where(Project.id == project.id)
                .values(grid=grid_text, xsize=project.xsize, ysize=project.ysize),
            )
            await db.commit()

    async def create_project(
        self,
        owner_id: UserId,
        owner_name: str,
        name: str,
        width: int,
        height: int,
        timer: TimerSelector | str = TimerSelector.UNLIMITED,
    ) -> ProjectId:
        """Insert project row then owner grant. Returns the new project id."""
        selector = parse_timer(timer, lenient=True)
        started_at = _utcnow()
        async with self._db.session() as db:
            row = Project(
                owner_id=owner_id,
                owner_name=owner_name,
                name=name,
                xsize=width,
                ysize=height,
                grid="",
                timer=selector.value,
                started_at=started_at,
                finished_at=compute_deadline(selector, started_at),
            )
            db.add(row)
            await db.commit()
            project_id = ProjectId(row.id)

        try:
            await self.grant_permission(project_id, owner_id)
        except DatabaseError as e:
            logger.error(
                f"Owner grant failed for project {project_id}, project left without owner: {e}",
                extra={"project_id": project_id, "user_id": owner_id},
            )
        return project_id

    async def mark_finished(self, project_id: ProjectId) -> None:
        async with self._db.session() as db:
            await db.execute(
                update(Project)
                .where(Project.id == project_id)
                .values(is_finished=True, finished_at=_utcnow()),
            )
            await db.commit()

    async def delete_project(self, project_id: ProjectId) -> None:
        """Hard delete of a never-finished project and everything scoped to it."""
        async with self._db.session() as db:
            for model in (ProjectPermission, Rating, Flag):
                await db.execute(delete(model).where(model.project_id == project_id))
            await db.execute(delete(Project).where(Project.id == project_id))
            await db.commit()
        logger.info(f"Deleted project {project_id}", extra={"project_id": project_id})

    async def set_public(self, project_id: ProjectId, value: bool) -> bool:
        async with self._db.session() as db:
            row = await db.get(Project, project_id)
            if row is None:
                raise ResourceNotFoundError(
                    "Project", str(project_id), ErrorContext(project_id=project_id),
                )
            row.is_public = value
            await db.commit()
            return row.is_public

    # ─── Permission Grants ───────────────────────────────────────

    async def grant_permission(self, project_id: ProjectId, user_id: UserId) -> None:
        if await self.has_permission(project_id, user_id):
            return
        async with self._db.session() as db:
            db.add(ProjectPermission(project_id=project_id, user_id=user_id))
            await db.commit()

    async def revoke_permission(self, project_id: ProjectId, user_id: UserId) -> bool:
        async with self._db.session() as db:
            result = await db.execute(
                delete(ProjectPermission).where(
                    ProjectPermission.project_id == project_id,
                    ProjectPermission.user_id == user_id,
                ),
            )
            await db.commit()
            return result.rowcount > 0

    async def has_permission(self, project_id: ProjectId, user_id: UserId) -> bool:
        async with self._db.session() as db:
            result = await db.execute(
                select(ProjectPermission.id).where(
                    ProjectPermission.project_id == project_id,
                    ProjectPermission.user_id == user_id,
                ),
            )
            return result.first() is not None

    async def permitted_project_ids(self, user_id: UserId) -> set[ProjectId]:
        async with self._db.session() as db:
            result = await db.execute(
                select(ProjectPermission.project_id).where(
                    ProjectPermission.user_id == user_id,
                ),
            )
            return set(result.scalars().all())

    async def find_orphaned_projects(self) -> list[int]:
        """Audit hook: projects left without any grant by a failed two-step create."""
        async with self._db.session() as db:
            granted = select(ProjectPermission.project_id)
            result = await db.execute(
                select(Project.id)
                .where(Project.id.not_in(granted))
                .order_by(Project.id),
            )
            return list(result.scalars().all())

