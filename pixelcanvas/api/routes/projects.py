"""Project Routes — REST mirror of the realtime project lifecycle.

Invariants:
    - Every mutation goes through LifecycleManager, the same path as the realtime
      handlers, then re-broadcasts the project list to websocket clients
    - Store failures after an in-memory transition still broadcast, then surface
      as 503 to the REST caller
    - Visibility and permission changes require a bearer token and a grant

Design Decisions:
    - GET /projects reads the Registry (live state), GET /projects/{id} falls back
      to the store so finished projects stay addressable
"""

import logging

from fastapi import APIRouter, Depends, status

from pixelcanvas.core.errors import ErrorContext, ResourceNotFoundError
from pixelcanvas.core.registry import ProjectRegistry
from pixelcanvas.infrastructure.tokens import Identity
from pixelcanvas.schemas.project import (
    PermissionGrant,
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    VisibilityUpdate,
)
from pixelcanvas.services.lifecycle_manager import LifecycleManager, LifecycleOutcome
from pixelcanvas.services.project_store import ProjectStoreAdapter
from pixelcanvas.services.realtime_dispatch import RealtimeDispatcher
from pixelcanvas.api.deps import (
    get_current_identity,
    get_dispatcher,
    get_lifecycle,
    get_project_store,
    get_registry,
    require_grant,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


def _raise_store_error(outcome: LifecycleOutcome) -> None:
    if outcome.store_error is not None:
        raise outcome.store_error


@router.get("", response_model=ProjectListResponse)
async def list_projects(registry: ProjectRegistry = Depends(get_registry)):
    """Active projects in registry order, grids included."""
    return {"projects": registry.snapshot()}


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    registry: ProjectRegistry = Depends(get_registry),
    store: ProjectStoreAdapter = Depends(get_project_store),
):
    project = registry.find_by_id(project_id)
    if project is None:
        project = await store.load_project_by_id(project_id)
    return project.to_dict()


@router.post(
    "", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED,
)
async def create_project(
    body: ProjectCreate,
    identity: Identity = Depends(get_current_identity),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
    dispatcher: RealtimeDispatcher = Depends(get_dispatcher),
):
    """Create a project owned by the token's user and announce it."""
    project = await lifecycle.create_project(
        identity, body.name, body.x, body.y, body.timer,
    )
    await dispatcher.broadcast_projects()
    return project.to_dict()


@router.post("/{project_id}/save", response_model=ProjectResponse)
async def save_project(
    project_id: int,
    lifecycle: LifecycleManager = Depends(get_lifecycle),
    dispatcher: RealtimeDispatcher = Depends(get_dispatcher),
):
    outcome = await lifecycle.save_project(project_id)
    await dispatcher.broadcast_projects()
    _raise_store_error(outcome)
    return outcome.project.to_dict()


@router.post("/{project_id}/finish", response_model=ProjectResponse)
async def finish_project(
    project_id: int,
    lifecycle: LifecycleManager = Depends(get_lifecycle),
    dispatcher: RealtimeDispatcher = Depends(get_dispatcher),
):
    """Persist, mark finished and retire the project from live editing."""
    outcome = await lifecycle.finish_project(project_id)
    await dispatcher.broadcast_selection()
    _raise_store_error(outcome)
    return outcome.project.to_dict()


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: int,
    lifecycle: LifecycleManager = Depends(get_lifecycle),
    dispatcher: RealtimeDispatcher = Depends(get_dispatcher),
):
    outcome = await lifecycle.delete_project(project_id)
    await dispatcher.broadcast_selection()
    _raise_store_error(outcome)


@router.put("/{project_id}/visibility", response_model=ProjectResponse)
async def update_visibility(
    project_id: int,
    body: VisibilityUpdate,
    identity: Identity = Depends(require_grant),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
):
    """Promote a finished project to the public gallery (cannot be undone)."""
    project = await lifecycle.publish_project(project_id, body.is_public)
    logger.info(
        f"Project {project_id} published by user {identity.user_id}",
        extra={"project_id": project_id, "user_id": identity.user_id},
    )
    return project.to_dict()


@router.post(
    "/{project_id}/permissions", status_code=status.HTTP_201_CREATED,
)
async def grant_permission(
    project_id: int,
    body: PermissionGrant,
    identity: Identity = Depends(require_grant),
    store: ProjectStoreAdapter = Depends(get_project_store),
):
    await store.grant_permission(project_id, body.user_id)
    return {"project_id": project_id, "user_id": body.user_id}


@router.delete(
    "/{project_id}/permissions/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def revoke_permission(
    project_id: int,
    user_id: int,
    identity: Identity = Depends(require_grant),
    store: ProjectStoreAdapter = Depends(get_project_store),
):
    if not await store.revoke_permission(project_id, user_id):
        raise ResourceNotFoundError(
            "Permission", f"{project_id}:{user_id}",
            ErrorContext(project_id=project_id, user_id=identity.user_id),
        )
