"""Gallery Routes — finished-work views plus rating and flagging.

Invariants:
    - GET /gallery without a mode lists every finished project, annotated
    - mode=myGallery requires a bearer token (401 otherwise)
    - Ratings and flags are per (project, token user); the project must exist
      and be finished
    - A second flag from the same user answers 409 FLAG_ALREADY_EXISTS
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from pixelcanvas.core.errors import ErrorContext, LifecycleError, ResourceNotFoundError
from pixelcanvas.infrastructure.tokens import Identity
from pixelcanvas.schemas.project import GalleryResponse, RatingCreate
from pixelcanvas.services.gallery_service import GalleryService
from pixelcanvas.services.moderation_store import ModerationStoreAdapter
from pixelcanvas.services.project_store import ProjectStoreAdapter
from pixelcanvas.api.deps import (
    get_bearer_token,
    get_current_identity,
    get_gallery_service,
    get_moderation_store,
    get_project_store,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/gallery", tags=["gallery"])


async def _require_finished(store: ProjectStoreAdapter, project_id: int) -> None:
    project = await store.load_project_by_id(project_id)
    if not project.is_finished:
        raise LifecycleError(
            "Only finished projects can be rated or flagged",
            ErrorContext(project_id=project_id),
        )


@router.get("", response_model=GalleryResponse)
async def get_gallery(
    mode: str | None = Query(None),
    token: str | None = Depends(get_bearer_token),
    gallery: GalleryService = Depends(get_gallery_service),
):
    if mode is None:
        items = await gallery.list_gallery()
    else:
        items = await gallery.sorted_gallery(mode, token)
    return {"mode": mode, "projects": [item.to_dict() for item in items]}


@router.put("/{project_id}/rating", status_code=status.HTTP_204_NO_CONTENT)
async def rate_project(
    project_id: int,
    body: RatingCreate,
    identity: Identity = Depends(get_current_identity),
    projects: ProjectStoreAdapter = Depends(get_project_store),
    moderation: ModerationStoreAdapter = Depends(get_moderation_store),
):
    """Create or overwrite the caller's rating."""
    await _require_finished(projects, project_id)
    await moderation.submit_rating(project_id, identity.user_id, body.score)


@router.delete("/{project_id}/rating", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rating(
    project_id: int,
    identity: Identity = Depends(get_current_identity),
    moderation: ModerationStoreAdapter = Depends(get_moderation_store),
):
    if not await moderation.delete_rating(project_id, identity.user_id):
        raise ResourceNotFoundError(
            "Rating", f"{project_id}:{identity.user_id}",
            ErrorContext(project_id=project_id, user_id=identity.user_id),
        )


@router.post("/{project_id}/flags", status_code=status.HTTP_201_CREATED)
async def flag_project(
    project_id: int,
    identity: Identity = Depends(get_current_identity),
    projects: ProjectStoreAdapter = Depends(get_project_store),
    moderation: ModerationStoreAdapter = Depends(get_moderation_store),
):
    await _require_finished(projects, project_id)
    await moderation.flag_project(project_id, identity.user_id)
    count = await moderation.flag_count(project_id)
    logger.info(
        f"Project {project_id} flagged by user {identity.user_id} ({count} total)",
        extra={"project_id": project_id, "user_id": identity.user_id},
    )
    return {"project_id": project_id, "flag_count": count}


@router.delete("/{project_id}/flags", status_code=status.HTTP_204_NO_CONTENT)
async def delete_flag(
    project_id: int,
    identity: Identity = Depends(get_current_identity),
    moderation: ModerationStoreAdapter = Depends(get_moderation_store),
):
    if not await moderation.delete_flag(project_id, identity.user_id):
        raise ResourceNotFoundError(
            "Flag", f"{project_id}:{identity.user_id}",
            ErrorContext(project_id=project_id, user_id=identity.user_id),
        )
