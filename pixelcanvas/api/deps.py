"""API Dependencies — resolve lifespan-built services and the bearer identity.

Invariants:
    - Services are read from app.state (built once in the lifespan), never imported
      as module globals
    - get_current_identity raises AuthenticationError (401) for a missing or bad token
    - require_grant raises PermissionDeniedError (403) unless the actor holds a
      Permission Grant for the project

Design Decisions:
    - HTTPBearer(auto_error=False): missing credentials flow into the domain error
      envelope instead of FastAPI's default 403
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pixelcanvas.core.errors import ErrorContext, PermissionDeniedError
from pixelcanvas.core.registry import ProjectRegistry
from pixelcanvas.infrastructure.tokens import Identity, TokenVerifier
from pixelcanvas.services.gallery_service import GalleryService
from pixelcanvas.services.lifecycle_manager import LifecycleManager
from pixelcanvas.services.moderation_store import ModerationStoreAdapter
from pixelcanvas.services.project_store import ProjectStoreAdapter
from pixelcanvas.services.realtime_dispatch import RealtimeDispatcher
from pixelcanvas.services.room_broadcaster import RoomBroadcaster

bearer_scheme = HTTPBearer(auto_error=False)


def get_registry(request: Request) -> ProjectRegistry:
    return request.app.state.registry


def get_project_store(request: Request) -> ProjectStoreAdapter:
    return request.app.state.project_store


def get_moderation_store(request: Request) -> ModerationStoreAdapter:
    return request.app.state.moderation_store


def get_lifecycle(request: Request) -> LifecycleManager:
    return request.app.state.lifecycle


def get_gallery_service(request: Request) -> GalleryService:
    return request.app.state.gallery


def get_broadcaster(request: Request) -> RoomBroadcaster:
    return request.app.state.broadcaster


def get_dispatcher(request: Request) -> RealtimeDispatcher:
    return request.app.state.dispatcher


def get_verifier(request: Request) -> TokenVerifier:
    return request.app.state.verifier


def get_bearer_token(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    return creds.credentials if creds else None


def get_current_identity(
    token: str | None = Depends(get_bearer_token),
    verifier: TokenVerifier = Depends(get_verifier),
) -> Identity:
    return verifier.verify(token)


async def require_grant(
    project_id: int,
    identity: Identity = Depends(get_current_identity),
    store: ProjectStoreAdapter = Depends(get_project_store),
) -> Identity:
    """Actor identity, provided they hold a grant for `project_id`."""
    if not await store.has_permission(project_id, identity.user_id):
        raise PermissionDeniedError(
            project_id,
            ErrorContext(project_id=project_id, user_id=identity.user_id),
        )
    return identity
