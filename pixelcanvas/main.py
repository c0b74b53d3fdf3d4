"""PixelCanvas API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map PixelCanvasError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, registry and realtime services built once in the lifespan and
      held on app.state
    - A store outage at startup leaves the registry empty instead of aborting boot

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - build_app_state() is separate from the lifespan so tests can wire the same
      object graph against a throwaway database
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pixelcanvas.api.error_handlers import register_error_handlers
from pixelcanvas.api.routes import gallery, health, projects, realtime
from pixelcanvas.config import Settings, get_settings
from pixelcanvas.core.errors import DatabaseError
from pixelcanvas.core.registry import ProjectRegistry
from pixelcanvas.infrastructure.database import DatabaseSessionManager
from pixelcanvas.infrastructure.observability import setup_logging
from pixelcanvas.infrastructure.tokens import TokenVerifier
from pixelcanvas.services.gallery_service import GalleryService
from pixelcanvas.services.lifecycle_manager import LifecycleManager
from pixelcanvas.services.moderation_store import ModerationStoreAdapter
from pixelcanvas.services.project_store import ProjectStoreAdapter
from pixelcanvas.services.realtime_dispatch import RealtimeDispatcher
from pixelcanvas.services.room_broadcaster import RoomBroadcaster

logger = logging.getLogger(__name__)


async def build_app_state(
    app: FastAPI, db: DatabaseSessionManager, settings: Settings,
) -> None:
    """Load live projects and wire the service graph onto app.state."""
    project_store = ProjectStoreAdapter(db, default_color=settings.default_color)
    moderation_store = ModerationStoreAdapter(db)
    verifier = TokenVerifier(settings.jwt_secret, settings.jwt_algorithm)

    try:
        active = await project_store.load_active_projects()
    except DatabaseError as e:
        logger.error(f"Loading active projects failed, starting empty: {e.message}")
        active = []
    registry = ProjectRegistry(active)

    lifecycle = LifecycleManager(
        project_store, registry,
        lenient_timer=settings.lenient_timer_selector,
        max_grid_size=settings.max_grid_size,
    )
    gallery_service = GalleryService(project_store, moderation_store, verifier)
    broadcaster = RoomBroadcaster()

    app.state.db = db
    app.state.project_store = project_store
    app.state.moderation_store = moderation_store
    app.state.verifier = verifier
    app.state.registry = registry
    app.state.lifecycle = lifecycle
    app.state.gallery = gallery_service
    app.state.broadcaster = broadcaster
    app.state.dispatcher = RealtimeDispatcher(
        broadcaster, lifecycle, gallery_service, verifier,
    )
    logger.info(f"Registry loaded with {len(registry)} active project(s)")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = DatabaseSessionManager.from_settings(settings)
    await build_app_state(app, db, settings)
    logger.info("PixelCanvas API started")
    yield
    logger.info("PixelCanvas API shutting down")
    await db.dispose()


app = FastAPI(
    title="PixelCanvas API", version="1.0.0", lifespan=lifespan,
)

# CORS: configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(projects.router)
app.include_router(gallery.router)
app.include_router(realtime.router)

register_error_handlers(app)
