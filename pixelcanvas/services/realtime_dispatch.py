"""Realtime Dispatch — explicit routing from message type to handler.

Invariants:
    - Every message-type -> handler mapping is visible in one dict, no getattr magic
    - Malformed frames never reach a handler; the sender gets a VALIDATION_ERROR frame
    - Domain/store failures are acknowledged to the sender only, never broadcast
    - Persistence completes before the broadcast that reflects it
    - Store failures do not suppress the broadcast: peers receive in-memory state
    - Project-list changes (create/save/delete/finish) broadcast to ALL connections;
      pixel deltas broadcast to the project's room only (sender included)

Design Decisions:
    - Replies and broadcasts go through RoomBroadcaster so dead sockets are pruned
      in one place
    - Unknown-project pixel edits are dropped without a broadcast (stale edits
      after finish/delete)
"""

import logging

from pydantic import ValidationError

from pixelcanvas.core.domain_types import Color, ProjectId
from pixelcanvas.core.errors import DatabaseError, GridValidationError, PixelCanvasError
from pixelcanvas.core.registry import PixelEdit
from pixelcanvas.core.repository_protocols import Connection
from pixelcanvas.infrastructure.tokens import TokenVerifier
from pixelcanvas.schemas.realtime import (
    CreateProjectMessage,
    DeleteProject,
    FinishProject,
    JoinRoom,
    LeaveRoom,
    PixelEditMessage,
    RequestGallery,
    RequestGrid,
    RequestSnapshot,
    SaveProject,
    current_project_message,
    gallery_message,
    grid_message,
    parse_inbound,
    pixel_message,
    projects_message,
    validation_error_message,
)
from pixelcanvas.services.gallery_service import GalleryService
from pixelcanvas.services.lifecycle_manager import LifecycleManager, LifecycleOutcome
from pixelcanvas.services.room_broadcaster import RoomBroadcaster

logger = logging.getLogger(__name__)


class RealtimeDispatcher:
    """Routes inbound realtime messages to handlers. Explicit registration."""

    def __init__(
        self,
        broadcaster: RoomBroadcaster,
        lifecycle: LifecycleManager,
        gallery: GalleryService,
        verifier: TokenVerifier,
    ):
        self._broadcaster = broadcaster
        self._lifecycle = lifecycle
        self._registry = lifecycle.registry
        self._gallery = gallery
        self._verifier = verifier

        # Adding a message type requires editing this dict
        self._handlers = {
            "join": self._on_join,
            "leave": self._on_leave,
            "request_grid": self._on_request_grid,
            "pixel_edit": self._on_pixel_edit,
            "request_snapshot": self._on_request_snapshot,
            "create_project": self._on_create_project,
            "save_project": self._on_save_project,
            "delete_project": self._on_delete_project,
            "finish_project": self._on_finish_project,
            "request_gallery": self._on_request_gallery,
        }

    @property
    def message_types(self) -> frozenset[str]:
        return frozenset(self._handlers)

    async def dispatch(self, conn: Connection, payload: object) -> None:
        """Validate one frame and run its handler. Never raises domain errors."""
        try:
            message = parse_inbound(payload)
        except ValidationError as e:
            logger.warning(f"Rejected realtime frame: {e.error_count()} error(s)")
            await self._broadcaster.send_to(
                conn, validation_error_message("Invalid message"),
            )
            return

        handler = self._handlers[message.type]
        try:
            await handler(conn, message)
        except PixelCanvasError as e:
            e.context.event_type = message.type
            logger.warning(
                f"Realtime {message.type} failed: {e.message}",
                extra={"event_type": message.type, "error_code": e.code},
            )
            await self._acknowledge_error(conn, e)

    async def _acknowledge_error(self, conn: Connection, error: PixelCanvasError) -> None:
        await self._broadcaster.send_to(conn, error.to_ws_event())

    # ─── Broadcasts shared with REST routes ──────────────────────

    async def broadcast_projects(self) -> None:
        await self._broadcaster.broadcast_all(projects_message(self._registry.snapshot()))

    async def broadcast_selection(self) -> None:
        """After a removal: point everyone at the first live project, then resync."""
        first_id = self._registry.first_id()
        if first_id is not None:
            await self._broadcaster.broadcast_all(current_project_message(first_id))
        await self.broadcast_projects()

    async def _announce_removal(
        self, conn: Connection, outcome: LifecycleOutcome, event_type: str,
    ) -> None:
        if outcome.store_error is not None:
            outcome.store_error.context.event_type = event_type
            await self._acknowledge_error(conn, outcome.store_error)
        await self.broadcast_selection()

    # ─── Room membership ─────────────────────────────────────────

    async def _on_join(self, conn: Connection, message: JoinRoom) -> None:
        self._broadcaster.join(conn, message.room)

    async def _on_leave(self, conn: Connection, message: LeaveRoom) -> None:
        self._broadcaster.leave(conn, message.room)

    # ─── Editing ─────────────────────────────────────────────────

    async def _on_request_grid(self, conn: Connection, message: RequestGrid) -> None:
        project = self._registry.find_by_id(message.room)
        grid = project.grid if project is not None else []
        await self._broadcaster.send_to(conn, grid_message(message.room, grid))

    async def _on_pixel_edit(self, conn: Connection, message: PixelEditMessage) -> None:
        edit = PixelEdit(
            ProjectId(message.project_id), message.x, message.y, Color(message.color),
        )
        try:
            applied = self._registry.apply_pixel_edit(edit)
        except IndexError:
            raise GridValidationError(message.x, message.y)
        if applied:
            await self._broadcaster.broadcast_room(
                message.project_id, pixel_message(message),
            )

    async def _on_request_snapshot(
        self, conn: Connection, message: RequestSnapshot,
    ) -> None:
        await self._broadcaster.send_to(
            conn, projects_message(self._registry.snapshot()),
        )

    # ─── Project lifecycle ───────────────────────────────────────

    async def _on_create_project(
        self, conn: Connection, message: CreateProjectMessage,
    ) -> None:
        owner = self._verifier.verify(message.token)
        try:
            await self._lifecycle.create_project(
                owner, message.name, message.x, message.y, message.timer,
            )
        except DatabaseError as e:
            e.context.event_type = message.type
            await self._acknowledge_error(conn, e)
        await self.broadcast_projects()

    async def _on_save_project(self, conn: Connection, message: SaveProject) -> None:
        outcome = await self._lifecycle.save_project(message.project_id)
        if outcome.store_error is not None:
            outcome.store_error.context.event_type = message.type
            await self._acknowledge_error(conn, outcome.store_error)
        await self.broadcast_projects()

    async def _on_delete_project(self, conn: Connection, message: DeleteProject) -> None:
        outcome = await self._lifecycle.delete_project(message.project_id)
        await self._announce_removal(conn, outcome, message.type)

    async def _on_finish_project(self, conn: Connection, message: FinishProject) -> None:
        outcome = await self._lifecycle.finish_project(message.project_id)
        await self._announce_removal(conn, outcome, message.type)

    # ─── Gallery ─────────────────────────────────────────────────

    async def _on_request_gallery(
        self, conn: Connection, message: RequestGallery,
    ) -> None:
        if message.mode is None:
            items = await self._gallery.list_gallery()
        else:
            items = await self._gallery.sorted_gallery(message.mode, message.token)
        await self._broadcaster.send_to(
            conn, gallery_message([item.to_dict() for item in items]),
        )
