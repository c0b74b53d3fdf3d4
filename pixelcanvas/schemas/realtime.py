"""Realtime Protocol — tagged-union websocket messages.

Invariants:
    - Every inbound frame is a JSON object with a `type` discriminator
    - Unknown `type` values and malformed fields fail validation (never reach a handler)
    - Outbound frames are {"type": ..., "data": ...} envelopes built by the helpers below

Design Decisions:
    - pydantic discriminated union over string-keyed event names: one TypeAdapter
      validates and routes the payload shape in a single step
    - Field aliases accept the camelCase names browser clients send (projectId)
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _Inbound(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class JoinRoom(_Inbound):
    type: Literal["join"]
    room: int


class LeaveRoom(_Inbound):
    type: Literal["leave"]
    room: int


class RequestGrid(_Inbound):
    type: Literal["request_grid"]
    room: int


class PixelEditMessage(_Inbound):
    type: Literal["pixel_edit"]
    project_id: int = Field(alias="projectId")
    x: int
    y: int
    color: str = Field(min_length=1, max_length=32)


class RequestSnapshot(_Inbound):
    type: Literal["request_snapshot"]


class CreateProjectMessage(_Inbound):
    type: Literal["create_project"]
    token: str
    name: str = Field(min_length=1, max_length=200)
    x: int = 20
    y: int = 20
    timer: str | None = None


class SaveProject(_Inbound):
    type: Literal["save_project"]
    project_id: int = Field(alias="projectId")


class DeleteProject(_Inbound):
    type: Literal["delete_project"]
    project_id: int = Field(alias="projectId")


class FinishProject(_Inbound):
    type: Literal["finish_project"]
    project_id: int = Field(alias="projectId")


class RequestGallery(_Inbound):
    type: Literal["request_gallery"]
    mode: str | None = None
    token: str | None = None


InboundMessage = Annotated[
    Union[
        JoinRoom, LeaveRoom, RequestGrid, PixelEditMessage, RequestSnapshot,
        CreateProjectMessage, SaveProject, DeleteProject, FinishProject,
        RequestGallery,
    ],
    Field(discriminator="type"),
]

inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def parse_inbound(payload: object) -> InboundMessage:
    """Validate one decoded frame. Raises pydantic.ValidationError."""
    return inbound_adapter.validate_python(payload)


# ─── Outbound envelopes ─────────────────────────────────────────

def grid_message(project_id: int, grid: list[list[str]]) -> dict:
    return {"type": "grid", "data": {"project_id": project_id, "grid": grid}}


def pixel_message(edit: PixelEditMessage) -> dict:
    return {
        "type": "pixel",
        "data": {
            "project_id": edit.project_id,
            "x": edit.x,
            "y": edit.y,
            "color": edit.color,
        },
    }


def projects_message(snapshot: list[dict]) -> dict:
    return {"type": "projects", "data": {"projects": snapshot}}


def current_project_message(project_id: int) -> dict:
    return {"type": "current_project", "data": {"project_id": project_id}}


def gallery_message(items: list[dict]) -> dict:
    return {"type": "gallery", "data": {"projects": items}}


def validation_error_message(detail: str) -> dict:
    return {
        "type": "error",
        "data": {
            "code": "VALIDATION_ERROR",
            "message": detail,
            "severity": "warning",
            "recoverable": True,
            "event_type": None,
        },
    }
