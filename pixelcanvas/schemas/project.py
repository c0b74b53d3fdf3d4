"""Project Schemas — Pydantic models with field-level validation for REST boundaries.

Invariants:
    - ProjectCreate.name: 1-200 chars, stripped, non-empty
    - Grid dimensions are positive; oversize requests are clamped later by the
      lifecycle manager, not rejected here
    - RatingCreate.score within MIN_RATING..MAX_RATING

Design Decisions:
    - Responses mirror ProjectState.to_dict() so REST and realtime payloads agree
    - Timer stays a free-form string at the boundary: parsing (and its lenience)
      belongs to core/lifecycle.py
"""

from pydantic import BaseModel, Field, field_validator

from pixelcanvas.core.domain_types import MAX_RATING, MIN_RATING


class ProjectCreate(BaseModel):
    """Project creation — name plus grid size and optional timer selector."""
    name: str = Field(min_length=1, max_length=200)
    x: int = Field(20, ge=1)
    y: int = Field(20, ge=1)
    timer: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class ProjectResponse(BaseModel):
    """Project response — public-facing project data."""
    id: int
    name: str
    owner_id: int | None = None
    owner_name: str | None = None
    xsize: int
    ysize: int
    is_finished: bool
    is_public: bool
    timer: str
    started_at: str | None = None
    finished_at: str | None = None
    seconds_remaining: float | None = None
    grid: list[list[str]] | None = None


class ProjectListResponse(BaseModel):
    projects: list[ProjectResponse]


class VisibilityUpdate(BaseModel):
    is_public: bool


class PermissionGrant(BaseModel):
    user_id: int = Field(ge=1)


class RatingCreate(BaseModel):
    score: int = Field(ge=MIN_RATING, le=MAX_RATING)


class GalleryItemResponse(ProjectResponse):
    average_rating: float | None = None
    flag_count: int = 0


class GalleryResponse(BaseModel):
    mode: str | None = None
    projects: list[GalleryItemResponse]
