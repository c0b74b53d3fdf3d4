"""Project ORM — persists a canvas and its lifecycle timestamps.

Invariants:
    - id is an autoincrement integer assigned by the store
    - grid holds serialized JSON text; "" means never saved (regenerated on load)
    - is_finished transitions False -> True only
    - finished_at holds the timer deadline while active, the finish time once finished

Design Decisions:
    - Text column for grid: the wire form is JSON already, no per-cell rows
    - cascade delete for permissions, ratings and flags: project owns them
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pixelcanvas.db.base import Base


class Project(Base):
    """Project aggregate root — owns grants, ratings and flags."""
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    owner_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    owner_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    xsize: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    ysize: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    grid: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_finished: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True,
    )
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    timer: Mapped[str] = mapped_column(
        String(20), nullable=False, default="unlimited",
    )
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
    )
    finished_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    permissions: Mapped[list["ProjectPermission"]] = relationship(
        "ProjectPermission", back_populates="project",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    ratings: Mapped[list["Rating"]] = relationship(
        "Rating", back_populates="project",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    flags: Mapped[list["Flag"]] = relationship(
        "Flag", back_populates="project",
        cascade="all, delete-orphan", passive_deletes=True,
    )
