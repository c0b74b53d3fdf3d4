"""Flag ORM — moderation concern raised by a user against a project.

Invariants:
    - (project_id, user_id) is unique; duplicates are rejected, never overwritten
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pixelcanvas.db.base import Base


class Flag(Base):
    """Flag entity — counted against FLAG_THRESHOLD for moderation review."""
    __tablename__ = "flags"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_flag_project_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    project: Mapped["Project"] = relationship("Project", back_populates="flags")
