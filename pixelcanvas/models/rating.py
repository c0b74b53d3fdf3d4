"""Rating ORM — one score per (project, rater).

Invariants:
    - (project_id, user_id) is unique; re-rating updates score in place
    - score bounded MIN_RATING..MAX_RATING (validated at the schema boundary)
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pixelcanvas.db.base import Base


class Rating(Base):
    """Rating entity — a rater's score for a finished project."""
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_rating_project_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    project: Mapped["Project"] = relationship("Project", back_populates="ratings")
