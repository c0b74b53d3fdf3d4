"""ProjectPermission ORM — grants a user edit/view access to a project.

Invariants:
    - (user_id, project_id) is unique
    - Written after the project row on creation (separate unit of work)
"""

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pixelcanvas.db.base import Base


class ProjectPermission(Base):
    """Permission Grant between a user identity and a project."""
    __tablename__ = "project_permissions"
    __table_args__ = (
        UniqueConstraint("user_id", "project_id", name="uq_permission_user_project"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
    )

    project: Mapped["Project"] = relationship("Project", back_populates="permissions")
