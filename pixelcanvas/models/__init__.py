"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Project is the aggregate root; grants, ratings and flags scoped by project_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from pixelcanvas.models.project import Project  # noqa: F401
from pixelcanvas.models.permission import ProjectPermission  # noqa: F401
from pixelcanvas.models.rating import Rating  # noqa: F401
from pixelcanvas.models.flag import Flag  # noqa: F401
