"""Moderation Store — ratings and flags against finished projects.

Invariants:
    - At most one rating per (project, rater): re-rating overwrites the score
    - At most one flag per (project, flagger): a duplicate raises DuplicateFlagError
      and leaves the count unchanged
    - Ratings and flags are deleted independently of each other
    - average_rating returns None for unrated projects

Design Decisions:
    - Explicit existence check before insert: the duplicate-flag answer is a domain
      error ("already exists"), not a DatabaseError from the unique constraint
    - Two concurrent requests can both pass the check. The loser hits the unique
      constraint, which is caught inside the session: flags answer DuplicateFlagError,
      ratings fall back to updating the winner's row
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from pixelcanvas.core.domain_types import ProjectId, UserId
from pixelcanvas.core.errors import DuplicateFlagError, ErrorContext
from pixelcanvas.infrastructure.database import DatabaseSessionManager
from pixelcanvas.models import Flag, Rating

logger = logging.getLogger(__name__)


def _duplicate_flag(project_id: ProjectId, user_id: UserId) -> DuplicateFlagError:
    return DuplicateFlagError(
        project_id, user_id, ErrorContext(project_id=project_id, user_id=user_id),
    )


class ModerationStoreAdapter:
    """Async persistence and aggregation for ratings and flags."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    # ─── Ratings ─────────────────────────────────────────────────

    async def submit_rating(self, project_id: ProjectId, user_id: UserId, score: int) -> None:
        async with self._db.session() as db:
            result = await db.execute(
                select(Rating).where(
                    Rating.project_id == project_id, Rating.user_id == user_id,
                ),
            )
            rating = result.scalar_one_or_none()
            if rating is not None:
                rating.score = score
                rating.updated_at = datetime.now(timezone.utc)
                await db.commit()
                return

            db.add(Rating(project_id=project_id, user_id=user_id, score=score))
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                logger.info(
                    f"Concurrent rating for project {project_id}, updating instead",
                    extra={"project_id": project_id, "user_id": user_id},
                )
                await db.execute(
                    update(Rating)
                    .where(Rating.project_id == project_id, Rating.user_id == user_id)
                    .values(score=score, updated_at=datetime.now(timezone.utc)),
                )
                await db.commit()

    async def delete_rating(self, project_id: ProjectId, user_id: UserId) -> bool:
        async with self._db.session() as db:
            result = await db.execute(
                delete(Rating).where(
                    Rating.project_id == project_id, Rating.user_id == user_id,
                ),
            )
            await db.commit()
            return result.rowcount > 0

    async def average_rating(self, project_id: ProjectId) -> float | None:
        async with self._db.session() as db:
            result = await db.execute(
                select(func.avg(Rating.score)).where(Rating.project_id == project_id),
            )
            value = result.scalar_one_or_none()
            return float(value) if value is not None else None

    # ─── Flags ───────────────────────────────────────────────────

    async def flag_project(self, project_id: ProjectId, user_id: UserId) -> None:
        async with self._db.session() as db:
            result = await db.execute(
                select(Flag.id).where(
                    Flag.project_id == project_id, Flag.user_id == user_id,
                ),
            )
            if result.first() is not None:
                raise _duplicate_flag(project_id, user_id)
            db.add(Flag(project_id=project_id, user_id=user_id))
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise _duplicate_flag(project_id, user_id)
        logger.info(
            f"Project {project_id} flagged by user {user_id}",
            extra={"project_id": project_id, "user_id": user_id},
        )

    async def delete_flag(self, project_id: ProjectId, user_id: UserId) -> bool:
        async with self._db.session() as db:
            result = await db.execute(
                delete(Flag).where(
                    Flag.project_id == project_id, Flag.user_id == user_id,
                ),
            )
            await db.commit()
            return result.rowcount > 0

    async def flag_count(self, project_id: ProjectId) -> int:
        async with self._db.session() as db:
            result = await db.execute(
                select(func.count(Flag.id)).where(Flag.project_id == project_id),
            )
            return int(result.scalar_one())
