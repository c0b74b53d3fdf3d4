"""Database Session Manager — error mapping and rollback against SQLite.

Tests cover:
    - A unique-constraint violation surfaces as DatabaseError (commit, 503)
    - Domain errors raised inside a session propagate unchanged and roll back
    - health_check reports a reachable database as healthy
"""

import pytest
from sqlalchemy import select

from pixelcanvas.core.errors import DatabaseError, ResourceNotFoundError
from pixelcanvas.models import Flag, Project


async def _project_id(db_manager) -> int:
    async with db_manager.session() as db:
        row = Project(owner_id=1, owner_name="ada", name="p", xsize=1, ysize=1, grid="")
        db.add(row)
        await db.commit()
        return row.id


async def test_integrity_error_maps_to_database_error(db_manager):
    project_id = await _project_id(db_manager)
    async with db_manager.session() as db:
        db.add(Flag(project_id=project_id, user_id=5))
        await db.commit()

    with pytest.raises(DatabaseError) as exc_info:
        async with db_manager.session() as db:
            db.add(Flag(project_id=project_id, user_id=5))
            await db.commit()
    assert exc_info.value.operation == "commit"
    assert exc_info.value.http_status == 503


async def test_domain_error_propagates_and_rolls_back(db_manager):
    project_id = await _project_id(db_manager)

    with pytest.raises(ResourceNotFoundError):
        async with db_manager.session() as db:
            db.add(Flag(project_id=project_id, user_id=6))
            await db.flush()
            raise ResourceNotFoundError("Flag", "6")

    async with db_manager.session() as db:
        result = await db.execute(select(Flag).where(Flag.user_id == 6))
        assert result.first() is None


async def test_health_check(db_manager):
    assert await db_manager.health_check() is True
