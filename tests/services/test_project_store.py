"""Project Store Adapter — tests against a real (SQLite) database.

Tests cover:
    - create_project inserts the row plus the owner grant; fresh grid on load
    - Timer deadline stored in finished_at (None for unlimited)
    - persist_project_state round-trips the grid and keeps edits made mid-write
    - Malformed stored grid text regenerates a fresh grid
    - mark_finished moves a project from active to finished
    - delete_project removes the row and everything scoped to it
    - Grants: idempotent grant, revoke, permitted_project_ids
    - find_orphaned_projects surfaces projects left without a grant
"""

import asyncio

import pytest

from pixelcanvas.core.domain_types import TimerSelector
from pixelcanvas.core.errors import DatabaseError, ResourceNotFoundError
from pixelcanvas.core.grid import create_grid, set_cell
from pixelcanvas.core.registry import PixelEdit, ProjectRegistry
from pixelcanvas.models import Project


async def test_create_then_load_active_shows_project_once(project_store):
    project_id = await project_store.create_project(1, "ada", "foo", 20, 20)
    active = await project_store.load_active_projects()
    assert [p.id for p in active] == [project_id]
    assert active[0].grid == create_grid(20, 20)
    assert active[0].owner_name == "ada"


async def test_unlimited_project_has_no_deadline(project_store):
    project_id = await project_store.create_project(
        1, "ada", "foo", 20, 20, TimerSelector.UNLIMITED,
    )
    project = await project_store.load_project_by_id(project_id)
    assert project.finished_at is None
    assert project.timer is TimerSelector.UNLIMITED
    assert (project.xsize, project.ysize) == (20, 20)
    assert project.grid == create_grid(20, 20)


async def test_timed_project_stores_deadline(project_store):
    project_id = await project_store.create_project(1, "ada", "foo", 4, 4, "5min")
    project = await project_store.load_project_by_id(project_id)
    assert project.timer is TimerSelector.FIVE_MINUTES
    assert project.finished_at is not None
    assert (project.finished_at - project.started_at).total_seconds() == pytest.approx(300)


async def test_create_grants_owner(project_store):
    project_id = await project_store.create_project(7, "ada", "foo", 2, 2)
    assert await project_store.has_permission(project_id, 7)
    assert await project_store.permitted_project_ids(7) == {project_id}


async def test_load_missing_project_raises_not_found(project_store):
    with pytest.raises(ResourceNotFoundError):
        await project_store.load_project_by_id(404)


async def test_persist_round_trips_grid(project_store):
    project_id = await project_store.create_project(1, "ada", "foo", 3, 2)
    project = await project_store.load_project_by_id(project_id)
    set_cell(project.grid, 2, 1, "#F00")

    await project_store.persist_project_state(project)

    reloaded = await project_store.load_project_by_id(project_id)
    assert reloaded.grid == project.grid
    assert reloaded.grid[1][2] == "#F00"


async def test_edit_during_persist_survives_in_memory(project_store):
    project_id = await project_store.create_project(1, "ada", "foo", 3, 3)
    project = await project_store.load_project_by_id(project_id)
    registry = ProjectRegistry([project])

    async def edit_while_writing():
        await asyncio.sleep(0)
        assert registry.apply_pixel_edit(PixelEdit(project_id, 1, 1, "#000"))

    await asyncio.gather(
        project_store.persist_project_state(project), edit_while_writing(),
    )

    assert registry.find_by_id(project_id).grid[1][1] == "#000"
    await project_store.persist_project_state(project)
    reloaded = await project_store.load_project_by_id(project_id)
    assert reloaded.grid[1][1] == "#000"


async def test_garbage_grid_text_loads_as_fresh_grid(project_store, test_session_factory):
    project_id = await project_store.create_project(1, "ada", "foo", 2, 2)
    async with test_session_factory() as session:
        row = await session.get(Project, project_id)
        row.grid = "{not a grid"
        await session.commit()

    assert (await project_store.load_project_by_id(project_id)).grid == create_grid(2, 2)
    assert [p.id for p in await project_store.load_active_projects()] == [project_id]


async def test_mark_finished_moves_project(project_store):
    keep = await project_store.create_project(1, "ada", "keep", 2, 2)
    done = await project_store.create_project(1, "ada", "done", 2, 2)

    await project_store.mark_finished(done)

    assert [p.id for p in await project_store.load_active_projects()] == [keep]
    finished = await project_store.load_finished_projects()
    assert [p.id for p in finished] == [done]
    assert finished[0].is_finished
    assert finished[0].finished_at is not None


async def test_delete_removes_project_and_grants(project_store):
    project_id = await project_store.create_project(1, "ada", "foo", 2, 2)
    await project_store.delete_project(project_id)
    with pytest.raises(ResourceNotFoundError):
        await project_store.load_project_by_id(project_id)
    assert await project_store.permitted_project_ids(1) == set()


async def test_set_public(project_store):
    project_id = await project_store.create_project(1, "ada", "foo", 2, 2)
    assert await project_store.set_public(project_id, True) is True
    assert (await project_store.load_project_by_id(project_id)).is_public


async def test_set_public_missing_project(project_store):
    with pytest.raises(ResourceNotFoundError):
        await project_store.set_public(999, True)


async def test_grant_is_idempotent_and_revocable(project_store):
    project_id = await project_store.create_project(1, "ada", "foo", 2, 2)
    await project_store.grant_permission(project_id, 2)
    await project_store.grant_permission(project_id, 2)
    assert await project_store.permitted_project_ids(2) == {project_id}

    assert await project_store.revoke_permission(project_id, 2) is True
    assert await project_store.revoke_permission(project_id, 2) is False
    assert not await project_store.has_permission(project_id, 2)


async def test_failed_owner_grant_keeps_project_as_orphan(project_store, monkeypatch):
    async def failing_grant(project_id, user_id):
        raise DatabaseError("Integrity constraint violated", "commit")

    monkeypatch.setattr(project_store, "grant_permission", failing_grant)
    project_id = await project_store.create_project(1, "ada", "foo", 2, 2)

    assert await project_store.load_project_by_id(project_id)
    assert await project_store.find_orphaned_projects() == [project_id]


async def test_empty_stored_grid_regenerates_with_default_color(
    project_store, test_session_factory,
):
    async with test_session_factory() as db:
        db.add(Project(name="legacy", xsize=2, ysize=1, grid=""))
        await db.commit()
    active = await project_store.load_active_projects()
    assert active[0].grid == [["#FFF", "#FFF"]]
