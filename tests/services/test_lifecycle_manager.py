"""Lifecycle Manager — orchestration of store writes and registry updates.

Tests cover:
    - create adds the freshly stored project to the registry
    - oversize grids are clamped; unknown timers degrade (lenient) or raise (strict)
    - save persists the live grid
    - finish persists, marks finished and leaves the registry
    - store failures come back in the outcome while the registry still updates
    - delete refuses finished projects; publish requires finished and is one-way
"""

import pytest

from pixelcanvas.core.domain_types import TimerSelector
from pixelcanvas.core.errors import (
    DatabaseError, InvalidTimerError, LifecycleError, ResourceNotFoundError,
)
from pixelcanvas.core.registry import PixelEdit
from pixelcanvas.infrastructure.tokens import Identity
from pixelcanvas.services.lifecycle_manager import LifecycleManager

OWNER = Identity(user_id=1, name="ada")


async def test_create_adds_to_registry(lifecycle, registry):
    project = await lifecycle.create_project(OWNER, "foo", 20, 20, "unlimited")
    assert registry.find_by_id(project.id) is project
    assert project.finished_at is None
    assert len(project.grid) == 20


async def test_create_clamps_oversize_grid(project_store, registry):
    manager = LifecycleManager(project_store, registry, max_grid_size=16)
    project = await manager.create_project(OWNER, "big", 500, 8)
    assert (project.xsize, project.ysize) == (16, 8)


async def test_create_unknown_timer_lenient(lifecycle):
    project = await lifecycle.create_project(OWNER, "foo", 2, 2, "2min")
    assert project.timer is TimerSelector.UNLIMITED


async def test_create_unknown_timer_strict(project_store, registry):
    manager = LifecycleManager(project_store, registry, lenient_timer=False)
    with pytest.raises(InvalidTimerError):
        await manager.create_project(OWNER, "foo", 2, 2, "2min")
    assert len(registry) == 0


async def test_create_insert_failure_leaves_registry_untouched(
    lifecycle, registry, project_store, monkeypatch,
):
    async def failing_create(*args, **kwargs):
        raise DatabaseError("Connection or operational error", "execute")

    monkeypatch.setattr(project_store, "create_project", failing_create)
    with pytest.raises(DatabaseError):
        await lifecycle.create_project(OWNER, "foo", 2, 2)
    assert len(registry) == 0


async def test_save_persists_live_grid(lifecycle, registry, project_store):
    project = await lifecycle.create_project(OWNER, "foo", 3, 3)
    registry.apply_pixel_edit(PixelEdit(project.id, 1, 1, "#0F0"))

    outcome = await lifecycle.save_project(project.id)

    assert outcome.ok
    stored = await project_store.load_project_by_id(project.id)
    assert stored.grid[1][1] == "#0F0"


async def test_save_unknown_project_raises(lifecycle):
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.save_project(99)


async def test_save_store_failure_returned_in_outcome(
    lifecycle, project_store, monkeypatch,
):
    project = await lifecycle.create_project(OWNER, "foo", 2, 2)

    async def failing_persist(state):
        raise DatabaseError("Connection or operational error", "execute")

    monkeypatch.setattr(project_store, "persist_project_state", failing_persist)
    outcome = await lifecycle.save_project(project.id)
    assert not outcome.ok
    assert outcome.project is project


async def test_finish_moves_project_out_of_registry(lifecycle, registry, project_store):
    project = await lifecycle.create_project(OWNER, "foo", 2, 2)
    registry.apply_pixel_edit(PixelEdit(project.id, 0, 0, "#000"))

    outcome = await lifecycle.finish_project(project.id)

    assert outcome.ok
    assert outcome.project.is_finished
    assert registry.find_by_id(project.id) is None
    finished = await project_store.load_finished_projects()
    assert [p.id for p in finished] == [project.id]
    assert finished[0].grid[0][0] == "#000"


async def test_finish_store_failure_still_leaves_registry(
    lifecycle, registry, project_store, monkeypatch,
):
    project = await lifecycle.create_project(OWNER, "foo", 2, 2)

    async def failing_mark(project_id):
        raise DatabaseError("Connection or operational error", "execute")

    monkeypatch.setattr(project_store, "mark_finished", failing_mark)
    outcome = await lifecycle.finish_project(project.id)
    assert outcome.store_error is not None
    assert registry.find_by_id(project.id) is None


async def test_delete_active_project(lifecycle, registry, project_store):
    project = await lifecycle.create_project(OWNER, "foo", 2, 2)
    outcome = await lifecycle.delete_project(project.id)
    assert outcome.ok
    assert len(registry) == 0
    assert await project_store.load_active_projects() == []


async def test_delete_finished_project_refused(lifecycle, project_store):
    project = await lifecycle.create_project(OWNER, "foo", 2, 2)
    await lifecycle.finish_project(project.id)
    with pytest.raises(LifecycleError):
        await lifecycle.delete_project(project.id)
    assert len(await project_store.load_finished_projects()) == 1


async def test_delete_unknown_project_raises_not_found(lifecycle):
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.delete_project(404)


async def test_publish_requires_finished(lifecycle):
    project = await lifecycle.create_project(OWNER, "foo", 2, 2)
    with pytest.raises(LifecycleError):
        await lifecycle.publish_project(project.id)


async def test_publish_finished_project(lifecycle, project_store):
    project = await lifecycle.create_project(OWNER, "foo", 2, 2)
    await lifecycle.finish_project(project.id)
    published = await lifecycle.publish_project(project.id)
    assert published.is_public
    assert (await project_store.load_project_by_id(project.id)).is_public


async def test_unpublish_is_refused(lifecycle):
    with pytest.raises(LifecycleError):
        await lifecycle.publish_project(1, False)
