import pytest

from taskboard.schemas import ProjectCreate, TaskCreate
from taskboard.services.counters import TaskCounts, recount


@pytest.fixture
async def owner(make_user):
    return await make_user("Owner", "owner@acme.io")


@pytest.fixture
async def project(project_service, owner):
    return await project_service.create_project(owner, ProjectCreate(title="Sprint 1"))


async def test_recount_empty_project(store, project):
    counts = await recount(store, project.id)

    assert counts == TaskCounts(tasks_count=0, completed_tasks_count=0)
    assert (project.tasks_count, project.completed_tasks_count) == (0, 0)


async def test_recount_repairs_drifted_counters(task_service, store, owner, project):
    tasks = [
        await task_service.create_task(owner, TaskCreate(title=f"t{i}", project_id=project.id))
        for i in range(3)
    ]
    await task_service.toggle_task(owner.id, tasks[0].id)

    project.tasks_count = 99
    project.completed_tasks_count = 42
    await store.session.flush()

    first = await recount(store, project.id)
    second = await recount(store, project.id)

    assert first == second == TaskCounts(tasks_count=3, completed_tasks_count=1)
    refreshed = await store.get_project(project.id)
    assert (refreshed.tasks_count, refreshed.completed_tasks_count) == (3, 1)
    assert refreshed.progress == 33
