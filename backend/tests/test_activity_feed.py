from datetime import datetime, timezone
from uuid import UUID, uuid4

import pytest

from taskboard.exceptions import NotFoundOrForbidden
from taskboard.models.activity import Activity, ActivityType
from taskboard.schemas import CollaboratorAdd, ProjectCreate, ProjectUpdate, TaskCreate
from taskboard.services.activity import ProjectSnapshot


@pytest.fixture
async def owner(make_user):
    return await make_user("Owner", "owner@acme.io")


@pytest.fixture
async def project(project_service, owner):
    return await project_service.create_project(owner, ProjectCreate(title="Sprint 1"))


async def test_record_snapshots_project_title_for_project_events(activity, owner, project):
    entry = await activity.record(ActivityType.PROJECT_CREATED, owner.id, project)

    assert entry.project_id == project.id
    assert entry.project_name == "Sprint 1"
    assert entry.task == "Sprint 1"
    assert entry.task_id is None
    assert entry.extra_data == {}


async def test_record_accepts_snapshot_of_deleted_project(activity, owner):
    snapshot = ProjectSnapshot(id=uuid4(), title="Gone")

    entry = await activity.record(
        ActivityType.PROJECT_DELETED, owner.id, snapshot, extra_data={"deletedTasks": 0}
    )

    assert entry.project_name == "Gone"
    assert entry.extra_data == {"deletedTasks": 0}


async def test_renames_do_not_rewrite_history(
    project_service, task_service, store, owner, project
):
    task = await task_service.create_task(owner, TaskCreate(title="Design", project_id=project.id))
    await project_service.update_project(owner.id, project.id, ProjectUpdate(title="Sprint 2"))

    entries = await store.list_activities(project_id=project.id)
    created = next(e for e in entries if e.activity_type == "task_created")
    assert created.task_id == task.id
    assert created.task == "Design"
    assert created.project_name == "Sprint 1"


async def test_feed_lists_the_users_entries_newest_first(task_service, owner, project):
    task = await task_service.create_task(owner, TaskCreate(title="Design", project_id=project.id))
    await task_service.toggle_task(owner.id, task.id)

    page = await task_service.activity_feed(owner.id)

    assert [a.activity_type for a in page.activities] == [
        "task_completed",
        "task_created",
        "project_created",
    ]
    assert (page.page, page.limit, page.total, page.total_pages) == (1, 20, 3, 1)


async def test_feed_is_scoped_to_the_acting_user(
    project_service, task_service, make_user, owner, project
):
    member = await make_user("Member", "member@acme.io")
    await project_service.add_collaborator(
        owner.id, project.id, CollaboratorAdd(user_email=member.email)
    )
    task = await task_service.create_task(owner, TaskCreate(title="Design", project_id=project.id))
    await task_service.toggle_task(owner.id, task.id)

    page = await task_service.activity_feed(member.id)

    assert page.activities == []
    assert page.total == 0
    assert page.total_pages == 0


async def test_feed_pagination_and_clamping(task_service, owner, project):
    for i in range(24):
        await task_service.create_task(owner, TaskCreate(title=f"t{i}", project_id=project.id))

    second = await task_service.activity_feed(owner.id, page="2", limit="10")
    assert len(second.activities) == 10
    assert (second.page, second.limit, second.total, second.total_pages) == (2, 10, 25, 3)

    last = await task_service.activity_feed(owner.id, page=3, limit=10)
    assert len(last.activities) == 5

    beyond = await task_service.activity_feed(owner.id, page=9, limit=10)
    assert beyond.activities == []
    assert beyond.total == 25

    defaults = await task_service.activity_feed(owner.id, page="abc", limit="xyz")
    assert (defaults.page, defaults.limit, len(defaults.activities)) == (1, 20, 20)

    capped = await task_service.activity_feed(owner.id, limit=1000)
    assert capped.limit == 100
    assert len(capped.activities) == 25

    clamped = await task_service.activity_feed(owner.id, page=0, limit=0)
    assert (clamped.page, clamped.limit, len(clamped.activities)) == (1, 1, 1)


async def test_project_feed_requires_project_access(
    project_service, task_service, make_user, owner, project
):
    viewer = await make_user("Viewer", "viewer@acme.io")
    outsider = await make_user("Outsider", "outsider@acme.io")
    await project_service.add_collaborator(
        owner.id, project.id, CollaboratorAdd(user_email=viewer.email, role="viewer")
    )
    await task_service.create_task(owner, TaskCreate(title="Design", project_id=project.id))

    page = await project_service.activity_feed(viewer.id, project.id, limit=1)
    assert page.total == 2
    assert page.total_pages == 2
    assert [a.activity_type for a in page.activities] == ["task_created"]

    with pytest.raises(NotFoundOrForbidden):
        await project_service.activity_feed(outsider.id, project.id)


async def test_history_survives_project_deletion(project_service, store, owner, project):
    await project_service.delete_project(owner.id, project.id)

    types = [a.activity_type for a in await store.list_activities(user_id=owner.id)]
    assert types == ["project_deleted", "project_created"]


async def test_entries_with_equal_timestamps_have_stable_order(store, owner, project):
    at = datetime(2000, 1, 1, tzinfo=timezone.utc)
    ids = [UUID(int=n) for n in (2, 7, 5)]
    for entry_id in ids:
        await store.add_activity(
            Activity(
                id=entry_id,
                user_id=owner.id,
                project_id=project.id,
                project_name=project.title,
                task=project.title,
                activity_type=ActivityType.PROJECT_UPDATED.value,
                extra_data={},
                created_at=at,
                updated_at=at,
            )
        )

    entries = await store.list_activities(user_id=owner.id)

    assert [e.id for e in entries[-3:]] == sorted(ids, reverse=True)
