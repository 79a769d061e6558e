"""Tasks API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from taskboard.api.deps import TaskServiceDep
from taskboard.api.envelopes import (
    ActivityFeedEnvelope,
    MessageEnvelope,
    TaskEnvelope,
    TaskListEnvelope,
)
from taskboard.api.v1.auth import CurrentUser
from taskboard.schemas import TaskCreate, TaskReorder, TaskResponse, TaskUpdate

router = APIRouter()


# Static paths are registered before "/{task_id}" so they are not shadowed.


@router.get("/activity/feed", response_model=ActivityFeedEnvelope)
async def get_activity_feed(
    current_user: CurrentUser,
    tasks: TaskServiceDep,
    page: str | None = Query(None),
    limit: str | None = Query(None),
) -> ActivityFeedEnvelope:
    """The current user's activity feed, most recent first."""
    feed = await tasks.activity_feed(current_user.id, page, limit)
    return ActivityFeedEnvelope.from_page(feed)


@router.patch("/reorder", response_model=MessageEnvelope)
async def reorder_tasks(
    reorder: TaskReorder,
    current_user: CurrentUser,
    tasks: TaskServiceDep,
) -> MessageEnvelope:
    """Assign order keys 0..n-1 following ``taskIds``."""
    await tasks.reorder_tasks(current_user.id, reorder)
    return MessageEnvelope(message="Tasks reordered successfully")


@router.get("/project/{project_id}", response_model=TaskListEnvelope)
async def list_project_tasks(
    project_id: UUID,
    current_user: CurrentUser,
    tasks: TaskServiceDep,
) -> TaskListEnvelope:
    """List the tasks of a project by order."""
    items = await tasks.list_tasks(current_user.id, project_id)
    return TaskListEnvelope(tasks=[TaskResponse.model_validate(t) for t in items])


@router.post("/", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    current_user: CurrentUser,
    tasks: TaskServiceDep,
) -> TaskEnvelope:
    """Create a task at the end of a project."""
    task = await tasks.create_task(current_user, task_data)
    return TaskEnvelope(
        message="Task created successfully",
        task=TaskResponse.model_validate(task),
    )


@router.get("/{task_id}", response_model=TaskEnvelope)
async def get_task(
    task_id: UUID,
    current_user: CurrentUser,
    tasks: TaskServiceDep,
) -> TaskEnvelope:
    task = await tasks.get_task(current_user.id, task_id)
    return TaskEnvelope(task=TaskResponse.model_validate(task))


@router.put("/{task_id}", response_model=TaskEnvelope)
async def update_task(
    task_id: UUID,
    updates: TaskUpdate,
    current_user: CurrentUser,
    tasks: TaskServiceDep,
) -> TaskEnvelope:
    """Update a task."""
    task = await tasks.update_task(current_user.id, task_id, updates)
    return TaskEnvelope(
        message="Task updated successfully",
        task=TaskResponse.model_validate(task),
    )


@router.patch("/{task_id}/toggle", response_model=TaskEnvelope)
async def toggle_task(
    task_id: UUID,
    current_user: CurrentUser,
    tasks: TaskServiceDep,
) -> TaskEnvelope:
    """Flip a task between completed and todo."""
    task = await tasks.toggle_task(current_user.id, task_id)
    verb = "completed" if task.completed else "reopened"
    return TaskEnvelope(
        message=f"Task {verb} successfully",
        task=TaskResponse.model_validate(task),
    )


@router.delete("/{task_id}", response_model=MessageEnvelope)
async def delete_task(
    task_id: UUID,
    current_user: CurrentUser,
    tasks: TaskServiceDep,
) -> MessageEnvelope:
    await tasks.delete_task(current_user.id, task_id)
    return MessageEnvelope(message="Task deleted successfully")
