"""Task lifecycle service.

Every mutation follows the same sequence: check access, write the task,
recount the project's counters, then append the activity entry. The steps
are separate writes; a failure part-way leaves earlier steps applied.
"""

from collections.abc import Sequence
from typing import Any
from uuid import UUID

import structlog

from taskboard.db.store import Store
from taskboard.exceptions import ValidationError
from taskboard.models.activity import ActivityType
from taskboard.models.project import TASK_COMPLETED, TASK_TODO, Task
from taskboard.models.user import User
from taskboard.schemas import TaskCreate, TaskReorder, TaskUpdate
from taskboard.services import access_control as ac
from taskboard.services import ordering
from taskboard.services.activity import ActivityService, FeedPage, TaskSnapshot
from taskboard.services.counters import recount

logger = structlog.get_logger()

# TaskUpdate field -> Task attribute, for fields whose names differ
_UPDATE_ATTRIBUTES = {"assigned_to": "assigned_to_id"}


class TaskService:
    """Service for task CRUD, toggling, reordering and the user feed."""

    def __init__(self, store: Store, activity: ActivityService | None = None):
        self.store = store
        self.activity = activity or ActivityService(store)

    async def _check_assignee(self, user_id: UUID | None) -> None:
        if user_id is not None and await self.store.get_user(user_id) is None:
            raise ValidationError("Assigned user not found")

    async def list_tasks(self, user_id: UUID, project_id: UUID) -> Sequence[Task]:
        """Tasks of a project the user can read, by order key."""
        project = await ac.get_accessible_project(
            self.store,
            project_id,
            user_id,
            "Project not found or you do not have access",
        )
        return await self.store.list_tasks(project.id)

    async def get_task(self, user_id: UUID, task_id: UUID) -> Task:
        task, _ = await ac.get_accessible_task(self.store, task_id, user_id)
        return task

    async def create_task(self, user: User, data: TaskCreate) -> Task:
        """Create a task at the end of the project; project owner only."""
        project = await ac.get_owned_project(
            self.store,
            data.project_id,
            user.id,
            "Project not found or you do not have access",
        )

        await self._check_assignee(data.assigned_to)
        order = await ordering.next_order(self.store, project.id)
        task = Task(
            title=data.title,
            description=data.description,
            project_id=project.id,
            assigned_to_id=data.assigned_to or user.id,
            created_by_id=user.id,
            status=TASK_TODO,
            priority=data.priority,
            due_date=data.due_date,
            tags=list(data.tags),
            completed=False,
            completed_at=None,
            order=order,
        )
        await self.store.add_task(task)
        await recount(self.store, project.id)

        await self.activity.record(ActivityType.TASK_CREATED, user.id, project, task)

        logger.info(
            "task_created",
            task_id=str(task.id),
            project_id=str(project.id),
            order=task.order,
        )
        return task

    async def update_task(self, user_id: UUID, task_id: UUID, data: TaskUpdate) -> Task:
        """Apply the sent fields; project owner only.

        An activity entry is recorded only when the derived ``completed``
        flag changes, not for every update.
        """
        task, project = await ac.get_accessible_task(self.store, task_id, user_id)
        before = TaskSnapshot.of(task)

        changes = data.changes()
        await self._check_assignee(changes.get("assigned_to"))
        status = changes.pop("status", None)
        for field, value in changes.items():
            setattr(task, _UPDATE_ATTRIBUTES.get(field, field), value)
        if status is not None:
            task.apply_status(status)

        await self.store.save_task(task)
        await recount(self.store, project.id)

        await self.activity.record_completion_change(user_id, project, before, task)

        logger.info(
            "task_updated",
            task_id=str(task_id),
            fields=sorted(data.changes()),
            completed=task.completed,
        )
        return task

    async def toggle_task(self, user_id: UUID, task_id: UUID) -> Task:
        """Flip between completed and todo, bypassing in_progress."""
        task, project = await ac.get_accessible_task(self.store, task_id, user_id)
        before = TaskSnapshot.of(task)

        task.apply_status(TASK_TODO if task.completed else TASK_COMPLETED)

        await self.store.save_task(task)
        await recount(self.store, project.id)

        await self.activity.record_completion_change(user_id, project, before, task)

        logger.info("task_toggled", task_id=str(task_id), completed=task.completed)
        return task

    async def delete_task(self, user_id: UUID, task_id: UUID) -> None:
        """Delete a task; project owner only. Records task_deleted."""
        task, project = await ac.get_accessible_task(self.store, task_id, user_id)
        snapshot = TaskSnapshot.of(task)

        await self.store.delete_task(task)
        await recount(self.store, project.id)

        await self.activity.record(ActivityType.TASK_DELETED, user_id, project, snapshot)

        logger.info("task_deleted", task_id=str(task_id), project_id=str(project.id))

    async def reorder_tasks(self, user_id: UUID, data: TaskReorder) -> None:
        """Reorder tasks; any user with project access (owner or collaborator)."""
        project = await ac.get_accessible_project(
            self.store,
            data.project_id,
            user_id,
            "Project not found or you do not have access",
        )
        await ordering.reorder(self.store, project.id, data.task_ids)

    async def activity_feed(self, user_id: UUID, page: Any = None, limit: Any = None) -> FeedPage:
        """The user's own activity feed, most recent first."""
        return await self.activity.feed(user_id, page, limit)
