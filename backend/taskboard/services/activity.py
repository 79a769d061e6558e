"""Activity feed service.

Entries are appended after the state change they describe has been written
and are never updated or deleted afterwards. Titles are copied into the
entry, so renaming a project or task later does not alter its history.
"""

import math
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog

from taskboard.db.store import Store
from taskboard.models.activity import Activity, ActivityType
from taskboard.models.project import Project, Task

logger = structlog.get_logger()

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class ProjectSnapshot:
    """Project identity captured before the project is deleted."""

    id: UUID
    title: str

    @classmethod
    def of(cls, project: Project) -> "ProjectSnapshot":
        return cls(id=project.id, title=project.title)


@dataclass(frozen=True)
class TaskSnapshot:
    """Task state captured before a mutation, for before/after comparison."""

    id: UUID
    title: str
    completed: bool

    @classmethod
    def of(cls, task: Task) -> "TaskSnapshot":
        return cls(id=task.id, title=task.title, completed=task.completed)


@dataclass
class FeedPage:
    """One page of activity entries plus pagination metadata."""

    activities: list[Activity]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(number, 1)


def normalize_page(
    page: Any,
    limit: Any,
    default_limit: int = DEFAULT_PAGE_SIZE,
    max_limit: int = MAX_PAGE_SIZE,
) -> tuple[int, int]:
    """Coerce raw page/limit values to positive integers.

    Missing or non-numeric values fall back to page 1 and ``default_limit``;
    values below 1 become 1 and ``limit`` is capped at ``max_limit``.
    ``page`` is capped so that the row offset fits a signed 64-bit integer.
    """
    limit = min(_positive_int(limit, default_limit), max_limit)
    page = min(_positive_int(page, 1), MAX_OFFSET // limit)
    return page, limit


class ActivityService:
    """Records and queries activity feed entries."""

    def __init__(
        self,
        store: Store,
        default_limit: int = DEFAULT_PAGE_SIZE,
        max_limit: int = MAX_PAGE_SIZE,
    ):
        self.store = store
        self.default_limit = default_limit
        self.max_limit = max_limit

    async def record(
        self,
        activity_type: ActivityType,
        user_id: UUID,
        project: Project | ProjectSnapshot,
        task: Task | TaskSnapshot | None = None,
        extra_data: dict | None = None,
    ) -> Activity:
        """Append one feed entry.

        For project events ``task`` is omitted and the project title is used
        as the entry's title snapshot.
        """
        activity = Activity(
            user_id=user_id,
            project_id=project.id,
            project_name=project.title,
            task_id=task.id if task is not None else None,
            task=task.title if task is not None else project.title,
            activity_type=ActivityType(activity_type).value,
            extra_data=dict(extra_data or {}),
        )
        await self.store.add_activity(activity)

        logger.info(
            "activity_recorded",
            activity_type=activity.activity_type,
            project_id=str(project.id),
            task_id=str(task.id) if task is not None else None,
            user_id=str(user_id),
        )
        return activity

    async def record_completion_change(
        self,
        user_id: UUID,
        project: Project,
        before: TaskSnapshot,
        after: Task,
    ) -> Activity | None:
        """Record task_completed/task_reopened only if ``completed`` flipped."""
        if before.completed == after.completed:
            return None
        activity_type = (
            ActivityType.TASK_COMPLETED if after.completed else ActivityType.TASK_REOPENED
        )
        return await self.record(activity_type, user_id, project, after)

    async def feed(self, user_id: UUID, page: Any = None, limit: Any = None) -> FeedPage:
        """Entries recorded for ``user_id``, most recent first."""
        return await self._page(page, limit, user_id=user_id)

    async def project_feed(
        self, project_id: UUID, page: Any = None, limit: Any = None
    ) -> FeedPage:
        """Entries recorded for ``project_id``, most recent first."""
        return await self._page(page, limit, project_id=project_id)

    async def _page(self, page: Any, limit: Any, **criteria: UUID) -> FeedPage:
        page, limit = normalize_page(page, limit, self.default_limit, self.max_limit)
        offset = (page - 1) * limit
        total = await self.store.count_activities(**criteria)
        if offset >= total:
            return FeedPage(activities=[], page=page, limit=limit, total=total)
        activities = await self.store.list_activities(offset=offset, limit=limit, **criteria)
        return FeedPage(activities=list(activities), page=page, limit=limit, total=total)
