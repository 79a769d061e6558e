"""Request-scoped service dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.config import Settings, get_settings
from taskboard.db.session import get_db_session
from taskboard.db.store import Store
from taskboard.services.activity import ActivityService
from taskboard.services.projects import ProjectService
from taskboard.services.tasks import TaskService


def get_store(db: AsyncSession = Depends(get_db_session)) -> Store:
    return Store(db)


def get_activity_service(
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ActivityService:
    return ActivityService(
        store,
        default_limit=settings.feed_default_page_size,
        max_limit=settings.feed_max_page_size,
    )


def get_project_service(
    store: Store = Depends(get_store),
    activity: ActivityService = Depends(get_activity_service),
) -> ProjectService:
    return ProjectService(store, activity)


def get_task_service(
    store: Store = Depends(get_store),
    activity: ActivityService = Depends(get_activity_service),
) -> TaskService:
    return TaskService(store, activity)


ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
