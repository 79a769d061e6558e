"""Services package."""

from taskboard.services.activity import ActivityService
from taskboard.services.projects import ProjectService
from taskboard.services.tasks import TaskService

__all__ = [
    "ActivityService",
    "ProjectService",
    "TaskService",
]
