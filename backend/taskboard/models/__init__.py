"""SQLAlchemy models package."""

from taskboard.models.user import User
from taskboard.models.project import Project, ProjectCollaborator, Task
from taskboard.models.activity import Activity, ActivityType

__all__ = [
    "User",
    "Project",
    "ProjectCollaborator",
    "Task",
    "Activity",
    "ActivityType",
]
