"""Request and response schemas.

Wire names are camelCase (``tasksCount``, ``userEmail``, ``taskIds``); Python
code uses the snake_case field names.
"""

from datetime import date, datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from taskboard.models.activity import Activity

ProjectColor = Literal[
    "bg-green-100",
    "bg-yellow-100",
    "bg-red-100",
    "bg-blue-100",
    "bg-purple-100",
    "bg-pink-100",
]
ProjectStatus = Literal["active", "completed", "archived"]
Priority = Literal["low", "medium", "high"]
CollaboratorRole = Literal["viewer", "editor", "admin"]
TaskStatus = Literal["todo", "in_progress", "completed"]


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def normalize_tags(tags: list[str] | None) -> list[str] | None:
    """Trim tags, drop blanks and repeated values, keeping first occurrence."""
    if tags is None:
        return None
    seen: set[str] = set()
    normalized = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.add(tag)
            normalized.append(tag)
    return normalized


class APIModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Projects
# =============================================================================


class ProjectCreate(APIModel):
    """Create a new project."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    color: ProjectColor = "bg-blue-100"
    priority: Priority = "medium"
    due_date: date | None = None

    strip_text = field_validator("title", "description", mode="before")(_strip)


class ProjectUpdate(APIModel):
    """Update a project. Omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    color: ProjectColor | None = None
    priority: Priority | None = None
    status: ProjectStatus | None = None
    due_date: date | None = None

    strip_text = field_validator("title", "description", mode="before")(_strip)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly sent; null only clears the nullable ones."""
        data = self.model_dump(exclude_unset=True)
        return {
            key: value
            for key, value in data.items()
            if value is not None or key in ("description", "due_date")
        }


class CollaboratorAdd(APIModel):
    """Add a collaborator by email."""

    user_email: EmailStr
    role: CollaboratorRole = "editor"


class UserSummary(APIModel):
    id: UUID
    name: str
    email: str


class CollaboratorResponse(APIModel):
    user: UserSummary
    role: str


class ProjectResponse(APIModel):
    """Project response model."""

    id: UUID
    title: str
    description: str | None
    color: str
    status: str
    priority: str
    due_date: date | None
    owner: UserSummary
    collaborators: list[CollaboratorResponse]
    tasks_count: int
    completed_tasks_count: int
    progress: int
    created_at: datetime
    updated_at: datetime


class ProjectStats(APIModel):
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    progress: int
    tasks_by_status: dict[str, int]


# =============================================================================
# Tasks
# =============================================================================


class TaskCreate(APIModel):
    """Create a new task."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    project_id: UUID
    assigned_to: UUID | None = None
    priority: Priority = "medium"
    due_date: date | None = None
    tags: list[str] = Field(default_factory=list)

    strip_text = field_validator("title", "description", mode="before")(_strip)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return normalize_tags(v) or []


class TaskUpdate(APIModel):
    """Update a task. Omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    status: TaskStatus | None = None
    priority: Priority | None = None
    due_date: date | None = None
    tags: list[str] | None = None
    assigned_to: UUID | None = None

    strip_text = field_validator("title", "description", mode="before")(_strip)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str] | None) -> list[str] | None:
        return normalize_tags(v)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly sent; null only clears the nullable ones."""
        data = self.model_dump(exclude_unset=True)
        return {
            key: value
            for key, value in data.items()
            if value is not None or key in ("description", "due_date", "assigned_to")
        }


class TaskReorder(APIModel):
    """Assign order keys to tasks in the listed sequence."""

    task_ids: list[UUID]
    project_id: UUID


class TaskResponse(APIModel):
    """Task response model."""

    id: UUID
    title: str
    description: str | None
    project_id: UUID
    assigned_to_id: UUID | None
    created_by_id: UUID | None
    status: str
    priority: str
    due_date: date | None
    tags: list[str]
    completed: bool
    completed_at: datetime | None
    order: int
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Activity feed
# =============================================================================


class ActivityResponse(APIModel):
    """Activity feed entry."""

    id: UUID
    user: UUID
    project_id: UUID
    project_name: str
    task_id: UUID | None
    task: str
    type: str
    metadata: dict
    created_at: datetime

    @classmethod
    def from_activity(cls, activity: Activity) -> "ActivityResponse":
        return cls(
            id=activity.id,
            user=activity.user_id,
            project_id=activity.project_id,
            project_name=activity.project_name,
            task_id=activity.task_id,
            task=activity.task,
            type=activity.activity_type,
            metadata=activity.extra_data or {},
            created_at=activity.created_at,
        )


class Pagination(APIModel):
    current_page: int
    limit: int
    total_items: int
    total_pages: int
