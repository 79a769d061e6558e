"""Activity feed model."""

from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.db.base import BaseModel


class ActivityType(str, Enum):
    """Lifecycle events recorded in the feed."""

    TASK_CREATED = "task_created"
    TASK_COMPLETED = "task_completed"
    TASK_REOPENED = "task_reopened"
    TASK_DELETED = "task_deleted"
    PROJECT_CREATED = "project_created"
    PROJECT_DELETED = "project_deleted"
    PROJECT_UPDATED = "project_updated"


class Activity(BaseModel):
    """
    Immutable feed entry written after a project or task state change.

    Project and task titles are copied at event time, and the project/task
    ids are plain columns rather than foreign keys, so entries outlive the
    records they describe and are never rewritten by later renames.
    """

    __tablename__ = "activity_feed"
    __table_args__ = (
        Index("ix_activity_feed_user_created", "user_id", "created_at"),
        Index("ix_activity_feed_project_created", "project_id", "created_at"),
    )

    # Actor
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Denormalized context
    project_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    project_name: Mapped[str] = mapped_column(String(100), nullable=False)
    task_id: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    task: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Title snapshot of the task, or of the project for project events",
    )

    activity_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    # Opaque key/value bag
    extra_data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<Activity {self.activity_type} project={self.project_id}>"
