"""Project, collaborator and task models."""

from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard.db.base import BaseModel, utcnow

if TYPE_CHECKING:
    from taskboard.models.user import User

TASK_COMPLETED = "completed"
TASK_TODO = "todo"


def compute_progress(tasks_count: int, completed_tasks_count: int) -> int:
    """Percentage of completed tasks, rounded half up; 0 for an empty project."""
    if tasks_count <= 0:
        return 0
    return int(completed_tasks_count * 100 / tasks_count + 0.5)


class Project(BaseModel):
    """Project owned by one user and shared with collaborators."""

    __tablename__ = "projects"

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="bg-blue-100")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active"
    )  # active, completed, archived
    priority: Mapped[str] = mapped_column(
        String(10), nullable=False, default="medium"
    )  # low, medium, high
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Ownership never changes after creation
    owner_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Derived from the tasks table by a full recount
    tasks_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_tasks_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    owner: Mapped["User"] = relationship("User", lazy="joined")
    collaborators: Mapped[list["ProjectCollaborator"]] = relationship(
        "ProjectCollaborator",
        back_populates="project",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="ProjectCollaborator.created_at",
    )

    @property
    def progress(self) -> int:
        return compute_progress(self.tasks_count, self.completed_tasks_count)

    def collaborator_for(self, user_id: UUID) -> "ProjectCollaborator | None":
        for collaborator in self.collaborators:
            if collaborator.user_id == user_id:
                return collaborator
        return None

    def __repr__(self) -> str:
        return f"<Project {self.title}>"


class ProjectCollaborator(BaseModel):
    """A user granted access to a project, with a role."""

    __tablename__ = "project_collaborators"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_collaborator"),
    )

    project_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="editor"
    )  # viewer, editor, admin

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="collaborators")
    user: Mapped["User"] = relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<ProjectCollaborator project={self.project_id} user={self.user_id}>"


class Task(BaseModel):
    """Task within a project, positioned by its integer order key."""

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    project_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_to_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_by_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TASK_TODO
    )  # todo, in_progress, completed
    priority: Mapped[str] = mapped_column(
        String(10), nullable=False, default="medium"
    )  # low, medium, high
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Derived from status, see apply_status()
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Position within the project; not unique
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def apply_status(self, status: str, now: datetime | None = None) -> None:
        """Set status and keep completed/completed_at consistent with it.

        Re-applying the current status is a no-op, so an already completed
        task keeps its original completion timestamp.
        """
        if status == self.status and self.completed == (status == TASK_COMPLETED):
            return
        self.status = status
        if status == TASK_COMPLETED:
            self.completed = True
            self.completed_at = now or utcnow()
        else:
            self.completed = False
            self.completed_at = None

    def __repr__(self) -> str:
        return f"<Task {self.title}>"
