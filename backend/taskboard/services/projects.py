"""Project lifecycle service."""

from collections.abc import Sequence
from typing import Any
from uuid import UUID

import structlog

from taskboard.db.store import Store
from taskboard.exceptions import NotFoundOrForbidden, ValidationError
from taskboard.models.activity import ActivityType
from taskboard.models.project import Project, compute_progress
from taskboard.models.user import User
from taskboard.schemas import CollaboratorAdd, ProjectCreate, ProjectStats, ProjectUpdate
from taskboard.services import access_control as ac
from taskboard.services.activity import ActivityService, FeedPage, ProjectSnapshot

logger = structlog.get_logger()


class ProjectService:
    """Service for project CRUD, collaborators and statistics."""

    def __init__(self, store: Store, activity: ActivityService | None = None):
        self.store = store
        self.activity = activity or ActivityService(store)

    async def list_projects(self, user_id: UUID) -> Sequence[Project]:
        """Projects the user owns or collaborates on, newest first."""
        return await self.store.list_projects_for_user(user_id)

    async def get_project(self, user_id: UUID, project_id: UUID) -> Project:
        return await ac.get_accessible_project(self.store, project_id, user_id)

    async def create_project(self, owner: User, data: ProjectCreate) -> Project:
        """Create a project owned by ``owner`` and record project_created."""
        project = Project(
            title=data.title,
            description=data.description,
            color=data.color,
            priority=data.priority,
            due_date=data.due_date,
            status="active",
            owner_id=owner.id,
            owner=owner,
            collaborators=[],
            tasks_count=0,
            completed_tasks_count=0,
        )
        await self.store.add_project(project)

        await self.activity.record(ActivityType.PROJECT_CREATED, owner.id, project)

        logger.info("project_created", project_id=str(project.id), owner_id=str(owner.id))
        return project

    async def update_project(
        self, user_id: UUID, project_id: UUID, data: ProjectUpdate
    ) -> Project:
        """Apply the sent fields; owner only. Records project_updated."""
        project = await ac.get_owned_project(
            self.store,
            project_id,
            user_id,
            "Project not found or you do not have permission to update",
        )

        changes = data.changes()
        changed_fields = [
            field for field, value in changes.items() if getattr(project, field) != value
        ]
        for field, value in changes.items():
            setattr(project, field, value)
        await self.store.save_project(project)

        await self.activity.record(
            ActivityType.PROJECT_UPDATED,
            user_id,
            project,
            extra_data={"changes": changed_fields},
        )

        logger.info("project_updated", project_id=str(project_id), changes=changed_fields)
        return project

    async def delete_project(self, user_id: UUID, project_id: UUID) -> int:
        """Delete a project and all of its tasks; owner only.

        Records a single project_deleted entry rather than one per task.
        Returns the number of tasks removed.
        """
        project = await ac.get_owned_project(
            self.store,
            project_id,
            user_id,
            "Project not found or you do not have permission to delete",
        )
        snapshot = ProjectSnapshot.of(project)

        deleted_tasks = await self.store.delete_tasks_for_project(project.id)
        await self.store.delete_project(project)

        await self.activity.record(
            ActivityType.PROJECT_DELETED,
            user_id,
            snapshot,
            extra_data={"deletedTasks": deleted_tasks},
        )

        logger.info("project_deleted", project_id=str(project_id), deleted_tasks=deleted_tasks)
        return deleted_tasks

    async def add_collaborator(
        self, user_id: UUID, project_id: UUID, data: CollaboratorAdd
    ) -> Project:
        """Share the project with the user registered under ``data.user_email``."""
        project = await ac.get_owned_project(self.store, project_id, user_id)

        collaborator_user = await self.store.get_user_by_email(data.user_email)
        if collaborator_user is None:
            raise NotFoundOrForbidden("User not found with this email")

        if collaborator_user.id == project.owner_id:
            raise ValidationError("The project owner cannot be added as a collaborator")

        if project.collaborator_for(collaborator_user.id) is not None:
            raise ValidationError("User is already a collaborator")

        await self.store.add_collaborator(project, collaborator_user, data.role)

        logger.info(
            "project_collaborator_added",
            project_id=str(project_id),
            collaborator_id=str(collaborator_user.id),
            role=data.role,
        )
        return project

    async def remove_collaborator(
        self, user_id: UUID, project_id: UUID, collaborator_id: UUID
    ) -> Project:
        """Remove a collaborator; removing a non-collaborator is a no-op."""
        project = await ac.get_owned_project(self.store, project_id, user_id)

        removed = await self.store.remove_collaborator(project, collaborator_id)

        logger.info(
            "project_collaborator_removed",
            project_id=str(project_id),
            collaborator_id=str(collaborator_id),
            removed=removed,
        )
        return project

    async def stats(self, user_id: UUID, project_id: UUID) -> ProjectStats:
        """Task statistics from the stored counters plus a per-status breakdown."""
        project = await ac.get_accessible_project(self.store, project_id, user_id)
        by_status = await self.store.count_tasks_by_status(project.id)

        return ProjectStats(
            total_tasks=project.tasks_count,
            completed_tasks=project.completed_tasks_count,
            in_progress_tasks=project.tasks_count - project.completed_tasks_count,
            progress=compute_progress(project.tasks_count, project.completed_tasks_count),
            tasks_by_status=by_status,
        )

    async def activity_feed(
        self, user_id: UUID, project_id: UUID, page: Any = None, limit: Any = None
    ) -> FeedPage:
        """Feed entries for a project the user can read."""
        project = await ac.get_accessible_project(self.store, project_id, user_id)
        return await self.activity.project_feed(project.id, page, limit)
