"""Projects API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from taskboard.api.deps import ProjectServiceDep
from taskboard.api.envelopes import (
    ActivityFeedEnvelope,
    MessageEnvelope,
    ProjectEnvelope,
    ProjectListEnvelope,
    ProjectStatsEnvelope,
)
from taskboard.api.v1.auth import CurrentUser
from taskboard.schemas import CollaboratorAdd, ProjectCreate, ProjectResponse, ProjectUpdate

router = APIRouter()


@router.get("/", response_model=ProjectListEnvelope)
async def list_projects(
    current_user: CurrentUser,
    projects: ProjectServiceDep,
) -> ProjectListEnvelope:
    """List projects the user owns or collaborates on."""
    items = await projects.list_projects(current_user.id)
    return ProjectListEnvelope(
        projects=[ProjectResponse.model_validate(project) for project in items]
    )


@router.get("/{project_id}", response_model=ProjectEnvelope)
async def get_project(
    project_id: UUID,
    current_user: CurrentUser,
    projects: ProjectServiceDep,
) -> ProjectEnvelope:
    """Get a single project."""
    project = await projects.get_project(current_user.id, project_id)
    return ProjectEnvelope(project=ProjectResponse.model_validate(project))


@router.post("/", response_model=ProjectEnvelope, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    current_user: CurrentUser,
    projects: ProjectServiceDep,
) -> ProjectEnvelope:
    """Create a new project owned by the current user."""
    project = await projects.create_project(current_user, project_data)
    return ProjectEnvelope(
        message="Project created successfully",
        project=ProjectResponse.model_validate(project),
    )


@router.put("/{project_id}", response_model=ProjectEnvelope)
async def update_project(
    project_id: UUID,
    updates: ProjectUpdate,
    current_user: CurrentUser,
    projects: ProjectServiceDep,
) -> ProjectEnvelope:
    """Update a project (owner only)."""
    project = await projects.update_project(current_user.id, project_id, updates)
    return ProjectEnvelope(
        message="Project updated successfully",
        project=ProjectResponse.model_validate(project),
    )


@router.delete("/{project_id}", response_model=MessageEnvelope)
async def delete_project(
    project_id: UUID,
    current_user: CurrentUser,
    projects: ProjectServiceDep,
) -> MessageEnvelope:
    """Delete a project and all of its tasks (owner only)."""
    await projects.delete_project(current_user.id, project_id)
    return MessageEnvelope(message="Project deleted successfully")


@router.post("/{project_id}/collaborators", response_model=ProjectEnvelope)
async def add_collaborator(
    project_id: UUID,
    collaborator: CollaboratorAdd,
    current_user: CurrentUser,
    projects: ProjectServiceDep,
) -> ProjectEnvelope:
    """Add a collaborator by email (owner only)."""
    project = await projects.add_collaborator(current_user.id, project_id, collaborator)
    return ProjectEnvelope(
        message="Collaborator added successfully",
        project=ProjectResponse.model_validate(project),
    )


@router.delete("/{project_id}/collaborators/{user_id}", response_model=ProjectEnvelope)
async def remove_collaborator(
    project_id: UUID,
    user_id: UUID,
    current_user: CurrentUser,
    projects: ProjectServiceDep,
) -> ProjectEnvelope:
    """Remove a collaborator (owner only)."""
    project = await projects.remove_collaborator(current_user.id, project_id, user_id)
    return ProjectEnvelope(
        message="Collaborator removed successfully",
        project=ProjectResponse.model_validate(project),
    )


@router.get("/{project_id}/stats", response_model=ProjectStatsEnvelope)
async def get_project_stats(
    project_id: UUID,
    current_user: CurrentUser,
    projects: ProjectServiceDep,
) -> ProjectStatsEnvelope:
    """Task statistics for a project."""
    stats = await projects.stats(current_user.id, project_id)
    return ProjectStatsEnvelope(stats=stats)


@router.get("/{project_id}/activity", response_model=ActivityFeedEnvelope)
async def get_project_activity(
    project_id: UUID,
    current_user: CurrentUser,
    projects: ProjectServiceDep,
    page: str | None = Query(None),
    limit: str | None = Query(None),
) -> ActivityFeedEnvelope:
    """Activity feed of a project, most recent first."""
    feed = await projects.activity_feed(current_user.id, project_id, page, limit)
    return ActivityFeedEnvelope.from_page(feed)
