"""Project and task access control.

Three predicates gate every operation:

- project read access: the owner or any collaborator, whatever their role
- project mutation (update, delete, collaborator management): owner only
- task access (read, update, toggle, delete): owner of the task's project only

Task access is narrower than project read access: a collaborator can list a
project's tasks and reorder them but cannot open or change a single task.
"""

from uuid import UUID

import structlog

from taskboard.db.store import Store
from taskboard.exceptions import Forbidden, NotFoundOrForbidden
from taskboard.models.project import Project, Task

logger = structlog.get_logger()


def can_access_project(user_id: UUID, project: Project) -> bool:
    """Check if the user owns or collaborates on the project."""
    if project.owner_id == user_id:
        return True
    return project.collaborator_for(user_id) is not None


def can_mutate_project(user_id: UUID, project: Project) -> bool:
    """Only the owner may update or delete a project or manage collaborators."""
    return project.owner_id == user_id


def can_access_task(user_id: UUID, task: Task, project: Project) -> bool:
    """Only the owner of the task's project may access an individual task."""
    return task.project_id == project.id and project.owner_id == user_id


async def get_accessible_project(
    store: Store,
    project_id: UUID,
    user_id: UUID,
    message: str = "Project not found",
) -> Project:
    """Load a project the user can read.

    Raises:
        NotFoundOrForbidden: if the project does not exist or the user is
            neither its owner nor a collaborator
    """
    project = await store.get_project(project_id)
    if project is None or not can_access_project(user_id, project):
        logger.debug("project_access_denied", project_id=str(project_id), user_id=str(user_id))
        raise NotFoundOrForbidden(message)
    return project


async def get_owned_project(
    store: Store,
    project_id: UUID,
    user_id: UUID,
    message: str = "Project not found or you do not have permission",
) -> Project:
    """Load a project the user may mutate.

    Raises:
        NotFoundOrForbidden: if the project does not exist or the user is
            not its owner
    """
    project = await store.get_project(project_id)
    if project is None or not can_mutate_project(user_id, project):
        logger.debug("project_mutation_denied", project_id=str(project_id), user_id=str(user_id))
        raise NotFoundOrForbidden(message)
    return project


async def get_accessible_task(
    store: Store,
    task_id: UUID,
    user_id: UUID,
) -> tuple[Task, Project]:
    """Load a task together with its project for the project owner.

    Raises:
        NotFoundOrForbidden: if the task (or its project) does not exist
        Forbidden: if the user does not own the task's project
    """
    task = await store.get_task(task_id)
    if task is None:
        raise NotFoundOrForbidden("Task not found")

    project = await store.get_project(task.project_id)
    if project is None:
        raise NotFoundOrForbidden("Task not found")

    if not can_access_task(user_id, task, project):
        logger.debug("task_access_denied", task_id=str(task_id), user_id=str(user_id))
        raise Forbidden("You do not have access to this task")

    return task, project
