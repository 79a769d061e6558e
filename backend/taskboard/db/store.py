"""Storage port for the taskboard core.

Services never build queries themselves; they call the per-entity methods on
:class:`Store`. A store wraps one session, so a request's reads and writes
share a unit of work, and tests can point it at an in-memory database.
"""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import bindparam, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.activity import Activity
from taskboard.models.project import Project, ProjectCollaborator, Task
from taskboard.models.user import User


class Store:
    """Per-entity persistence operations over an ``AsyncSession``."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    # =========================================================================
    # Users
    # =========================================================================

    async def add_user(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_user(self, user_id: UUID) -> User | None:
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    # =========================================================================
    # Projects
    # =========================================================================

    async def add_project(self, project: Project) -> Project:
        self.session.add(project)
        await self.session.flush()
        return project

    async def get_project(self, project_id: UUID) -> Project | None:
        result = await self.session.execute(
            select(Project)
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        return result.unique().scalar_one_or_none()

    async def list_projects_for_user(self, user_id: UUID) -> Sequence[Project]:
        """Projects the user owns or collaborates on, newest first."""
        result = await self.session.execute(
            select(Project)
            .where(
                or_(
                    Project.owner_id == user_id,
                    Project.collaborators.any(ProjectCollaborator.user_id == user_id),
                )
            )
            .order_by(Project.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return result.unique().scalars().all()

    async def save_project(self, project: Project) -> Project:
        await self.session.flush()
        return project

    async def delete_project(self, project: Project) -> None:
        await self.session.delete(project)
        await self.session.flush()

    async def set_task_counts(
        self, project_id: UUID, tasks_count: int, completed_tasks_count: int
    ) -> None:
        """Write both derived counters on the project row."""
        project = await self.session.get(Project, project_id)
        if project is None:
            return
        project.tasks_count = tasks_count
        project.completed_tasks_count = completed_tasks_count
        await self.session.flush()

    # =========================================================================
    # Collaborators
    # =========================================================================

    async def add_collaborator(
        self, project: Project, user: User, role: str
    ) -> ProjectCollaborator:
        collaborator = ProjectCollaborator(user_id=user.id, user=user, role=role)
        project.collaborators.append(collaborator)
        await self.session.flush()
        return collaborator

    async def remove_collaborator(self, project: Project, user_id: UUID) -> bool:
        collaborator = project.collaborator_for(user_id)
        if collaborator is None:
            return False
        project.collaborators.remove(collaborator)
        await self.session.flush()
        return True

    # =========================================================================
    # Tasks
    # =========================================================================

    async def add_task(self, task: Task) -> Task:
        self.session.add(task)
        await self.session.flush()
        return task

    async def get_task(self, task_id: UUID) -> Task | None:
        return await self.session.get(Task, task_id)

    async def save_task(self, task: Task) -> Task:
        await self.session.flush()
        return task

    async def list_tasks(self, project_id: UUID) -> Sequence[Task]:
        """Tasks of a project by order key, newest first among equal keys."""
        result = await self.session.execute(
            select(Task)
            .where(Task.project_id == project_id)
            .order_by(Task.order.asc(), Task.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return result.scalars().all()

    async def count_tasks(self, project_id: UUID, completed: bool | None = None) -> int:
        query = select(func.count()).select_from(Task).where(Task.project_id == project_id)
        if completed is not None:
            query = query.where(Task.completed == completed)
        return await self.session.scalar(query) or 0

    async def count_tasks_by_status(self, project_id: UUID) -> dict[str, int]:
        result = await self.session.execute(
            select(Task.status, func.count())
            .where(Task.project_id == project_id)
            .group_by(Task.status)
        )
        return {task_status: count for task_status, count in result.all()}

    async def max_task_order(self, project_id: UUID) -> int | None:
        return await self.session.scalar(
            select(func.max(Task.order)).where(Task.project_id == project_id)
        )

    async def set_task_orders(
        self, project_id: UUID, orders: Sequence[tuple[UUID, int]]
    ) -> None:
        """Assign order keys in one executemany batch.

        Ids that do not belong to ``project_id`` match no row and are skipped.
        """
        if not orders:
            return
        table = Task.__table__
        stmt = (
            update(table)
            .where(
                table.c.id == bindparam("b_task_id"),
                table.c.project_id == bindparam("b_project_id"),
            )
            .values(order=bindparam("b_order"))
        )
        await self.session.execute(
            stmt,
            [
                {"b_task_id": task_id, "b_project_id": project_id, "b_order": order}
                for task_id, order in orders
            ],
        )

    async def delete_task(self, task: Task) -> None:
        await self.session.delete(task)
        await self.session.flush()

    async def delete_tasks_for_project(self, project_id: UUID) -> int:
        result = await self.session.execute(
            delete(Task).where(Task.project_id == project_id)
        )
        return result.rowcount or 0

    # =========================================================================
    # Activity feed (append-only)
    # =========================================================================

    async def add_activity(self, activity: Activity) -> Activity:
        self.session.add(activity)
        await self.session.flush()
        return activity

    def _activity_filter(self, user_id: UUID | None, project_id: UUID | None) -> list:
        criteria = []
        if user_id is not None:
            criteria.append(Activity.user_id == user_id)
        if project_id is not None:
            criteria.append(Activity.project_id == project_id)
        return criteria

    async def list_activities(
        self,
        *,
        user_id: UUID | None = None,
        project_id: UUID | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[Activity]:
        result = await self.session.execute(
            select(Activity)
            .where(*self._activity_filter(user_id, project_id))
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return result.scalars().all()

    async def count_activities(
        self, *, user_id: UUID | None = None, project_id: UUID | None = None
    ) -> int:
        return await self.session.scalar(
            select(func.count())
            .select_from(Activity)
            .where(*self._activity_filter(user_id, project_id))
        ) or 0
