"""Project task counters.

``tasks_count`` and ``completed_tasks_count`` are always recomputed from the
tasks table rather than adjusted incrementally, so a recount after any task
mutation converges to the live counts even if an earlier update was lost.
"""

from dataclasses import dataclass
from uuid import UUID

import structlog

from taskboard.db.store import Store

logger = structlog.get_logger()


@dataclass(frozen=True)
class TaskCounts:
    tasks_count: int
    completed_tasks_count: int


async def recount(store: Store, project_id: UUID) -> TaskCounts:
    """Recompute and persist a project's task counters."""
    await store.session.flush()

    total = await store.count_tasks(project_id)
    completed = await store.count_tasks(project_id, completed=True)
    await store.set_task_counts(project_id, total, completed)

    logger.debug(
        "project_task_counts_updated",
        project_id=str(project_id),
        tasks_count=total,
        completed_tasks_count=completed,
    )
    return TaskCounts(tasks_count=total, completed_tasks_count=completed)
