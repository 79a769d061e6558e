"""Task order keys within a project."""

from collections.abc import Sequence
from uuid import UUID

import structlog

from taskboard.db.store import Store

logger = structlog.get_logger()


async def next_order(store: Store, project_id: UUID) -> int:
    """Order key for a new task: one past the current maximum, 0 when empty.

    Two concurrent creates may read the same maximum and receive equal keys.
    """
    current_max = await store.max_task_order(project_id)
    return 0 if current_max is None else current_max + 1


async def reorder(store: Store, project_id: UUID, task_ids: Sequence[UUID]) -> None:
    """Give each listed task its index in ``task_ids`` as the new order key.

    Tasks that are not listed keep their previous keys, which may now collide
    with the assigned ones. Ids of tasks outside the project are ignored.
    """
    await store.set_task_orders(
        project_id,
        [(task_id, index) for index, task_id in enumerate(task_ids)],
    )
    logger.info("tasks_reordered", project_id=str(project_id), count=len(task_ids))
