"""Response envelopes shared by the v1 routers.

Every successful response carries ``success: true`` next to its payload.
"""

from taskboard.schemas import (
    ActivityResponse,
    APIModel,
    Pagination,
    ProjectResponse,
    ProjectStats,
    TaskResponse,
)
from taskboard.services.activity import FeedPage


class MessageEnvelope(APIModel):
    success: bool = True
    message: str


class ProjectListEnvelope(APIModel):
    success: bool = True
    projects: list[ProjectResponse]


class ProjectEnvelope(APIModel):
    success: bool = True
    message: str | None = None
    project: ProjectResponse


class ProjectStatsEnvelope(APIModel):
    success: bool = True
    stats: ProjectStats


class TaskListEnvelope(APIModel):
    success: bool = True
    tasks: list[TaskResponse]


class TaskEnvelope(APIModel):
    success: bool = True
    message: str | None = None
    task: TaskResponse


class ActivityFeedEnvelope(APIModel):
    success: bool = True
    activities: list[ActivityResponse]
    pagination: Pagination

    @classmethod
    def from_page(cls, feed: FeedPage) -> "ActivityFeedEnvelope":
        return cls(
            activities=[ActivityResponse.from_activity(a) for a in feed.activities],
            pagination=Pagination(
                current_page=feed.page,
                limit=feed.limit,
                total_items=feed.total,
                total_pages=feed.total_pages,
            ),
        )
