"""Seed script to create a demo user with a populated project.

The project and its tasks are created through the service layer, so the
counters and the activity feed are filled in exactly as they would be by
API calls.

Usage:
    python -m taskboard.scripts.seed_demo_project

Prints a bearer token for the demo user, usable against the API.
"""

import asyncio
from datetime import date, timedelta

from taskboard.api.v1.auth import create_access_token
from taskboard.config import get_settings
from taskboard.db.session import close_database, open_database
from taskboard.db.store import Store
from taskboard.logging import configure_logging
from taskboard.models.user import User
from taskboard.schemas import ProjectCreate, TaskCreate, TaskUpdate
from taskboard.services import ActivityService, ProjectService, TaskService

DEMO_USER = {"email": "demo@taskboard.dev", "name": "Demo User"}

DEMO_PROJECT = {
    "title": "Demo: Website Relaunch",
    "description": "A sample project showing tasks across every status.",
    "color": "bg-purple-100",
    "priority": "high",
}

# (title, priority, tags, final status)
DEMO_TASKS = [
    ("Collect requirements", "high", ["planning"], "completed"),
    ("Draft sitemap", "medium", ["planning", "content"], "completed"),
    ("Design landing page", "high", ["design"], "in_progress"),
    ("Write launch announcement", "low", ["content"], "todo"),
    ("Set up analytics", "medium", ["ops"], "todo"),
]


async def get_or_create_demo_user(store: Store) -> User:
    """Get the demo user, creating it on first run."""
    user = await store.get_user_by_email(DEMO_USER["email"])
    if user is None:
        print("No demo user found. Creating one...")
        user = await store.add_user(User(**DEMO_USER, is_active=True))
    return user


async def seed_demo_project(store: Store, activity: ActivityService) -> User:
    """Create the demo project and its tasks for the demo user."""
    user = await get_or_create_demo_user(store)
    print(f"Using demo user: {user.email}")

    projects = ProjectService(store, activity)
    tasks = TaskService(store, activity)

    project = await projects.create_project(
        user,
        ProjectCreate(**DEMO_PROJECT, due_date=date.today() + timedelta(days=30)),
    )
    print(f"Created project: {project.title}")

    for title, priority, tags, final_status in DEMO_TASKS:
        task = await tasks.create_task(
            user,
            TaskCreate(title=title, project_id=project.id, priority=priority, tags=tags),
        )
        if final_status != "todo":
            await tasks.update_task(user.id, task.id, TaskUpdate(status=final_status))
    print(f"  Created {len(DEMO_TASKS)} tasks")

    await store.commit()
    print("\nDemo project seeded successfully!")
    print(f"Project ID: {project.id}")
    return user


async def main() -> None:
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings)

    print("Seeding demo project...")
    print("-" * 50)

    database = await open_database(settings)
    try:
        async with database.session() as session:
            store = Store(session)
            activity = ActivityService(
                store,
                default_limit=settings.feed_default_page_size,
                max_limit=settings.feed_max_page_size,
            )
            try:
                user = await seed_demo_project(store, activity)
            except Exception as e:
                print(f"Error seeding demo project: {e}")
                await session.rollback()
                raise
    finally:
        await close_database(database)

    print(f"Bearer token: {create_access_token(user.id, settings=settings)}")


if __name__ == "__main__":
    asyncio.run(main())
