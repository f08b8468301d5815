#!/usr/bin/env python3
"""
Seed script to populate a development database with demo data.

Creates a handful of accounts (each with its provisioned profile), projects
owned by the first account, memberships, tasks and comments. Everything but
the accounts goes through the regular services, so the seeded data obeys the
same row-level policies as the API.

Usage:
    python -m scripts.seed [--users 4] [--projects 3] [--tasks 8] [--clear]
"""

import argparse
import asyncio
import random
import time
from datetime import datetime, timedelta, timezone

from sqlalchemy import text

from app.context import AuthenticatedUser
from app.database import get_session_context, init_db
from app.models import Priority, ProjectStatus, TaskStatus
from app.schemas import CommentCreate, MemberCreate, ProjectCreate, TaskCreate
from app.services import comments, members, projects, tasks
from app.services.accounts import create_account


async def clear_data():
    """Clear all existing data."""
    print("Clearing existing data...")
    async with get_session_context() as session:
        for table in ("comments", "tasks", "project_members", "projects", "profiles", "accounts"):
            await session.execute(text(f"DELETE FROM {table}"))
    print("Data cleared.")


async def create_users(count: int) -> list[AuthenticatedUser]:
    users = []
    async with get_session_context() as session:
        for i in range(count):
            email = f"demo{i}@taskhive.dev"
            metadata = {"full_name": f"Demo User {i}"} if i % 2 == 0 else {}
            account = await create_account(
                session,
                provider_uid=f"seed-{i}-{int(time.time())}",
                email=email,
                user_metadata=metadata,
            )
            users.append(AuthenticatedUser(id=account.id, uid=account.provider_uid, email=email))
    return users


async def seed_projects(
    users: list[AuthenticatedUser],
    num_projects: int,
    tasks_per_project: int,
) -> None:
    owner, *others = users
    today = datetime.now(timezone.utc)

    async with get_session_context() as session:
        for p in range(num_projects):
            project = await projects.create_project(
                session,
                owner,
                ProjectCreate(
                    name=f"Demo Project {p + 1}",
                    description="Seeded project",
                    status=random.choice(list(ProjectStatus)),
                    priority=random.choice(list(Priority)),
                    start_date=today.date(),
                    end_date=(today + timedelta(days=30)).date(),
                ),
            )
            print(f"Created project: {project.name} ({project.id})")

            team = random.sample(others, k=min(len(others), 2))
            for member in team:
                await members.add_member(session, owner, project.id, MemberCreate(user_id=member.id))

            authors = [owner, *team]
            for t in range(tasks_per_project):
                author = random.choice(authors)
                assignee = random.choice([None, *authors])
                task = await tasks.create_task(
                    session,
                    author,
                    TaskCreate(
                        project_id=project.id,
                        title=f"Task {t + 1} of {project.name}",
                        status=random.choice(list(TaskStatus)),
                        priority=random.choice(list(Priority)),
                        assigned_to=assignee.id if assignee else None,
                        due_date=today + timedelta(days=random.randint(1, 30)),
                    ),
                )
                if random.random() < 0.5:
                    await comments.create_comment(
                        session,
                        random.choice(authors),
                        task.id,
                        CommentCreate(content="Looks good, picking this up."),
                    )


async def main():
    parser = argparse.ArgumentParser(description="Seed the database with demo data")
    parser.add_argument("--users", type=int, default=4, help="Number of accounts to create")
    parser.add_argument("--projects", type=int, default=3, help="Projects owned by the first account")
    parser.add_argument("--tasks", type=int, default=8, help="Tasks per project")
    parser.add_argument("--clear", action="store_true", help="Clear existing data first")

    args = parser.parse_args()

    print(f"=== Taskhive Seed Script ===")

    await init_db()

    if args.clear:
        await clear_data()

    start_time = time.time()
    users = await create_users(max(args.users, 1))
    await seed_projects(users, args.projects, args.tasks)
    print(f"Seed time: {time.time() - start_time:.2f}s")

    print(f"\n=== Seeding Complete ===")
    print(f"Owner account: {users[0].email} ({users[0].id})")


if __name__ == "__main__":
    asyncio.run(main())
