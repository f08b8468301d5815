"""
Dashboard aggregation.

Display-only: every read goes through the select policies and the counts are
computed from whatever rows come back. Nothing here decides access.

The summary covers the caller's newest owned projects (``dashboard_project_limit``)
and the totals are computed over those same cards, not over every project the
caller can see.
"""

import math
from collections import Counter

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.config import get_settings
from app.context import AuthenticatedUser
from app.logging_config import get_logger
from app.models import Project, ProjectStatus, Task, TaskStatus
from app.policies import visible
from app.schemas import DashboardRead, DashboardStats, ProjectSummary, RecentTask

logger = get_logger(__name__)

UNKNOWN_PROJECT = "Unknown Project"


def completion_percentage(completed: int, total: int) -> float:
    if total == 0:
        return 0.0
    return completed / total * 100


def completion_rate(completed: int, total: int) -> int:
    """Whole-number percentage, halves rounded up."""
    return math.floor(completion_percentage(completed, total) + 0.5)


def summarize_projects(
    projects: list[Project],
    task_statuses: list[tuple],
) -> list[ProjectSummary]:
    """Attach task totals to each project from ``(project_id, status)`` rows."""
    totals: Counter = Counter()
    completed: Counter = Counter()
    for project_id, status in task_statuses:
        totals[project_id] += 1
        if status == TaskStatus.done.value:
            completed[project_id] += 1

    return [
        ProjectSummary(
            id=project.id,
            name=project.name,
            description=project.description,
            status=project.status,
            priority=project.priority,
            created_at=project.created_at,
            task_count=totals[project.id],
            completed_tasks=completed[project.id],
            completion_percentage=completion_percentage(completed[project.id], totals[project.id]),
        )
        for project in projects
    ]


def summarize_recent_tasks(tasks: list[Task], project_names: dict) -> list[RecentTask]:
    return [
        RecentTask(
            id=task.id,
            title=task.title,
            status=task.status,
            project_name=project_names.get(task.project_id, UNKNOWN_PROJECT),
            due_date=task.due_date,
        )
        for task in tasks
    ]


def compute_stats(summaries: list[ProjectSummary]) -> DashboardStats:
    total_tasks = sum(summary.task_count for summary in summaries)
    completed_tasks = sum(summary.completed_tasks for summary in summaries)
    return DashboardStats(
        total_projects=len(summaries),
        active_projects=sum(1 for summary in summaries if summary.status == ProjectStatus.active),
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        completion_rate=completion_rate(completed_tasks, total_tasks),
    )


async def build_dashboard(session: AsyncSession, caller: AuthenticatedUser) -> DashboardRead:
    settings = get_settings()

    projects_query = visible(
        select(Project).where(Project.owner_id == caller.id), Project, caller.id
    ).order_by(Project.created_at.desc()).limit(settings.dashboard_project_limit)
    projects = list((await session.execute(projects_query)).scalars().all())

    task_statuses: list[tuple] = []
    if projects:
        statuses_query = visible(
            select(Task.project_id, Task.status).where(
                Task.project_id.in_([project.id for project in projects])
            ),
            Task,
            caller.id,
        )
        task_statuses = [tuple(row) for row in (await session.execute(statuses_query)).all()]

    summaries = summarize_projects(projects, task_statuses)

    recent_query = visible(
        select(Task).where(Task.created_by == caller.id), Task, caller.id
    ).order_by(Task.created_at.desc()).limit(settings.dashboard_recent_task_limit)
    recent = list((await session.execute(recent_query)).scalars().all())

    project_names: dict = {}
    if recent:
        names_query = visible(
            select(Project.id, Project.name).where(
                Project.id.in_(list({task.project_id for task in recent}))
            ),
            Project,
            caller.id,
        )
        project_names = dict((await session.execute(names_query)).all())

    recent_tasks = summarize_recent_tasks(recent, project_names)

    logger.debug(
        f"Dashboard for caller={caller.id}: {len(summaries)} projects, {len(recent_tasks)} recent tasks"
    )

    return DashboardRead(
        stats=compute_stats(summaries),
        projects=summaries,
        recent_tasks=recent_tasks,
    )
