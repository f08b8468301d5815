"""
Tests for dashboard aggregation.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.models import Project, Task
from app.schemas import MemberCreate, ProjectCreate, TaskCreate
from app.services import members, projects, tasks
from app.services.dashboard import (
    UNKNOWN_PROJECT,
    build_dashboard,
    completion_percentage,
    completion_rate,
    compute_stats,
    summarize_projects,
    summarize_recent_tasks,
)


def make_project(name: str, status: str = "active") -> Project:
    return Project(
        id=uuid.uuid4(),
        name=name,
        status=status,
        owner_id=uuid.uuid4(),
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestCompletionMath:

    def test_no_tasks_is_zero(self):
        assert completion_percentage(0, 0) == 0.0
        assert completion_rate(0, 0) == 0

    def test_rounds_half_up(self):
        assert completion_rate(1, 8) == 13   # 12.5
        assert completion_rate(1, 3) == 33
        assert completion_rate(2, 3) == 67
        assert completion_rate(4, 4) == 100

    def test_percentage_is_not_rounded(self):
        assert completion_percentage(1, 3) == pytest.approx(33.333, rel=1e-3)


class TestSummaries:

    def test_counts_per_project(self):
        alpha, beta = make_project("Alpha"), make_project("Beta", status="completed")
        statuses = [
            (alpha.id, "done"),
            (alpha.id, "todo"),
            (alpha.id, "done"),
            (alpha.id, "in_progress"),
        ]

        summaries = summarize_projects([alpha, beta], statuses)

        assert [(s.name, s.task_count, s.completed_tasks) for s in summaries] == [
            ("Alpha", 4, 2),
            ("Beta", 0, 0),
        ]
        assert summaries[0].completion_percentage == 50.0
        assert summaries[1].completion_percentage == 0.0

    def test_stats_over_cards(self):
        alpha, beta = make_project("Alpha"), make_project("Beta", status="archived")
        statuses = [(alpha.id, "done")] + [(beta.id, "todo")] * 7

        stats = compute_stats(summarize_projects([alpha, beta], statuses))

        assert stats.total_projects == 2
        assert stats.active_projects == 1
        assert stats.total_tasks == 8
        assert stats.completed_tasks == 1
        assert stats.completion_rate == 13

    def test_empty_dashboard_stats(self):
        stats = compute_stats([])

        assert stats.total_projects == 0
        assert stats.completion_rate == 0

    def test_recent_task_without_visible_project(self):
        known = make_project("Known")
        task = Task(id=uuid.uuid4(), project_id=known.id, title="Orphan", created_by=uuid.uuid4())
        other = Task(id=uuid.uuid4(), project_id=uuid.uuid4(), title="Lost", created_by=uuid.uuid4())

        cards = summarize_recent_tasks([task, other], {known.id: known.name})

        assert [card.project_name for card in cards] == ["Known", UNKNOWN_PROJECT]


class TestBuildDashboard:

    @pytest.mark.asyncio
    async def test_new_account_has_empty_dashboard(self, test_session, outsider):
        dashboard = await build_dashboard(test_session, outsider)

        assert dashboard.projects == []
        assert dashboard.recent_tasks == []
        assert dashboard.stats.total_projects == 0
        assert dashboard.stats.completion_rate == 0

    @pytest.mark.asyncio
    async def test_owned_projects_with_counts(self, test_session, owner):
        project = await projects.create_project(test_session, owner, ProjectCreate(name="Launch"))
        for title, status in [("Plan", "done"), ("Build", "in_progress"), ("Ship", "todo")]:
            await tasks.create_task(
                test_session, owner, TaskCreate(project_id=project.id, title=title, status=status)
            )

        dashboard = await build_dashboard(test_session, owner)

        assert [card.name for card in dashboard.projects] == ["Launch"]
        card = dashboard.projects[0]
        assert (card.task_count, card.completed_tasks) == (3, 1)
        assert dashboard.stats.total_tasks == 3
        assert dashboard.stats.completed_tasks == 1
        assert dashboard.stats.completion_rate == 33
        assert {task.title for task in dashboard.recent_tasks} == {"Plan", "Build", "Ship"}
        assert all(task.project_name == "Launch" for task in dashboard.recent_tasks)

    @pytest.mark.asyncio
    async def test_only_newest_projects_are_summarized(self, test_session, owner):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for day in range(8):
            project = await projects.create_project(test_session, owner, ProjectCreate(name=f"P{day}"))
            project.created_at = start + timedelta(days=day)
        await test_session.flush()

        dashboard = await build_dashboard(test_session, owner)

        assert [card.name for card in dashboard.projects] == ["P7", "P6", "P5", "P4", "P3", "P2"]
        assert dashboard.stats.total_projects == 6

    @pytest.mark.asyncio
    async def test_member_projects_are_not_cards(self, test_session, owner, member):
        project = await projects.create_project(test_session, owner, ProjectCreate(name="Shared"))
        await members.add_member(test_session, owner, project.id, MemberCreate(user_id=member.id))
        await tasks.create_task(test_session, member, TaskCreate(project_id=project.id, title="Mine"))
        await tasks.create_task(test_session, owner, TaskCreate(project_id=project.id, title="Theirs"))

        dashboard = await build_dashboard(test_session, member)

        assert dashboard.projects == []
        assert dashboard.stats.total_tasks == 0
        assert [(t.title, t.project_name) for t in dashboard.recent_tasks] == [("Mine", "Shared")]

    @pytest.mark.asyncio
    async def test_recent_tasks_are_capped(self, test_session, owner):
        project = await projects.create_project(test_session, owner, ProjectCreate(name="Busy"))
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for hour in range(7):
            task = await tasks.create_task(
                test_session, owner, TaskCreate(project_id=project.id, title=f"T{hour}")
            )
            task.created_at = start + timedelta(hours=hour)
        await test_session.flush()

        dashboard = await build_dashboard(test_session, owner)

        assert [task.title for task in dashboard.recent_tasks] == ["T6", "T5", "T4", "T3", "T2"]
        assert dashboard.projects[0].task_count == 7
