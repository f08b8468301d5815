"""
Row-level policy tests.

Each test acts through the services as one of three accounts: the project
owner, an invited member and an outsider with no relation to the project.
"""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from app.context import AuthenticatedUser
from app.exceptions import NotFoundError, PolicyViolationError, ValidationError
from app.models import Comment, ProjectMember, Task
from app.policies import DELETE, SELECT, UPDATE, ensure_check, policies_for, using_clause
from app.schemas import (
    CommentCreate,
    MemberCreate,
    MemberUpdate,
    ProfileCreate,
    ProfileUpdate,
    ProjectCreate,
    ProjectUpdate,
    TaskCreate,
    TaskUpdate,
)
from app.services import comments, members, profiles, projects, tasks
from app.services.accounts import create_account


async def new_user(session, name: str) -> AuthenticatedUser:
    account = await create_account(session, provider_uid=f"{name}-uid", email=f"{name}@example.com")
    return AuthenticatedUser(id=account.id, uid=account.provider_uid, email=account.email)


async def setup_project(session, owner, member=None, name="Launch"):
    project = await projects.create_project(session, owner, ProjectCreate(name=name))
    if member is not None:
        await members.add_member(session, owner, project.id, MemberCreate(user_id=member.id))
    return project


class TestProjectPolicies:

    @pytest.mark.asyncio
    async def test_owner_reads_own_project(self, test_session, owner):
        project = await setup_project(test_session, owner)

        listed = await projects.list_projects(test_session, owner)
        assert [p.id for p in listed] == [project.id]
        assert (await projects.get_project(test_session, owner, project.id)).owner_id == owner.id

    @pytest.mark.asyncio
    async def test_outsider_sees_nothing(self, test_session, owner, outsider):
        project = await setup_project(test_session, owner)

        assert await projects.list_projects(test_session, outsider) == []
        with pytest.raises(NotFoundError):
            await projects.get_project(test_session, outsider, project.id)

    @pytest.mark.asyncio
    async def test_member_reads_but_cannot_modify(self, test_session, owner, member):
        project = await setup_project(test_session, owner, member)

        listed = await projects.list_projects(test_session, member)
        assert [p.id for p in listed] == [project.id]
        assert await projects.list_projects(test_session, member, owned_only=True) == []

        with pytest.raises(NotFoundError):
            await projects.update_project(test_session, member, project.id, ProjectUpdate(name="Hijacked"))
        with pytest.raises(NotFoundError):
            await projects.delete_project(test_session, member, project.id)

    @pytest.mark.asyncio
    async def test_cannot_create_project_for_someone_else(self, test_session, owner, outsider):
        with pytest.raises(PolicyViolationError) as exc_info:
            await projects.create_project(
                test_session, owner, ProjectCreate(name="Gift", owner_id=outsider.id)
            )
        assert exc_info.value.table == "projects"

    @pytest.mark.asyncio
    async def test_owner_id_cannot_change(self, test_session, owner, outsider):
        project = await setup_project(test_session, owner)

        # Unknown fields are dropped by the update schema
        update = ProjectUpdate.model_validate({"name": "Renamed", "owner_id": str(outsider.id)})
        updated = await projects.update_project(test_session, owner, project.id, update)
        assert updated.name == "Renamed"
        assert updated.owner_id == owner.id

        # A row handed to another owner fails the update check
        project.owner_id = outsider.id
        with pytest.raises(PolicyViolationError):
            await ensure_check(test_session, UPDATE, owner.id, project)

    @pytest.mark.asyncio
    async def test_filter_by_status(self, test_session, owner):
        await setup_project(test_session, owner, name="Running")
        archived = await projects.create_project(
            test_session, owner, ProjectCreate(name="Old", status="archived")
        )

        listed = await projects.list_projects(test_session, owner, status="archived")
        assert [p.id for p in listed] == [archived.id]

    @pytest.mark.asyncio
    async def test_delete_cascades(self, test_session, owner, member):
        project = await setup_project(test_session, owner, member)
        task = await tasks.create_task(
            test_session, member, TaskCreate(project_id=project.id, title="Write docs")
        )
        await comments.create_comment(test_session, owner, task.id, CommentCreate(content="Thanks"))
        project_id, task_id = project.id, task.id

        await projects.delete_project(test_session, owner, project_id)

        remaining_members = await test_session.execute(
            select(ProjectMember).where(ProjectMember.project_id == project_id)
        )
        remaining_tasks = await test_session.execute(select(Task).where(Task.project_id == project_id))
        remaining_comments = await test_session.execute(select(Comment).where(Comment.task_id == task_id))
        assert remaining_members.scalars().all() == []
        assert remaining_tasks.scalars().all() == []
        assert remaining_comments.scalars().all() == []


class TestMembershipPolicies:

    @pytest.mark.asyncio
    async def test_membership_grants_and_revokes_access(self, test_session, owner, member):
        project = await setup_project(test_session, owner)
        task = await tasks.create_task(test_session, owner, TaskCreate(project_id=project.id, title="Plan"))
        await comments.create_comment(test_session, owner, task.id, CommentCreate(content="Kickoff"))

        assert await tasks.list_tasks(test_session, member, project_id=project.id) == []

        membership = await members.add_member(
            test_session, owner, project.id, MemberCreate(user_id=member.id)
        )
        assert [t.id for t in await tasks.list_tasks(test_session, member, project_id=project.id)] == [task.id]
        assert len(await comments.list_comments(test_session, member, task.id)) == 1

        await members.remove_member(test_session, owner, project.id, membership.id)
        assert await tasks.list_tasks(test_session, member, project_id=project.id) == []
        with pytest.raises(NotFoundError):
            await comments.list_comments(test_session, member, task.id)

    @pytest.mark.asyncio
    async def test_only_owner_manages_members(self, test_session, owner, member, outsider):
        project = await setup_project(test_session, owner, member)

        with pytest.raises(PolicyViolationError):
            await members.add_member(test_session, member, project.id, MemberCreate(user_id=outsider.id))

        membership = (await members.list_members(test_session, member, project.id))[0]
        with pytest.raises(NotFoundError):
            await members.update_member_role(
                test_session, member, project.id, membership.id, MemberUpdate(role="admin")
            )
        with pytest.raises(NotFoundError):
            await members.remove_member(test_session, member, project.id, membership.id)

        promoted = await members.update_member_role(
            test_session, owner, project.id, membership.id, MemberUpdate(role="admin")
        )
        assert promoted.role == "admin"

    @pytest.mark.asyncio
    async def test_members_see_each_other(self, test_session, owner, member, outsider):
        project = await setup_project(test_session, owner, member)
        await members.add_member(test_session, owner, project.id, MemberCreate(user_id=outsider.id))

        listed = await members.list_members(test_session, member, project.id)
        assert {m.user_id for m in listed} == {member.id, outsider.id}

    @pytest.mark.asyncio
    async def test_hidden_project_members_not_found(self, test_session, owner, outsider):
        project = await setup_project(test_session, owner)

        with pytest.raises(NotFoundError):
            await members.list_members(test_session, outsider, project.id)

    @pytest.mark.asyncio
    async def test_owner_is_not_a_member_row(self, test_session, owner):
        project = await setup_project(test_session, owner)

        with pytest.raises(ValidationError):
            await members.add_member(test_session, owner, project.id, MemberCreate(user_id=owner.id))

    @pytest.mark.asyncio
    async def test_membership_is_unique(self, test_session, owner, member):
        project = await setup_project(test_session, owner, member)

        with pytest.raises(IntegrityError):
            await members.add_member(test_session, owner, project.id, MemberCreate(user_id=member.id))


class TestTaskPolicies:

    @pytest.mark.asyncio
    async def test_collaboration_scenario(self, test_session, owner, member, outsider):
        project = await setup_project(test_session, owner, member)
        task = await tasks.create_task(
            test_session, member, TaskCreate(project_id=project.id, title="Draft brief")
        )
        assert task.created_by == member.id
        assert task.assigned_to is None

        by_owner = await tasks.update_task(test_session, owner, task.id, TaskUpdate(status="in_progress"))
        assert by_owner.status == "in_progress"
        by_member = await tasks.update_task(test_session, member, task.id, TaskUpdate(status="done"))
        assert by_member.status == "done"

        assert await tasks.list_tasks(test_session, outsider) == []
        with pytest.raises(NotFoundError):
            await tasks.get_task(test_session, outsider, task.id)
        with pytest.raises(NotFoundError):
            await tasks.update_task(test_session, outsider, task.id, TaskUpdate(title="Mine"))
        with pytest.raises(PolicyViolationError) as exc_info:
            await comments.create_comment(
                test_session, outsider, task.id, CommentCreate(content="Let me in")
            )
        assert exc_info.value.table == "comments"

    @pytest.mark.asyncio
    async def test_outsider_cannot_create_task(self, test_session, owner, outsider):
        project = await setup_project(test_session, owner)

        with pytest.raises(PolicyViolationError):
            await tasks.create_task(test_session, outsider, TaskCreate(project_id=project.id, title="Sneak"))

    @pytest.mark.asyncio
    async def test_creator_must_be_caller(self, test_session, owner, member):
        project = await setup_project(test_session, owner, member)

        with pytest.raises(PolicyViolationError):
            await tasks.create_task(
                test_session,
                member,
                TaskCreate(project_id=project.id, title="Blame owner", created_by=owner.id),
            )

    @pytest.mark.asyncio
    async def test_assignee_can_update(self, test_session, owner, member):
        colleague = await new_user(test_session, "colleague")
        project = await setup_project(test_session, owner, member)
        await members.add_member(test_session, owner, project.id, MemberCreate(user_id=colleague.id))
        task = await tasks.create_task(
            test_session,
            owner,
            TaskCreate(project_id=project.id, title="Review", assigned_to=member.id),
        )

        updated = await tasks.update_task(test_session, member, task.id, TaskUpdate(priority="high"))
        assert updated.priority == "high"

        # Visible to the colleague, but neither created by nor assigned to them
        assert (await tasks.get_task(test_session, colleague, task.id)).id == task.id
        with pytest.raises(NotFoundError):
            await tasks.update_task(test_session, colleague, task.id, TaskUpdate(priority="low"))

    @pytest.mark.asyncio
    async def test_assignee_cannot_hand_task_away(self, test_session, owner, member, outsider):
        project = await setup_project(test_session, owner, member)
        task = await tasks.create_task(
            test_session,
            owner,
            TaskCreate(project_id=project.id, title="Review", assigned_to=member.id),
        )

        with pytest.raises(PolicyViolationError):
            await tasks.update_task(test_session, member, task.id, TaskUpdate(assigned_to=outsider.id))

    @pytest.mark.asyncio
    async def test_filters(self, test_session, owner, member):
        project = await setup_project(test_session, owner, member)
        mine = await tasks.create_task(
            test_session, member, TaskCreate(project_id=project.id, title="Mine", status="done")
        )
        theirs = await tasks.create_task(
            test_session,
            owner,
            TaskCreate(project_id=project.id, title="Theirs", assigned_to=member.id),
        )

        assert [t.id for t in await tasks.list_tasks(test_session, owner, created_by=member.id)] == [mine.id]
        assert [t.id for t in await tasks.list_tasks(test_session, owner, assigned_to=member.id)] == [theirs.id]
        assert [t.id for t in await tasks.list_tasks(test_session, owner, status="done")] == [mine.id]

    @pytest.mark.asyncio
    async def test_tasks_have_no_delete_policy(self, test_session, owner):
        project = await setup_project(test_session, owner)
        await tasks.create_task(test_session, owner, TaskCreate(project_id=project.id, title="Keep"))

        assert all(policy.command not in (DELETE, "all") for policy in policies_for(Task))
        deletable = await test_session.execute(select(Task.id).where(using_clause(Task, DELETE, owner.id)))
        assert deletable.all() == []
        visible_rows = await test_session.execute(select(Task.id).where(using_clause(Task, SELECT, owner.id)))
        assert len(visible_rows.all()) == 1


class TestCommentPolicies:

    @pytest.mark.asyncio
    async def test_member_comment_visible_to_owner(self, test_session, owner, member):
        project = await setup_project(test_session, owner, member)
        task = await tasks.create_task(test_session, owner, TaskCreate(project_id=project.id, title="Plan"))

        comment = await comments.create_comment(
            test_session, member, task.id, CommentCreate(content="On it")
        )
        assert comment.user_id == member.id

        listed = await comments.list_comments(test_session, owner, task.id)
        assert [c.content for c in listed] == ["On it"]

    @pytest.mark.asyncio
    async def test_author_must_be_caller(self, test_session, owner, member):
        project = await setup_project(test_session, owner, member)
        task = await tasks.create_task(test_session, owner, TaskCreate(project_id=project.id, title="Plan"))

        with pytest.raises(PolicyViolationError):
            await comments.create_comment(
                test_session, member, task.id, CommentCreate(content="Said the owner", user_id=owner.id)
            )

    @pytest.mark.asyncio
    async def test_comment_on_missing_task_rejected(self, test_session, owner):
        with pytest.raises(PolicyViolationError):
            await comments.create_comment(test_session, owner, uuid.uuid4(), CommentCreate(content="Hello?"))


class TestProfilePolicies:

    @pytest.mark.asyncio
    async def test_profiles_are_public(self, test_session, owner, outsider):
        listed = await profiles.list_profiles(test_session, outsider)
        assert {p.user_id for p in listed} == {owner.id, outsider.id}

    @pytest.mark.asyncio
    async def test_only_own_profile_updatable(self, test_session, owner, outsider):
        owner_profile = await profiles.get_own_profile(test_session, owner)

        with pytest.raises(NotFoundError):
            await profiles.update_profile(
                test_session, outsider, owner_profile.id, ProfileUpdate(full_name="Renamed")
            )

        updated = await profiles.update_profile(
            test_session, owner, owner_profile.id, ProfileUpdate(avatar_url="https://img.example.com/o.png")
        )
        assert updated.avatar_url == "https://img.example.com/o.png"

    @pytest.mark.asyncio
    async def test_cannot_insert_profile_for_someone_else(self, test_session, owner, outsider):
        with pytest.raises(PolicyViolationError):
            await profiles.create_profile(test_session, outsider, ProfileCreate(user_id=owner.id))

    @pytest.mark.asyncio
    async def test_second_own_profile_violates_uniqueness(self, test_session, owner):
        with pytest.raises(IntegrityError):
            await profiles.create_profile(test_session, owner, ProfileCreate(full_name="Again"))
