from fastapi import HTTPException, status
from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import joinedload

from synergysphere.models.event import Event
from synergysphere.models.project import Project, ProjectMember
from synergysphere.models.tasks import Task
from synergysphere.schemas.project import ProjectCreate, ProjectUpdate, MemberAdd
from synergysphere.services.membership import (
    MANAGING_ROLES,
    ensure_member,
    get_membership,
    get_project_or_404,
    require_member,
)
from synergysphere.services.users import get_user_or_404


async def get_project_by_id(db: AsyncSession, project_id: int) -> Project:
    result = await db.execute(
        select(Project)
        .filter(Project.project_id == project_id)
        .execution_options(populate_existing=True)
    )
    project = result.scalars().first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


async def list_for_user(db: AsyncSession, user_id: int) -> list[Project]:
    result = await db.execute(
        select(Project)
        .join(ProjectMember, ProjectMember.project_id == Project.project_id)
        .filter(ProjectMember.user_id == user_id)
        .order_by(Project.updated_at.desc(), Project.project_id.desc())
    )
    return result.scalars().all()


async def get_for_member(db: AsyncSession, project_id: int, user_id: int) -> Project:
    project = await get_project_or_404(db, project_id)
    await require_member(db, project_id, user_id)
    return project


async def create_project(db: AsyncSession, data: ProjectCreate, current_user_id: int) -> Project:
    project = Project(
        name=data.name,
        description=data.description,
        priority=data.priority,
        deadline=data.deadline,
        tags=data.tags,
        manager_id=current_user_id,
    )
    db.add(project)
    await db.flush()

    # Creator becomes the owner member
    db.add(ProjectMember(project_id=project.project_id, user_id=current_user_id, role="owner"))
    await db.flush()
    return project


async def update_project(db: AsyncSession, project_id: int, data: ProjectUpdate,
                         current_user_id: int) -> tuple[Project, int | None]:
    """
    Returns the project and, when the manager changed to someone other than the
    caller, the id of the new manager.
    """
    project = await get_project_or_404(db, project_id)
    await require_member(db, project_id, current_user_id,
                         detail="You do not have permission to update this project")

    update_data = data.model_dump(exclude_unset=True)
    new_manager_id = None

    if "manager_id" in update_data and update_data["manager_id"] is not None:
        manager_id = update_data["manager_id"]
        if manager_id != project.manager_id:
            await get_user_or_404(db, manager_id, detail="Manager not found")
            member = await get_membership(db, project_id, manager_id)
            if member is None:
                await ensure_member(db, project_id, manager_id, role="manager")
            elif member.role == "member":
                member.role = "manager"
            if manager_id != current_user_id:
                new_manager_id = manager_id

    for key, value in update_data.items():
        # Required columns keep their value when the client sends null
        if key in ("name", "priority", "status", "tags") and value is None:
            continue
        setattr(project, key, value)

    await db.flush()
    return project, new_manager_id


async def delete_project(db: AsyncSession, project_id: int, current_user_id: int) -> list[int]:
    """Hard-deletes the project and everything it owns. Returns the former member ids."""
    await get_project_or_404(db, project_id)
    await require_member(db, project_id, current_user_id, roles=("owner",),
                         detail="Only project owners can delete projects")

    result = await db.execute(
        select(ProjectMember.user_id).filter(ProjectMember.project_id == project_id)
    )
    member_ids = list(result.scalars().all())

    task_ids = select(Task.task_id).filter(Task.project_id == project_id)
    await db.execute(update(Event).where(Event.task_id.in_(task_ids)).values(task_id=None))
    await db.execute(delete(Event).where(Event.project_id == project_id))
    await db.execute(delete(Task).where(Task.project_id == project_id))
    await db.execute(delete(ProjectMember).where(ProjectMember.project_id == project_id))
    await db.execute(delete(Project).where(Project.project_id == project_id))
    return member_ids


# ── Members ─────────────────────────────────────────────

async def get_member_by_id(db: AsyncSession, member_id: int) -> ProjectMember:
    result = await db.execute(
        select(ProjectMember)
        .options(joinedload(ProjectMember.user))
        .filter(ProjectMember.member_id == member_id)
    )
    return result.scalars().first()


async def list_members(db: AsyncSession, project_id: int, current_user_id: int) -> list[ProjectMember]:
    await get_project_or_404(db, project_id)
    await require_member(db, project_id, current_user_id)
    result = await db.execute(
        select(ProjectMember)
        .options(joinedload(ProjectMember.user))
        .filter(ProjectMember.project_id == project_id)
        .order_by(ProjectMember.member_id)
    )
    return result.scalars().all()


async def add_member(db: AsyncSession, project_id: int, data: MemberAdd, current_user_id: int) -> ProjectMember:
    await get_project_or_404(db, project_id)
    await require_member(db, project_id, current_user_id, roles=MANAGING_ROLES,
                         detail="You do not have permission to add members to this project")
    await get_user_or_404(db, data.user_id)

    if await get_membership(db, project_id, data.user_id):
        raise HTTPException(status_code=400, detail="User is already a member of this project")

    member = ProjectMember(project_id=project_id, user_id=data.user_id, role=data.role)
    db.add(member)
    await db.flush()
    return member


async def remove_member(db: AsyncSession, project_id: int, user_id: int, current_user_id: int) -> None:
    await get_project_or_404(db, project_id)
    await require_member(db, project_id, current_user_id, roles=MANAGING_ROLES,
                         detail="You do not have permission to remove members from this project")

    member = await get_membership(db, project_id, user_id)
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    if member.role == "owner":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot remove the project owner")
    await db.delete(member)
    await db.flush()


async def project_deadlines(db: AsyncSession, user_id: int) -> list[Project]:
    result = await db.execute(
        select(Project)
        .join(ProjectMember, ProjectMember.project_id == Project.project_id)
        .filter(ProjectMember.user_id == user_id, Project.deadline.isnot(None))
        .order_by(Project.deadline)
    )
    return result.scalars().all()
