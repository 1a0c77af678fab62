from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from synergysphere.dependencies import get_db, get_current_user, get_notifier
from synergysphere.models.user import User as UserModel
from synergysphere.schemas.project import (
    Project as ProjectSchema,
    ProjectCreate,
    ProjectDeadline,
    ProjectMember as ProjectMemberSchema,
    ProjectUpdate,
    MemberAdd,
)
from synergysphere.schemas.task import Task as TaskSchema
from synergysphere.services import projects as project_service
from synergysphere.services import tasks as task_service
from synergysphere.services.notifier import Notifier
from synergysphere.utils.serialization import dump

router = APIRouter(prefix="/projects", tags=["projects"])

@router.get("/", response_model=list[ProjectSchema])
async def list_my_projects(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await project_service.list_for_user(db, current_user.user_id)

@router.get("/deadlines", response_model=list[ProjectDeadline])
async def list_project_deadlines(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await project_service.project_deadlines(db, current_user.user_id)

@router.post("/", response_model=ProjectSchema, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier)
):
    project = await project_service.create_project(db, project_data, current_user.user_id)
    await db.commit()
    project = await project_service.get_project_by_id(db, project.project_id)

    await notifier.project_created(dump(ProjectSchema, project), current_user.user_id)
    return project

@router.get("/{project_id}", response_model=ProjectSchema)
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await project_service.get_for_member(db, project_id, current_user.user_id)

@router.patch("/{project_id}", response_model=ProjectSchema)
async def update_project(
    project_id: int,
    update_data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier)
):
    project, new_manager_id = await project_service.update_project(
        db, project_id, update_data, current_user.user_id
    )
    await db.commit()
    project = await project_service.get_project_by_id(db, project_id)

    payload = dump(ProjectSchema, project)
    await notifier.project_updated(payload)
    if new_manager_id is not None:
        await notifier.project_manager_assigned(new_manager_id, payload)
    return project

@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier)
):
    member_ids = await project_service.delete_project(db, project_id, current_user.user_id)
    await db.commit()
    await notifier.project_deleted(project_id, member_ids)
    return None

@router.get("/{project_id}/tasks", response_model=list[TaskSchema])
async def list_project_tasks(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await task_service.list_for_project(db, project_id, current_user.user_id)

# ── Members ─────────────────────────────────────────────

@router.get("/{project_id}/members", response_model=list[ProjectMemberSchema])
async def list_members(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await project_service.list_members(db, project_id, current_user.user_id)

@router.post("/{project_id}/members", response_model=ProjectMemberSchema, status_code=status.HTTP_201_CREATED)
async def add_member(
    project_id: int,
    member_data: MemberAdd,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier)
):
    member = await project_service.add_member(db, project_id, member_data, current_user.user_id)
    await db.commit()
    member = await project_service.get_member_by_id(db, member.member_id)

    await notifier.member_added(project_id, dump(ProjectMemberSchema, member))
    return member

@router.delete("/{project_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    project_id: int,
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier)
):
    await project_service.remove_member(db, project_id, user_id, current_user.user_id)
    await db.commit()
    await notifier.member_removed(project_id, user_id)
    return None
