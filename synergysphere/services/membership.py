from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.future import select

from synergysphere.models.project import Project, ProjectMember

MANAGING_ROLES = ("owner", "manager")


class MembershipResolver:
    """Answers "who belongs to project X" for the notifier, using its own session."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def member_ids(self, project_id: int) -> set[int]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(ProjectMember.user_id).filter(ProjectMember.project_id == project_id)
            )
            return set(result.scalars().all())


# ── Request-scoped helpers used by the mutation services ──

async def get_membership(db: AsyncSession, project_id: int, user_id: int) -> ProjectMember | None:
    result = await db.execute(
        select(ProjectMember).filter(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id
        )
    )
    return result.scalars().first()


async def get_project_or_404(db: AsyncSession, project_id: int) -> Project:
    result = await db.execute(select(Project).filter(Project.project_id == project_id))
    project = result.scalars().first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


async def require_member(db: AsyncSession, project_id: int, user_id: int,
                         roles: tuple[str, ...] | None = None,
                         detail: str = "You do not have access to this project") -> ProjectMember:
    member = await get_membership(db, project_id, user_id)
    if not member or (roles and member.role not in roles):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return member


async def ensure_member(db: AsyncSession, project_id: int, user_id: int, role: str = "member") -> bool:
    """Adds the user to the project when missing. Returns True if a row was inserted."""
    if await get_membership(db, project_id, user_id):
        return False
    db.add(ProjectMember(project_id=project_id, user_id=user_id, role=role))
    await db.flush()
    print(f"[MEMBERSHIP] Added user {user_id} as {role} of project {project_id}")
    return True
