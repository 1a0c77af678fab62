from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from synergysphere.models.user import User
from synergysphere.schemas.user import UserCreate
from synergysphere.utils.security import get_password_hash, verify_password


def _active():
    return User.is_deleted == False


async def get_user_or_404(db: AsyncSession, user_id: int, detail: str = "User not found") -> User:
    result = await db.execute(select(User).filter(User.user_id == user_id, _active()))
    user = result.scalars().first()
    if not user:
        raise HTTPException(status_code=404, detail=detail)
    return user


async def get_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).filter(User.username == username, _active()))
    return result.scalars().first()


async def authenticate(db: AsyncSession, username: str, password: str) -> User | None:
    """Returns the user when the credentials match, otherwise None."""
    user = await get_by_username(db, username)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


async def register(db: AsyncSession, data: UserCreate) -> User:
    user = User(**data.model_dump(exclude={"password"}), hashed_password=get_password_hash(data.password))
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Username or Email already registered")
    await db.refresh(user)
    return user


async def list_active(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).filter(_active()).order_by(User.user_id))
    return result.scalars().all()
