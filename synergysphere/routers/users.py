from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from synergysphere.dependencies import get_db, get_current_user
from synergysphere.models.user import User as UserModel
from synergysphere.schemas.user import UserCreate, UserResponse
from synergysphere.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])

@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(user: UserCreate, db: AsyncSession = Depends(get_db)):
    return await user_service.register(db, user)

@router.get("/me", response_model=UserResponse)
async def get_me(current_user: UserModel = Depends(get_current_user)):
    return current_user

# Directory lookups power the member and assignee pickers
@router.get("/", response_model=list[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await user_service.list_active(db)

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await user_service.get_user_or_404(db, user_id)
