from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from synergysphere.config import settings
from synergysphere.dependencies import get_db
from synergysphere.models.user import User as UserModel
from synergysphere.schemas.user import Token
from synergysphere.services import users as user_service
from synergysphere.utils.security import create_access_token

router = APIRouter(tags=["auth"])


def issue_token(user: UserModel) -> dict:
    # "uid" lets the socket handshake resolve the user without a query
    token = create_access_token(
        data={"sub": user.username, "uid": user.user_id},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return {"access_token": token, "token_type": "bearer"}


@router.post("/token", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.authenticate(db, form_data.username, form_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return issue_token(user)
