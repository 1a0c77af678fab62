from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from jose import JWTError
from synergysphere.database import get_db as db_session
from synergysphere.schemas.user import TokenData
from synergysphere.services import users as user_service
from synergysphere.services.notifier import Notifier
from synergysphere.services.registry import ConnectionRegistry
from synergysphere.utils.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

def get_db(db: AsyncSession = Depends(db_session)):
    return db

async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(oauth2_scheme)
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        token_data = TokenData(username=payload.get("sub"), user_id=payload.get("uid"))
    except JWTError:
        raise credentials_exception
    if token_data.username is None:
        raise credentials_exception

    user = await user_service.get_by_username(db, token_data.username)
    if user is None:
        raise credentials_exception
    return user


# The registry and notifier are built in the lifespan and live on app.state

def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier
