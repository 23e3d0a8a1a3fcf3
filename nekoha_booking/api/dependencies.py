"""API Dependencies - Staff authentication"""
from functools import lru_cache
from typing import Dict, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from nekoha_booking.domain.auth import User, UserInDB
from nekoha_booking.infrastructure.config import get_settings
from nekoha_booking.infrastructure.security import decode_access_token, get_password_hash
from nekoha_booking.api.schemas import TokenData

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

# Fixed ID for the configured staff account
ADMIN_USER_ID = UUID("5c0f4a1e-8b7d-4c62-9d3e-2a1b6f0c7e11")


@lru_cache(maxsize=1)
def staff_users() -> Dict[str, UserInDB]:
    """Staff accounts, hashed once on first use"""
    settings = get_settings()
    admin = UserInDB(
        user_id=ADMIN_USER_ID,
        username=settings.admin_username,
        full_name="Hotel Staff",
        hashed_password=get_password_hash(settings.admin_password),
    )
    return {admin.username: admin}


def get_user(username: str) -> Optional[UserInDB]:
    return staff_users().get(username)


async def get_current_user(token: str = Depends(oauth2_scheme)) -> UserInDB:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        username: str = payload.get("sub")
        if username is None:
            raise credentials_exception
        token_data = TokenData(username=username)
    except JWTError:
        raise credentials_exception

    user = get_user(token_data.username)
    if user is None:
        raise credentials_exception
    return user


async def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user
