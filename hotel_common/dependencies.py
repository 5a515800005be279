"""Reusable FastAPI dependencies for auth, database and store access."""
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .auth import decode_token
from .database import get_db
from .models import Profile, RoleEnum
from .receipts import DEFAULT_HOOKS
from .store import TableStore

oauth_scheme = OAuth2PasswordBearer(tokenUrl="/users/login")
optional_oauth_scheme = OAuth2PasswordBearer(tokenUrl="/users/login", auto_error=False)


def _profile_from_token(token: str, db: Session) -> Profile:
    payload = decode_token(token)
    email: str | None = payload.get("sub")
    if email is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing subject in token")
    profile = db.query(Profile).filter(Profile.email == email).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return profile


def get_current_user(token: str = Depends(oauth_scheme), db: Session = Depends(get_db)) -> Profile:
    return _profile_from_token(token, db)


def get_optional_user(
    token: Optional[str] = Depends(optional_oauth_scheme), db: Session = Depends(get_db)
) -> Optional[Profile]:
    if not token:
        return None
    return _profile_from_token(token, db)


def allow_roles(*roles: RoleEnum) -> Callable[[Profile], Profile]:
    def dependency(current_user: Profile = Depends(get_current_user)) -> Profile:
        if not current_user.has_role(*roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return dependency


def get_store(db: Session = Depends(get_db)) -> TableStore:
    return TableStore(db, hooks=DEFAULT_HOOKS)
