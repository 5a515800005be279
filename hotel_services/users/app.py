from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hotel_common import auth
from hotel_common.config import get_settings
from hotel_common.database import Base, engine, get_db
from hotel_common.dependencies import allow_roles, get_current_user, get_optional_user
from hotel_common.exceptions import register_exception_handlers
from hotel_common.logging_middleware import add_audit_middleware
from hotel_common.models import Profile, RoleEnum, UserRole
from hotel_common.navigation import navigation_for
from hotel_common.rate_limit import apply_rate_limiter, limiter
from hotel_common.schemas import NavigationItem, ProfileCreate, ProfileRead, ProfileUpdate, RoleGrant, Token

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Users Service", version="0.1.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    register_exception_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "users")
    return fastapi_app


app = create_app()


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "users"}


@app.post("/users/register", response_model=ProfileRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register_user(request: Request, profile_in: ProfileCreate, db: Session = Depends(get_db)) -> Profile:
    email = profile_in.email.lower()
    if db.query(Profile).filter(Profile.email == email).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This email is already registered")

    profile = Profile(
        full_name=profile_in.full_name,
        email=email,
        dni=profile_in.dni,
        phone=profile_in.phone,
        address=profile_in.address,
        hashed_password=auth.get_password_hash(profile_in.password),
    )
    profile.roles.append(UserRole(role=RoleEnum.CLIENT))
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@app.post("/users/login", response_model=Token)
@limiter.limit("10/minute")
def login(request: Request, form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)) -> Token:
    profile = auth.authenticate_user(db, form_data.username, form_data.password)
    if not profile:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")

    return Token(access_token=auth.issue_access_token(profile))


@app.get("/users/me", response_model=ProfileRead)
@limiter.limit("30/minute")
def read_profile(request: Request, current_user: Profile = Depends(get_current_user)) -> Profile:
    return current_user


@app.put("/users/me", response_model=ProfileRead)
@limiter.limit("10/minute")
def update_profile(
    request: Request,
    profile_update: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Profile:
    for key, value in profile_update.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(current_user, key, value)
    db.commit()
    db.refresh(current_user)
    return current_user


@app.get("/users/me/navigation", response_model=List[NavigationItem])
def navigation(current_user: Optional[Profile] = Depends(get_optional_user)) -> list[dict[str, str]]:
    return navigation_for(current_user.role_values if current_user else None)


@app.get("/users", response_model=List[ProfileRead])
@limiter.limit("20/minute")
def list_users(
    request: Request,
    _: Profile = Depends(allow_roles(RoleEnum.ADMIN)),
    db: Session = Depends(get_db),
) -> List[Profile]:
    return db.query(Profile).order_by(Profile.created_at.desc()).all()


@app.post("/users/{user_id}/roles", response_model=ProfileRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def grant_role(
    request: Request,
    user_id: int,
    grant: RoleGrant,
    _: Profile = Depends(allow_roles(RoleEnum.ADMIN)),
    db: Session = Depends(get_db),
) -> Profile:
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if grant.role in profile.role_values:
        return profile

    db.add(UserRole(user_id=profile.id, role=grant.role))
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Role already assigned") from exc
    db.refresh(profile)
    return profile
