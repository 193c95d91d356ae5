from __future__ import annotations

from fastapi import APIRouter, Depends, Header
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from careportal.core.config import settings
from careportal.core.db import get_db
from careportal.core.errors import Conflict, NotFound, Unauthorized
from careportal.models.entities import RoleEnum, User
from careportal.schemas.users import UserCreate, UserResponse

router = APIRouter(prefix="/v1/admin/users", tags=["admin"])


def _require_internal_token(x_internal_admin_token: str | None) -> None:
    if not x_internal_admin_token or x_internal_admin_token != settings.internal_admin_token:
        raise Unauthorized("invalid internal admin token")


def _to_user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, username=user.username, role=user.role.value, created_at=user.created_at)


@router.get("")
def list_users_admin(
    db: Session = Depends(get_db),
    x_internal_admin_token: str | None = Header(default=None, alias="X-Internal-Admin-Token"),
):
    _require_internal_token(x_internal_admin_token)
    users = db.execute(select(User).order_by(User.id.asc())).scalars().all()
    return {"items": [_to_user_response(user) for user in users]}


@router.post("", response_model=UserResponse, status_code=201)
def provision_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    x_internal_admin_token: str | None = Header(default=None, alias="X-Internal-Admin-Token"),
):
    """Mirror an identity from the identity store so its id resolves locally."""
    _require_internal_token(x_internal_admin_token)

    user = User(username=payload.username.strip(), role=RoleEnum(payload.role))
    if payload.id is not None:
        user.id = payload.id
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("user id or username already exists") from None

    db.refresh(user)
    return _to_user_response(user)


@router.get("/{user_id}", response_model=UserResponse)
def get_user_admin(
    user_id: int,
    db: Session = Depends(get_db),
    x_internal_admin_token: str | None = Header(default=None, alias="X-Internal-Admin-Token"),
):
    _require_internal_token(x_internal_admin_token)
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("user not found")
    return _to_user_response(user)
