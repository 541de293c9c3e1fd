import logging
from typing import List, Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from scholarstream.auth import (
    can_change_role, find_user, get_settings, issue_token, require_role, role_of, verify_token,
)
from scholarstream.config import Settings
from scholarstream.database import get_by_id, get_db
from scholarstream.errors import Forbidden, NotFound
from scholarstream.models import Role, User
from scholarstream.schemas import (
    MessageOut, RoleChangeOut, RoleOut, RoleUpdate, TokenRequest, UserCreate, UserOut,
)

router = APIRouter()

logger = logging.getLogger(__name__)


def initial_role(email: str, settings: Settings) -> Role:
    if settings.super_admin_email and email == settings.super_admin_email.lower():
        return Role.SUPER_ADMIN
    if settings.admin_email and email == settings.admin_email.lower():
        return Role.ADMIN
    return Role.STUDENT


def set_role(db: Session, target_id: str, new_role: Role, requester_email: str, settings: Settings) -> User:
    requester = find_user(db, requester_email)
    target = get_by_id(db, User, target_id)
    if target is None:
        raise NotFound("User not found")
    if requester is None or not can_change_role(requester, target, new_role, settings):
        logger.warning("Refused role change of %s to %s by %s", target.email, new_role.value, requester_email)
        raise Forbidden("You are not allowed to change this user's role")

    target.role = new_role.value
    db.commit()
    db.refresh(target)
    logger.info("%s changed role of %s to %s", requester_email, target.email, new_role.value)
    return target


@router.post("/jwt")
def create_token(request: TokenRequest, settings: Settings = Depends(get_settings)):
    token = issue_token(request.model_dump(exclude_none=True), settings)
    return {"token": token}


@router.post("/users", response_model=Union[UserOut, MessageOut])
def create_user(
    request: UserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    email = request.email.lower()
    if find_user(db, email):
        return MessageOut(message="User already exists")

    user = User(
        email=email,
        name=request.name,
        photo=request.photo,
        role=initial_role(email, settings).value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s with role %s", user.email, user.role)
    return UserOut.model_validate(user)


@router.get("/users", response_model=List[UserOut])
def list_users(
    _admin: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    return db.query(User).all()


@router.get("/users/{email}/role", response_model=RoleOut)
def get_user_role(email: str, claims=Depends(verify_token), db: Session = Depends(get_db)):
    return RoleOut(role=role_of(find_user(db, email)))


@router.patch("/users/role/{user_id}", response_model=RoleChangeOut)
def change_role(
    user_id: str,
    request: RoleUpdate,
    admin: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = set_role(db, user_id, request.role, admin.email, settings)
    return RoleChangeOut(message=f"Role updated to {user.role}", result=UserOut.model_validate(user))


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    admin: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = get_by_id(db, User, user_id)
    if user is None:
        raise NotFound("User not found")
    if user.email in settings.bootstrap_emails or user.id == admin.id:
        raise Forbidden("This user cannot be deleted")
    if role_of(admin).rank <= role_of(user).rank:
        raise Forbidden("This user cannot be deleted")

    db.delete(user)
    db.commit()
    logger.info("%s deleted user %s", admin.email, user.email)
    return {"deletedCount": 1}
