"""Identity tokens and role-gated access."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header, Request
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from scholarstream.config import Settings
from scholarstream.database import get_db
from scholarstream.errors import Forbidden, Unauthorized
from scholarstream.models import Role, User

ALGORITHM = "HS256"

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def issue_token(claims: dict, settings: Settings) -> str:
    if not claims.get("email"):
        raise ValueError("token claims require an email")
    payload = dict(claims)
    payload["email"] = payload["email"].lower()
    payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expires_minutes)
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(token: str, settings: Settings) -> dict:
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except JWTError:
        raise Unauthorized("Invalid token")
    if not claims.get("email"):
        raise Unauthorized("Invalid token")
    return claims


def verify_token(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> dict:
    if not authorization:
        raise Unauthorized("Missing token")
    try:
        scheme, token = authorization.split()
    except ValueError:
        raise Unauthorized("Invalid token")
    if scheme.lower() != "bearer":
        raise Unauthorized("Invalid token")
    return decode_token(token, settings)


def role_of(user: Optional[User]) -> Role:
    if user is None:
        return Role.STUDENT
    try:
        return Role(user.role)
    except ValueError:
        return Role.STUDENT


def find_user(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter_by(email=email.lower()).first()


def require_role(minimum: Role):
    """Build a dependency admitting callers whose stored role ranks at least ``minimum``."""

    def guard(claims: dict = Depends(verify_token), db: Session = Depends(get_db)) -> User:
        user = find_user(db, claims["email"])
        if user is None or role_of(user).rank < minimum.rank:
            logger.warning("Denied %s access to %s", minimum.value, claims["email"])
            raise Forbidden()
        return user

    return guard


def current_rank(db: Session, email: str) -> int:
    return role_of(find_user(db, email)).rank


def can_change_role(requester: User, target: User, new_role: Role, settings: Settings) -> bool:
    """
    Only a strictly higher-privileged Admin+ may alter another user's role.

    Nobody may alter their own role or a bootstrap identity's role, and
    nobody may grant a role at or above their own.
    """
    requester_role = role_of(requester)
    if requester_role.rank < Role.ADMIN.rank:
        return False
    if requester.id == target.id or requester.email == target.email:
        return False
    if target.email.lower() in settings.bootstrap_emails:
        return False
    return requester_role.rank > role_of(target).rank and requester_role.rank > new_role.rank
