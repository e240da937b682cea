"""
Session-cookie auth OR dev-mode bypass. Controlled by FF_USE_SESSION_AUTH flag.

A login creates a row in the sessions table and hands the client a signed
token (HS256 JWT: sub = user id, sid = session id). A token only counts
while its session row exists and has not expired; logout deletes the row.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import jwt, JWTError
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .flags import get_flags
from ..models.user import User, UserSession

logger = logging.getLogger(__name__)


@dataclass
class AuthenticatedUser:
    user_id: str
    username: str = ""
    is_admin: bool = False
    session_id: str = ""


# Dev-mode user, returned when FF_USE_SESSION_AUTH=false
DEV_USER = AuthenticatedUser(
    user_id="dev-user",
    username="dev",
    is_admin=True,
)


# ── Passwords ────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        logger.warning("Stored password hash is not a bcrypt hash")
        return False


# ── Tokens ───────────────────────────────────────────────────────────

def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def encode_session_token(user_id: str, session_id: str, expires_at: datetime) -> str:
    settings = get_settings()
    claims = {"sub": user_id, "sid": session_id, "exp": expires_at}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.session_algorithm)


def decode_session_token(token: str) -> tuple[str, str]:
    """Returns (user_id, session_id). Raises PermissionError if invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.session_algorithm])
    except JWTError as e:
        raise PermissionError(f"Invalid session token: {e}")

    user_id, session_id = payload.get("sub"), payload.get("sid")
    if not user_id or not session_id:
        raise PermissionError("Session token missing claims")
    return user_id, session_id


# ── Sessions ─────────────────────────────────────────────────────────

async def authenticate(db: AsyncSession, username: str, password: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for username=%s", username)
        return None
    return user


async def create_session(db: AsyncSession, user: User) -> tuple[str, datetime]:
    """Start a session. Returns (token, expires_at)."""
    expires_at = datetime.now(timezone.utc) + timedelta(days=get_settings().session_ttl_days)
    session = UserSession(user_id=user.id, expires_at=expires_at)
    db.add(session)
    await db.flush()
    logger.info("Session started for user=%s", user.id)
    return encode_session_token(user.id, session.id, expires_at), expires_at


async def end_session(db: AsyncSession, token: str) -> None:
    try:
        _, session_id = decode_session_token(token)
    except PermissionError:
        return
    await db.execute(delete(UserSession).where(UserSession.id == session_id))


async def get_current_user(db: AsyncSession, token: str = "") -> AuthenticatedUser:
    """
    Resolve the current user from a session token.
    If FF_USE_SESSION_AUTH is false, returns a dev user.
    """
    if not get_flags().use_session_auth:
        return DEV_USER

    if not token:
        raise PermissionError("Not authenticated")

    user_id, session_id = decode_session_token(token)

    session = await db.get(UserSession, session_id)
    if session is None or session.user_id != user_id:
        raise PermissionError("Session not found")
    if _as_utc(session.expires_at) <= datetime.now(timezone.utc):
        raise PermissionError("Session expired")

    user = await db.get(User, user_id)
    if user is None:
        raise PermissionError("User no longer exists")

    return AuthenticatedUser(
        user_id=user.id,
        username=user.username,
        is_admin=bool(user.is_admin),
        session_id=session.id,
    )


# ── Bootstrap ────────────────────────────────────────────────────────

async def create_user(
    db: AsyncSession, username: str, password: str, is_admin: bool = False,
) -> User:
    user = User(username=username, password_hash=hash_password(password), is_admin=is_admin)
    db.add(user)
    await db.flush()
    logger.info("Created %s user %s", "admin" if is_admin else "regular", username)
    return user


async def bootstrap_admin(db: AsyncSession) -> Optional[User]:
    """Create the configured admin account if there is no admin yet."""
    settings = get_settings()
    if not settings.admin_password:
        return None

    result = await db.execute(select(User).where(User.is_admin.is_(True)).limit(1))
    if result.scalar_one_or_none() is not None:
        return None

    result = await db.execute(select(User).where(User.username == settings.admin_username))
    existing = result.scalar_one_or_none()
    if existing is not None:
        existing.is_admin = True
        logger.info("Promoted existing user %s to admin", existing.username)
        return existing

    return await create_user(db, settings.admin_username, settings.admin_password, is_admin=True)
