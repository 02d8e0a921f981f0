from dataclasses import dataclass

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.constants.error_codes import ErrorCode
from app.core.db import get_db
from app.core.exceptions import AppException
from app.core.security import decode_access_token
from app.models.enums.user_role import STAFF_ROLES
from app.models.users.user_models import User
from app.utils.logger import get_logger

logger = get_logger("auth.guard")


@dataclass
class SessionContext:
    user: User
    quote_id: int | None = None

    @property
    def is_staff(self) -> bool:
        return self.user.role in STAFF_ROLES


def _bearer_token(authorization: str) -> str:
    if not authorization.startswith("Bearer "):
        logger.warning("Missing bearer token")
        raise AppException(401, "Invalid authorization header", ErrorCode.UNAUTHORIZED)
    return authorization.split("Bearer ", 1)[1].strip()


async def _load_session(db: AsyncSession, payload: dict) -> SessionContext:
    email = (payload.get("sub") or "").lower()
    token_version = payload.get("token_version")

    user = await db.scalar(
        select(User).where(func.lower(User.email) == email)
    )

    if not user:
        logger.warning("Token user not found", extra={"email": email})
        raise AppException(401, "User not found", ErrorCode.UNAUTHORIZED)

    if not user.is_active:
        logger.warning("Inactive user access blocked", extra={"user_id": user.id})
        raise AppException(403, "User account is inactive", ErrorCode.USER_INACTIVE)

    if user.token_version != token_version:
        logger.warning("Token version mismatch", extra={"user_id": user.id})
        raise AppException(401, "Session expired", ErrorCode.UNAUTHORIZED)

    quote_id = payload.get("quote_id")
    return SessionContext(user=user, quote_id=quote_id if isinstance(quote_id, int) else None)


async def get_current_user(
    request: Request,
    authorization: str = Header(...),
    db: AsyncSession = Depends(get_db),
) -> User:
    payload = decode_access_token(_bearer_token(authorization))
    session = await _load_session(db, payload)
    # plain id only; the ORM instance may be detached by the time the access log runs
    request.state.user_id = session.user.id
    return session.user


async def get_optional_session(
    request: Request,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> SessionContext | None:
    """Session of the caller, or None for anonymous (token-only) requests.

    A header that is malformed or carries an undecodable/expired JWT is
    treated as anonymous so a valid quote token can still authorize.
    """
    if not authorization:
        return None

    try:
        payload = decode_access_token(_bearer_token(authorization))
    except AppException:
        logger.info("Unusable bearer token ignored; continuing anonymously")
        return None

    session = await _load_session(db, payload)
    request.state.user_id = session.user.id
    return session
