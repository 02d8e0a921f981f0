from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.error_codes import ErrorCode
from app.core.config import MAGIC_LOGIN_TTL_HOURS
from app.core.exceptions import AppException
from app.core.security import create_access_token
from app.models.users.user_models import MagicLoginToken, User
from app.schemas.auth.auth_schemas import MagicLoginValidateOut
from app.services.quotes.token_resolver import generate_magic_token, hash_token
from app.utils.datetime_utils import ensure_utc, utcnow
from app.utils.logger import get_logger

logger = get_logger("auth.magic")


@dataclass
class IssuedMagicLogin:
    token: str
    hashed: str
    expires_at: datetime


async def create_magic_login_token(
    db: AsyncSession,
    *,
    user: User,
    target_type: str,
    target_id: int | None = None,
    expires_at: datetime | None = None,
    meta: dict | None = None,
) -> IssuedMagicLogin:
    token, hashed = generate_magic_token()
    now = utcnow()
    if expires_at is None or ensure_utc(expires_at) <= now:
        expires_at = now + timedelta(hours=MAGIC_LOGIN_TTL_HOURS)

    db.add(
        MagicLoginToken(
            token_hash=hashed,
            user_id=user.id,
            email=user.email.lower(),
            target_type=target_type,
            target_id=target_id,
            meta=meta or {},
            expires_at=expires_at,
        )
    )
    await db.flush()

    return IssuedMagicLogin(token=token, hashed=hashed, expires_at=expires_at)


async def validate_magic_login(
    db: AsyncSession,
    token: str | None,
) -> MagicLoginValidateOut:
    """Spend a magic login token and open a session for its user."""
    if not token:
        raise AppException(400, "Missing token", ErrorCode.TOKEN_MISSING, field="token")

    record = await db.scalar(
        select(MagicLoginToken).where(MagicLoginToken.token_hash == hash_token(token))
    )
    if not record:
        logger.warning("Unknown magic login token")
        raise AppException(400, "Invalid or expired token", ErrorCode.TOKEN_INVALID)

    if record.used_at is not None:
        raise AppException(400, "Token already used", ErrorCode.TOKEN_USED)

    if ensure_utc(record.expires_at) <= utcnow():
        raise AppException(400, "Token expired", ErrorCode.TOKEN_EXPIRED)

    user = await db.get(User, record.user_id)
    if not user or not user.is_active:
        raise AppException(400, "Invalid or expired token", ErrorCode.TOKEN_INVALID)

    meta = record.meta or {}
    quote_id = meta.get("quoteId")

    record.used_at = utcnow()
    access_token = create_access_token(
        subject=user.email,
        token_version=user.token_version,
        quote_id=quote_id if isinstance(quote_id, int) else None,
    )

    result = MagicLoginValidateOut(
        email=record.email or user.email,
        user_id=user.id,
        target_type=record.target_type,
        target_id=record.target_id,
        meta=meta,
        has_password=bool(user.password_hash),
        access_token=access_token,
    )

    await db.commit()

    logger.info("Magic login used", extra={"user_id": user.id, "target_type": record.target_type})
    return result
