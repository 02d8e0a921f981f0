from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.core.security import verify_password, create_access_token
from app.models.users.user_models import User
from app.schemas.auth.auth_schemas import TokenResponse
from app.utils.logger import get_logger

logger = get_logger("auth.service")


# =====================================================
# LOGIN
# =====================================================
async def login_user(db: AsyncSession, email: str, password: str) -> TokenResponse:
    logger.info("Authenticating user", extra={"email": email})

    user = await db.scalar(
        select(User).where(func.lower(User.email) == email.lower())
    )

    if not user or not user.password_hash or not verify_password(password, user.password_hash):
        logger.warning("Invalid credentials", extra={"email": email})
        raise AppException(401, "Invalid credentials", ErrorCode.INVALID_CREDENTIALS)

    if not user.is_active:
        logger.warning("Inactive user login blocked", extra={"email": email})
        raise AppException(403, "User account is inactive", ErrorCode.USER_INACTIVE)

    access_token = create_access_token(
        subject=user.email,
        token_version=user.token_version,
    )

    logger.info("Login successful", extra={"user_id": user.id})

    return TokenResponse(access_token=access_token, role=user.role.value)
