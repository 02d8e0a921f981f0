from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums.user_role import UserRole
from app.models.quotes.quote_models import Quote
from app.models.users.user_models import User
from app.services.referrals.referral_service import ensure_referral_signup
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def ensure_user(
    db: AsyncSession,
    quote: Quote,
    referral_code: str | None = None,
) -> User:
    """Find or create the account of the person who requested ``quote``.

    New accounts are CLIENTs. A known ``referral_code`` links the new account
    to its referrer and records the referral signup. The custom request is
    re-pointed at the resolved user when needed.
    """
    request = quote.custom_request
    email = request.email.strip().lower()

    user = await db.scalar(select(User).where(func.lower(User.email) == email))

    if not user:
        referrer = None
        if referral_code:
            referrer = await db.scalar(
                select(User).where(User.referral_code == referral_code)
            )

        user = User(
            email=email,
            name=request.full_name,
            role=UserRole.CLIENT,
            referred_by_id=referrer.id if referrer else None,
        )
        db.add(user)
        await db.flush()

        logger.info("Client account created", extra={"user_id": user.id, "referred": bool(referrer)})

        if referrer:
            await ensure_referral_signup(
                db,
                referrer_id=referrer.id,
                referred_user_id=user.id,
            )

    if request.user_id != user.id:
        request.user_id = user.id

    return user
