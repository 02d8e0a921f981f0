from decimal import Decimal
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import DEFAULT_REFERRAL_RATE
from app.models.enums.referral_status import ReferralStatus
from app.models.referrals.referral_models import ReferralTracking
from app.models.users.user_models import User
from app.utils.decimal_utils import compute_commission

logger = logging.getLogger(__name__)


def _rate_for(referrer: User | None) -> Decimal:
    if referrer is None or referrer.referral_commission_rate is None:
        return DEFAULT_REFERRAL_RATE
    return Decimal(referrer.referral_commission_rate)


async def ensure_referral_signup(
    db: AsyncSession,
    *,
    referrer_id: int,
    referred_user_id: int,
) -> ReferralTracking:
    existing = await db.scalar(
        select(ReferralTracking).where(
            ReferralTracking.referrer_id == referrer_id,
            ReferralTracking.referred_user_id == referred_user_id,
            ReferralTracking.order_id.is_(None),
        )
    )
    if existing:
        return existing

    referrer = await db.get(User, referrer_id)

    tracking = ReferralTracking(
        referrer_id=referrer_id,
        referred_user_id=referred_user_id,
        status=ReferralStatus.PENDING,
        commission_amount=Decimal("0.00"),
        commission_rate=_rate_for(referrer),
    )
    db.add(tracking)
    await db.flush()

    logger.info(
        "Referral signup recorded",
        extra={"referrer_id": referrer_id, "referred_user_id": referred_user_id},
    )
    return tracking


async def create_referral_commission_for_order(
    db: AsyncSession,
    *,
    order_id: int,
    user_id: int,
    order_total: Decimal,
) -> ReferralTracking | None:
    referred_by_id = await db.scalar(
        select(User.referred_by_id).where(User.id == user_id)
    )
    if not referred_by_id or referred_by_id == user_id:
        return None

    existing = await db.scalar(
        select(ReferralTracking).where(ReferralTracking.order_id == order_id)
    )
    if existing:
        return existing

    referrer = await db.get(User, referred_by_id)
    if not referrer:
        return None

    rate = _rate_for(referrer)
    tracking = ReferralTracking(
        referrer_id=referrer.id,
        referred_user_id=user_id,
        order_id=order_id,
        status=ReferralStatus.EARNED,
        commission_amount=compute_commission(order_total, rate),
        commission_rate=rate,
    )
    db.add(tracking)
    await db.flush()

    logger.info(
        "Referral commission earned",
        extra={"order_id": order_id, "referrer_id": referrer.id, "amount": str(tracking.commission_amount)},
    )
    return tracking
