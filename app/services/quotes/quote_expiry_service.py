from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.audit_actions import AuditAction, AuditTarget
from app.models.enums.quote_status import QuoteStatus
from app.models.quotes.quote_models import Quote
from app.utils.audit_helpers import emit_audit
from app.utils.datetime_utils import isoformat, utcnow
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _revoke_expired_tokens_stmt(now):
    return (
        update(Quote)
        .where(
            Quote.status.in_([QuoteStatus.DRAFT, QuoteStatus.SENT]),
            Quote.expires_at <= now,
            Quote.magic_token.isnot(None),
        )
        .values(magic_token=None)
        .returning(Quote.id)
        .execution_options(synchronize_session=False)
    )


async def auto_expire_quote_tokens(db: AsyncSession) -> int:
    """Revoke the magic tokens of open quotes that are past their expiry."""
    now = utcnow()

    result = await db.execute(_revoke_expired_tokens_stmt(now))
    expired_ids = result.scalars().all()

    if not expired_ids:
        return 0

    for quote_id in expired_ids:
        await emit_audit(
            db,
            actor_id=None,  # system action
            action=AuditAction.QUOTE_TOKEN_EXPIRED,
            target_type=AuditTarget.QUOTE,
            target_id=quote_id,
            data={"expiredAt": isoformat(now)},
        )

    await db.commit()

    logger.info("Expired quote tokens revoked", extra={"count": len(expired_ids)})
    return len(expired_ids)
