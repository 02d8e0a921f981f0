"""Resolve emailed quote tokens back to their Quote.

Only sha256 digests of tokens are ever persisted. Tokens are looked up on
``quotes.magic_token`` first; tokens issued before that column existed are
found through the ``tokenHash`` stored on ``QUOTE_SENT`` audit rows.
"""

import hashlib
import secrets
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.constants.audit_actions import AuditAction, AuditTarget
from app.models.enums.quote_status import QuoteStatus
from app.models.quotes.quote_models import Quote
from app.models.support.audit_models import AuditLog
from app.utils.datetime_utils import utcnow
from app.utils.logger import get_logger

logger = get_logger(__name__)

USED_TOKEN_PREFIX = "used:"


@dataclass
class ResolvedQuote:
    quote: Quote
    hashed: str


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_magic_token() -> tuple[str, str]:
    token = secrets.token_hex(32)
    return token, hash_token(token)


def spent_token(hashed: str) -> str:
    return f"{USED_TOKEN_PREFIX}{hashed}"


def _quote_sent_ids(hashed: str):
    return (
        select(AuditLog.target_id)
        .where(
            AuditLog.target_type == AuditTarget.QUOTE.value,
            AuditLog.action == AuditAction.QUOTE_SENT.value,
            AuditLog.data["tokenHash"].as_string() == hashed,
            AuditLog.target_id.isnot(None),
        )
    )


async def resolve_quote_by_token(
    db: AsyncSession,
    token: str,
) -> ResolvedQuote | None:
    hashed = hash_token(token)
    now = utcnow()

    result = await db.execute(
        select(Quote)
        .options(selectinload(Quote.custom_request))
        .where(
            Quote.magic_token == hashed,
            Quote.expires_at > now,
            Quote.archived_at.is_(None),
        )
    )
    quote = result.scalars().first()
    if quote:
        return ResolvedQuote(quote=quote, hashed=hashed)

    result = await db.execute(
        select(Quote)
        .options(selectinload(Quote.custom_request))
        .where(
            Quote.status.in_([QuoteStatus.SENT, QuoteStatus.DRAFT]),
            Quote.expires_at > now,
            Quote.archived_at.is_(None),
            Quote.id.in_(_quote_sent_ids(hashed)),
        )
        .order_by(Quote.id.desc())
    )
    quote = result.scalars().first()
    if quote:
        logger.info("Quote resolved through QUOTE_SENT audit trail", extra={"quote_id": quote.id})
        return ResolvedQuote(quote=quote, hashed=hashed)

    return None


async def token_matches_quote(
    db: AsyncSession,
    quote: Quote,
    hashed: str,
) -> bool:
    """True when ``hashed`` is a live token issued for ``quote``."""
    if quote.magic_token == hashed:
        return True
    if quote.magic_token and quote.magic_token.startswith(USED_TOKEN_PREFIX):
        return False

    match = await db.scalar(
        _quote_sent_ids(hashed)
        .where(AuditLog.target_id == quote.id)
        .limit(1)
    )
    return match is not None
