from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.quotes.quote_models import Quote
from app.services.quotes.token_resolver import (
    hash_token,
    resolve_quote_by_token,
    token_matches_quote,
)
from app.utils.get_user import SessionContext
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class QuoteAccess:
    quote: Quote
    token_hash: str | None
    token_valid: bool


async def get_quote_with_request(db: AsyncSession, quote_id: int) -> Quote | None:
    result = await db.execute(
        select(Quote)
        .options(selectinload(Quote.custom_request))
        .where(Quote.id == quote_id)
    )
    return result.scalar_one_or_none()


async def resolve_quote_access(
    db: AsyncSession,
    quote_id: int | None,
    token: str | None,
) -> QuoteAccess:
    """Find the quote by path id, falling back to the presented token."""
    quote = await get_quote_with_request(db, quote_id) if quote_id is not None else None

    if quote is None and token:
        resolved = await resolve_quote_by_token(db, token)
        if resolved:
            return QuoteAccess(quote=resolved.quote, token_hash=resolved.hashed, token_valid=True)

    if quote is None:
        raise AppException(404, "Not found", ErrorCode.QUOTE_NOT_FOUND)

    if not token:
        return QuoteAccess(quote=quote, token_hash=None, token_valid=False)

    token_hash = hash_token(token)
    token_valid = await token_matches_quote(db, quote, token_hash)
    if not token_valid:
        logger.warning("Token presented for a different quote", extra={"quote_id": quote.id})

    return QuoteAccess(quote=quote, token_hash=token_hash, token_valid=token_valid)


def is_quote_owner(quote: Quote, session: SessionContext) -> bool:
    request = quote.custom_request
    if request.user_id is not None and request.user_id == session.user.id:
        return True
    if session.user.email and request.email.lower() == session.user.email.lower():
        return True
    return session.quote_id is not None and session.quote_id == quote.id


def authorize_quote_action(
    access: QuoteAccess,
    session: SessionContext | None,
    *,
    token_overrides_session: bool = True,
) -> None:
    """Staff and owners act through their session; anonymous callers need a valid token.

    With `token_overrides_session` off, a signed-in caller who is neither staff
    nor owner is refused even when the request also carries a valid token.
    """
    if session is None:
        if access.token_valid:
            return
        raise AppException(401, "Unauthorized", ErrorCode.UNAUTHORIZED)

    if session.is_staff or is_quote_owner(access.quote, session):
        return

    if token_overrides_session and access.token_valid:
        return

    raise AppException(403, "Forbidden", ErrorCode.PERMISSION_DENIED)
