from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.audit_actions import AuditAction, AuditTarget
from app.constants.error_codes import ErrorCode
from app.core.config import NEXTAUTH_URL, QUOTE_SEND_TTL_DAYS
from app.core.exceptions import AppException
from app.models.enums.custom_request_status import CustomRequestStatus
from app.models.enums.quote_status import QuoteStatus
from app.models.users.user_models import User
from app.schemas.quotes.quote_schemas import (
    QuoteMagicValidateOut,
    QuoteRejectOut,
    QuoteRequestSummary,
    QuoteSendOut,
)
from app.services.quotes.quote_access import (
    authorize_quote_action,
    get_quote_with_request,
    resolve_quote_access,
)
from app.services.quotes.quote_metadata import load_raw_quote_metadata
from app.services.quotes.quote_state import (
    assert_quote_actionable,
    assert_terminal_state_free,
    transition_stmt,
)
from app.services.quotes.token_resolver import (
    generate_magic_token,
    resolve_quote_by_token,
    spent_token,
)
from app.services.users.user_provisioner import ensure_user
from app.utils.audit_helpers import emit_audit
from app.utils.datetime_utils import ensure_utc, isoformat, utcnow
from app.utils.get_user import SessionContext
from app.utils.logger import get_logger

logger = get_logger(__name__)


def build_quote_magic_link(token: str) -> str:
    return f"{NEXTAUTH_URL}/magic/quote?token={token}"


# =====================================================
# SEND
# =====================================================
async def send_quote(
    db: AsyncSession,
    quote_id: int,
    user: User,
) -> QuoteSendOut:
    quote = await get_quote_with_request(db, quote_id)
    if not quote:
        raise AppException(404, "Quote not found", ErrorCode.QUOTE_NOT_FOUND)

    if quote.is_archived:
        raise AppException(400, "Quote archived", ErrorCode.QUOTE_ARCHIVED)
    assert_terminal_state_free(quote)

    sent_at = utcnow()
    current_expiry = ensure_utc(quote.expires_at)
    expires_at = (
        current_expiry
        if current_expiry and current_expiry > sent_at
        else sent_at + timedelta(days=QUOTE_SEND_TTL_DAYS)
    )

    token, hashed = generate_magic_token()
    magic_link = build_quote_magic_link(token)

    result = await db.execute(
        transition_stmt(
            quote.id,
            QuoteStatus.SENT,
            sent_at=sent_at,
            expires_at=expires_at,
            magic_token=hashed,
        )
    )
    if result.scalar_one_or_none() is None:
        raise AppException(409, "Quote cannot be sent", ErrorCode.QUOTE_INVALID_STATE)

    await emit_audit(
        db,
        actor_id=user.id,
        action=AuditAction.QUOTE_SENT,
        target_type=AuditTarget.QUOTE,
        target_id=quote.id,
        data={
            "tokenHash": hashed,
            "magicLink": magic_link,
            "sentAt": isoformat(sent_at),
            "expiresAt": isoformat(expires_at),
        },
    )

    await db.commit()

    logger.info("Quote sent", extra={"quote_id": quote.id, "user_id": user.id})

    return QuoteSendOut(
        quote_id=quote.id,
        status=QuoteStatus.SENT,
        sent_at=sent_at,
        expires_at=expires_at,
        magic_link=magic_link,
    )


# =====================================================
# REJECT
# =====================================================
async def reject_quote(
    db: AsyncSession,
    *,
    quote_id: int | None,
    token: str | None,
    session: SessionContext | None,
) -> QuoteRejectOut:
    access = await resolve_quote_access(db, quote_id, token)
    quote = access.quote

    assert_quote_actionable(quote)
    authorize_quote_action(access, session)

    values = {"rejected_at": utcnow()}
    if access.token_valid:
        values["magic_token"] = spent_token(access.token_hash)

    result = await db.execute(transition_stmt(quote.id, QuoteStatus.REJECTED, **values))
    if result.scalar_one_or_none() is None:
        raise AppException(400, "Quote already accepted", ErrorCode.QUOTE_ALREADY_ACCEPTED)

    quote.custom_request.status = CustomRequestStatus.REJECTED

    await emit_audit(
        db,
        actor_id=session.user.id if session else None,
        action=AuditAction.QUOTE_REJECTED,
        target_type=AuditTarget.QUOTE,
        target_id=quote.id,
        data={"tokenHash": access.token_hash if access.token_valid else None},
    )

    await db.commit()

    logger.info("Quote rejected", extra={"quote_id": quote.id})

    return QuoteRejectOut(id=quote.id, status=QuoteStatus.REJECTED)


# =====================================================
# MAGIC LINK VALIDATION
# =====================================================
async def validate_quote_token(
    db: AsyncSession,
    token: str | None,
) -> QuoteMagicValidateOut:
    """Landing step of the emailed quote link: returns what the client needs
    to review the quote and makes sure their account exists."""
    if not token:
        raise AppException(400, "Missing token", ErrorCode.TOKEN_MISSING, field="token")

    resolved = await resolve_quote_by_token(db, token)
    if not resolved or resolved.quote.status not in (QuoteStatus.DRAFT, QuoteStatus.SENT):
        logger.warning("Invalid quote magic token")
        raise AppException(400, "Invalid or expired token", ErrorCode.TOKEN_INVALID)

    quote = resolved.quote

    if quote.status == QuoteStatus.DRAFT:
        await db.execute(
            transition_stmt(quote.id, QuoteStatus.SENT, sent_at=quote.sent_at or utcnow())
        )

    user = await ensure_user(db, quote)
    raw_meta = await load_raw_quote_metadata(db, quote.id)

    phases = raw_meta.get("phases")
    payment_schedule = raw_meta.get("paymentSchedule")
    meta = {
        **raw_meta,
        "phases": phases if isinstance(phases, list) else [],
        "paymentSchedule": payment_schedule if isinstance(payment_schedule, list) else [],
    }

    request = quote.custom_request
    result = QuoteMagicValidateOut(
        quote_id=quote.id,
        custom_request_id=request.id,
        email=user.email,
        amount=quote.amount,
        currency=quote.currency,
        scope=quote.scope,
        status=QuoteStatus.SENT,
        expires_at=ensure_utc(quote.expires_at),
        request=QuoteRequestSummary(
            full_name=request.full_name,
            project_type=request.project_type,
            budget_range=request.budget_range,
            timeline=request.timeline,
        ),
        meta=meta,
        has_password=bool(user.password_hash),
    )

    await db.commit()
    return result
