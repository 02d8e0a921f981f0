"""Quote acceptance: turns a sent quote into an order, a project with its
phase plan and payment schedule, and a client account with a login link.

Every write of an acceptance shares the request's session and is committed
once at the end; any failure rolls the whole acceptance back. The admin
e-mail is sent after the commit and never fails the request.
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.audit_actions import AuditAction, AuditTarget
from app.constants.error_codes import ErrorCode
from app.core.config import (
    CUSTOM_PROJECT_SERVICE_SLUG,
    NEXTAUTH_URL,
    SERVICE_FALLBACK_TO_ANY,
)
from app.core.exceptions import AppException
from app.models.catalog.service_models import Service
from app.models.enums.custom_request_status import CustomRequestStatus
from app.models.enums.order_status import OrderStatus
from app.models.enums.quote_status import QuoteStatus
from app.models.orders.order_models import Order
from app.models.projects.project_models import Project
from app.schemas.quotes.quote_schemas import QuoteAcceptOut
from app.services.auth.magic_login_service import create_magic_login_token
from app.services.notifications.email_service import send_admin_notification
from app.services.projects.project_provisioner import provision_project_plan
from app.services.quotes.quote_access import authorize_quote_action, resolve_quote_access
from app.services.quotes.quote_metadata import load_quote_metadata
from app.services.quotes.quote_state import assert_quote_actionable, transition_stmt
from app.services.quotes.token_resolver import spent_token
from app.services.referrals.referral_service import create_referral_commission_for_order
from app.services.users.user_provisioner import ensure_user
from app.utils.audit_helpers import emit_audit
from app.utils.get_user import SessionContext
from app.utils.datetime_utils import utcnow
from app.utils.logger import get_logger

logger = get_logger(__name__)


def build_order_magic_link(token: str) -> str:
    return f"{NEXTAUTH_URL}/magic/order?token={token}"


async def resolve_service_id(db: AsyncSession, preferred_id: int | None = None) -> int | None:
    if preferred_id is not None:
        exists = await db.scalar(select(Service.id).where(Service.id == preferred_id))
        if exists:
            return exists

    service_id = await db.scalar(
        select(Service.id).where(Service.slug == CUSTOM_PROJECT_SERVICE_SLUG)
    )
    if service_id or not SERVICE_FALLBACK_TO_ANY:
        return service_id

    service_id = await db.scalar(
        select(Service.id).order_by(Service.created_at.asc(), Service.id.asc()).limit(1)
    )
    if service_id:
        logger.warning(
            "Service slug not found; falling back to oldest service",
            extra={"slug": CUSTOM_PROJECT_SERVICE_SLUG, "service_id": service_id},
        )
    return service_id


def _format_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"


async def accept_quote(
    db: AsyncSession,
    *,
    quote_id: int | None,
    token: str | None,
    session: SessionContext | None,
    referral_code: str | None = None,
) -> QuoteAcceptOut:
    access = await resolve_quote_access(db, quote_id, token)
    quote = access.quote

    assert_quote_actionable(quote)
    authorize_quote_action(access, session, token_overrides_session=False)

    logger.info(
        "Accepting quote",
        extra={"quote_id": quote.id, "via_token": access.token_valid, "session_user": session.user.id if session else None},
    )

    meta = await load_quote_metadata(db, quote.id)

    service_id = await resolve_service_id(db, meta.service_id)
    if not service_id:
        raise AppException(400, "No service configured", ErrorCode.SERVICE_NOT_CONFIGURED, field="serviceId")

    try:
        user = await ensure_user(db, quote, referral_code)

        order = Order(
            user_id=user.id,
            service_id=service_id,
            total_amount=quote.amount,
            status=OrderStatus.IN_PROGRESS,
        )
        db.add(order)
        await db.flush()

        request = quote.custom_request
        project = Project(
            order_id=order.id,
            title=meta.project_title or f"Custom project for {request.full_name}",
            description=meta.project_description or quote.scope,
        )
        db.add(project)
        await db.flush()

        await provision_project_plan(db, project, meta.phases, meta.payment_schedule)

        request.order_id = order.id
        request.status = CustomRequestStatus.CONVERTED_TO_ORDER
        request.user_id = user.id

        values = {"accepted_at": utcnow()}
        if access.token_valid:
            values["magic_token"] = spent_token(access.token_hash)

        result = await db.execute(transition_stmt(quote.id, QuoteStatus.ACCEPTED, **values))
        accepted_id = result.scalar_one_or_none()
        if accepted_id is None:
            # lost a race with a concurrent accept or reject
            raise AppException(400, "Quote already accepted", ErrorCode.QUOTE_ALREADY_ACCEPTED)

        magic = await create_magic_login_token(
            db,
            user=user,
            target_type=AuditTarget.PROJECT.value,
            target_id=project.id,
            meta={"quoteId": quote.id, "orderId": order.id, "projectId": project.id},
        )
        magic_link = build_order_magic_link(magic.token)

        actor_id = session.user.id if session else user.id
        await emit_audit(
            db,
            actor_id=actor_id,
            action=AuditAction.QUOTE_ACCEPTED,
            target_type=AuditTarget.QUOTE,
            target_id=quote.id,
            data={"orderId": order.id, "projectId": project.id, "magicLink": magic_link},
        )
        await emit_audit(
            db,
            actor_id=actor_id,
            action=AuditAction.PROJECT_PLAN,
            target_type=AuditTarget.PROJECT,
            target_id=project.id,
            data={
                "phases": [seed.model_dump(mode="json", by_alias=True) for seed in meta.phases],
                "paymentSchedule": [seed.model_dump(mode="json", by_alias=True) for seed in meta.payment_schedule],
            },
        )
        await emit_audit(
            db,
            actor_id=actor_id,
            action=AuditAction.USER_ACTIVATED,
            target_type=AuditTarget.USER,
            target_id=user.id,
            data={"source": AuditAction.QUOTE_ACCEPTED.value, "quoteId": quote.id},
        )

        await create_referral_commission_for_order(
            db,
            order_id=order.id,
            user_id=user.id,
            order_total=order.total_amount,
        )

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Quote accepted",
        extra={"quote_id": quote.id, "order_id": order.id, "project_id": project.id, "user_id": user.id},
    )

    await send_admin_notification(
        subject="Quote accepted",
        text="\n".join([
            f"Client: {user.email}",
            f"Quote ID: {quote.id}",
            f"Order ID: {order.id}",
            f"Project ID: {project.id}",
            f"Amount: {_format_amount(order.total_amount)}",
        ]),
    )

    return QuoteAcceptOut(
        id=quote.id,
        status=QuoteStatus.ACCEPTED,
        order_id=order.id,
        project_id=project.id,
        magic_link=magic_link,
    )
