from typing import Optional

from fastapi import APIRouter, Body, Cookie, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import REFERRAL_COOKIE_NAME
from app.core.db import get_db
from app.models.enums.user_role import UserRole
from app.schemas.quotes.quote_schemas import (
    QuoteAcceptOut,
    QuoteMagicValidateOut,
    QuoteRejectOut,
    QuoteSendOut,
    QuoteTokenIn,
)
from app.services.quotes.quote_accept_service import accept_quote
from app.services.quotes.quote_service import (
    reject_quote,
    send_quote,
    validate_quote_token,
)
from app.utils.check_roles import require_role
from app.utils.get_user import SessionContext, get_optional_session

router = APIRouter(
    prefix="/api/quotes",
    tags=["Quotes"],
)


def _pick_token(payload: Optional[QuoteTokenIn], token: Optional[str]) -> Optional[str]:
    if payload and payload.token:
        return payload.token
    return token


@router.post(
    "/magic/validate",
    response_model=QuoteMagicValidateOut,
)
async def validate_quote_magic_link_api(
    payload: Optional[QuoteTokenIn] = Body(None),
    token: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await validate_quote_token(db, _pick_token(payload, token))


@router.post(
    "/{quote_id}/accept",
    response_model=QuoteAcceptOut,
)
async def accept_quote_api(
    quote_id: int,
    payload: Optional[QuoteTokenIn] = Body(None),
    token: Optional[str] = Query(None),
    referral_code: Optional[str] = Cookie(None, alias=REFERRAL_COOKIE_NAME),
    db: AsyncSession = Depends(get_db),
    session: Optional[SessionContext] = Depends(get_optional_session),
):
    return await accept_quote(
        db,
        quote_id=quote_id,
        token=_pick_token(payload, token),
        session=session,
        referral_code=referral_code,
    )


@router.post(
    "/{quote_id}/reject",
    response_model=QuoteRejectOut,
)
async def reject_quote_api(
    quote_id: int,
    payload: Optional[QuoteTokenIn] = Body(None),
    token: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    session: Optional[SessionContext] = Depends(get_optional_session),
):
    return await reject_quote(
        db,
        quote_id=quote_id,
        token=_pick_token(payload, token),
        session=session,
    )


@router.post(
    "/{quote_id}/send",
    response_model=QuoteSendOut,
)
async def send_quote_api(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.ADMIN, UserRole.PARTNER])),
):
    return await send_quote(db, quote_id, user)
