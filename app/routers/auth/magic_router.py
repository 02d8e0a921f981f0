from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.auth.auth_schemas import MagicLoginValidateOut
from app.schemas.quotes.quote_schemas import QuoteTokenIn
from app.services.auth.magic_login_service import validate_magic_login

router = APIRouter(prefix="/api/magic", tags=["Magic Login"])


@router.post(
    "/login/validate",
    response_model=MagicLoginValidateOut,
)
async def validate_magic_login_api(
    payload: Optional[QuoteTokenIn] = Body(None),
    token: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    if payload and payload.token:
        token = payload.token
    return await validate_magic_login(db, token)
