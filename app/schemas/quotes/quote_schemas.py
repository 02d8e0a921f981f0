from datetime import datetime
from typing import Optional

from app.models.enums.quote_status import QuoteStatus
from app.schemas.common import CamelModel, Money

# =====================================================
# PAYLOADS
# =====================================================

class QuoteTokenIn(CamelModel):
    token: Optional[str] = None


# =====================================================
# RESPONSES
# =====================================================

class QuoteAcceptOut(CamelModel):
    id: int
    status: QuoteStatus
    order_id: int
    project_id: int
    magic_link: str


class QuoteRejectOut(CamelModel):
    id: int
    status: QuoteStatus


class QuoteSendOut(CamelModel):
    ok: bool = True
    quote_id: int
    status: QuoteStatus
    sent_at: datetime
    expires_at: datetime
    magic_link: str


class QuoteRequestSummary(CamelModel):
    full_name: str
    project_type: Optional[str] = None
    budget_range: Optional[str] = None
    timeline: Optional[str] = None


class QuoteMagicValidateOut(CamelModel):
    quote_id: int
    custom_request_id: int
    email: str
    amount: Money
    currency: str
    scope: Optional[str] = None
    status: QuoteStatus
    expires_at: datetime
    request: QuoteRequestSummary
    meta: dict
    has_password: bool
