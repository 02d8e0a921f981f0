"""Quote status transitions.

Quotes only move forward: DRAFT/SENT may be (re)sent, accepted or
rejected; ACCEPTED and REJECTED are terminal. Every status write goes
through :func:`transition_stmt`, a conditional UPDATE that only matches
rows still in an allowed source state.
"""

from datetime import datetime

from sqlalchemy import update

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.enums.quote_status import QuoteStatus
from app.models.quotes.quote_models import Quote
from app.utils.datetime_utils import ensure_utc, utcnow

QUOTE_TRANSITIONS: dict[QuoteStatus, frozenset[QuoteStatus]] = {
    QuoteStatus.DRAFT: frozenset({QuoteStatus.SENT, QuoteStatus.ACCEPTED, QuoteStatus.REJECTED}),
    QuoteStatus.SENT: frozenset({QuoteStatus.SENT, QuoteStatus.ACCEPTED, QuoteStatus.REJECTED}),
    QuoteStatus.ACCEPTED: frozenset(),
    QuoteStatus.REJECTED: frozenset(),
}


def can_transition(current: QuoteStatus, target: QuoteStatus) -> bool:
    return target in QUOTE_TRANSITIONS.get(current, frozenset())


def source_states(target: QuoteStatus) -> list[QuoteStatus]:
    return [state for state in QUOTE_TRANSITIONS if can_transition(state, target)]


def transition_stmt(quote_id: int, target: QuoteStatus, **values):
    return (
        update(Quote)
        .where(
            Quote.id == quote_id,
            Quote.status.in_(source_states(target)),
            Quote.archived_at.is_(None),
        )
        .values(status=target, **values)
        .returning(Quote.id)
    )


def assert_terminal_state_free(quote: Quote) -> None:
    if quote.status == QuoteStatus.ACCEPTED:
        raise AppException(400, "Quote already accepted", ErrorCode.QUOTE_ALREADY_ACCEPTED)
    if quote.status == QuoteStatus.REJECTED:
        raise AppException(400, "Quote was rejected", ErrorCode.QUOTE_REJECTED)


def assert_quote_actionable(quote: Quote, now: datetime | None = None) -> None:
    """Preconditions shared by accept and reject, checked in this order."""
    now = now or utcnow()

    if quote.is_archived:
        raise AppException(400, "Quote archived", ErrorCode.QUOTE_ARCHIVED)

    assert_terminal_state_free(quote)

    if ensure_utc(quote.expires_at) <= now:
        raise AppException(400, "Quote expired", ErrorCode.QUOTE_EXPIRED)
