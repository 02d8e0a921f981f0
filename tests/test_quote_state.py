from datetime import timedelta
from types import SimpleNamespace

import pytest

from app.core.exceptions import AppException
from app.models.enums.quote_status import QuoteStatus
from app.services.quotes.quote_state import (
    assert_quote_actionable,
    can_transition,
    source_states,
)
from app.utils.datetime_utils import utcnow


def _quote(status=QuoteStatus.SENT, archived=False, expires_in=timedelta(days=1)):
    return SimpleNamespace(
        status=status,
        is_archived=archived,
        expires_at=utcnow() + expires_in,
    )


def test_terminal_states_never_move():
    for target in QuoteStatus:
        assert not can_transition(QuoteStatus.ACCEPTED, target)
        assert not can_transition(QuoteStatus.REJECTED, target)


def test_open_quotes_can_close_either_way():
    assert can_transition(QuoteStatus.DRAFT, QuoteStatus.ACCEPTED)
    assert can_transition(QuoteStatus.SENT, QuoteStatus.REJECTED)
    assert not can_transition(QuoteStatus.SENT, QuoteStatus.DRAFT)
    assert set(source_states(QuoteStatus.ACCEPTED)) == {QuoteStatus.DRAFT, QuoteStatus.SENT}


@pytest.mark.parametrize(
    "quote, message",
    [
        (_quote(archived=True, status=QuoteStatus.ACCEPTED), "Quote archived"),
        (_quote(status=QuoteStatus.ACCEPTED, expires_in=timedelta(days=-1)), "Quote already accepted"),
        (_quote(status=QuoteStatus.REJECTED), "Quote was rejected"),
        (_quote(expires_in=timedelta(seconds=-1)), "Quote expired"),
    ],
)
def test_actionable_checks_run_in_order(quote, message):
    with pytest.raises(AppException) as exc_info:
        assert_quote_actionable(quote)

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == message


def test_open_unexpired_quote_is_actionable():
    assert_quote_actionable(_quote())
