# app/utils/decimal_utils.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

TWOPLACES = Decimal("0.01")

def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def parse_positive_amount(value) -> Decimal | None:
    """Numbers or numeric strings greater than zero; anything else is None.

    The sign is judged on the value as given and the value is returned
    unrounded, so sub-cent amounts survive parsing.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        raw = str(value)
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
    else:
        return None

    try:
        amount = Decimal(raw)
        if not amount.is_finite():
            return None
    except InvalidOperation:
        return None

    if amount <= 0:
        return None
    return amount


def compute_commission(order_total, rate) -> Decimal:
    return (to_decimal(order_total) * Decimal(str(rate))).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
