"""American odds conversions.

All money math runs on Decimal. Amounts are rounded to cents only where they
are stored (see ``to_money``); intermediate products keep full precision.
"""
from decimal import Decimal, ROUND_HALF_CEILING, ROUND_HALF_UP
from typing import Iterable, Optional

from sidebets.core.errors import ValidationError

CENT = Decimal("0.01")
HUNDRED = Decimal(100)
ONE = Decimal(1)


def to_money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def is_valid_american_odds(odds) -> bool:
    if isinstance(odds, bool) or not isinstance(odds, int):
        return False
    return odds >= 100 or odds <= -100


def _require_nonzero(odds: int):
    if odds == 0:
        raise ValidationError("American odds cannot be zero")


def profit(american_odds: int, stake) -> Decimal:
    _require_nonzero(american_odds)
    stake = Decimal(stake)
    if american_odds > 0:
        return stake * Decimal(american_odds) / HUNDRED
    return stake * HUNDRED / Decimal(abs(american_odds))


def payout(american_odds: int, stake) -> Decimal:
    """Total return (stake + profit). payout(150, 100) == 250."""
    return Decimal(stake) + profit(american_odds, stake)


def american_to_decimal(american_odds: int) -> Decimal:
    """+150 -> 2.5, -200 -> 1.5."""
    _require_nonzero(american_odds)
    if american_odds > 0:
        return Decimal(american_odds) / HUNDRED + ONE
    return HUNDRED / Decimal(abs(american_odds)) + ONE


def implied_probability(american_odds: int) -> Decimal:
    _require_nonzero(american_odds)
    if american_odds > 0:
        return HUNDRED / (Decimal(american_odds) + HUNDRED)
    magnitude = Decimal(abs(american_odds))
    return magnitude / (magnitude + HUNDRED)


def combined_decimal(odds_list: Iterable[int]) -> Decimal:
    odds_list = list(odds_list)
    if not odds_list:
        raise ValidationError("At least one set of odds is required")
    combined = ONE
    for odds in odds_list:
        combined *= american_to_decimal(odds)
    return combined


def decimal_to_american(decimal_odds) -> int:
    d = Decimal(decimal_odds)
    if d <= ONE:
        raise ValidationError(f"Decimal odds must be greater than 1, got {d}")
    if d >= 2:
        return int(((d - ONE) * HUNDRED).to_integral_value(rounding=ROUND_HALF_CEILING))
    return int((-HUNDRED / (d - ONE)).to_integral_value(rounding=ROUND_HALF_CEILING))


def parlay_american_odds(odds_list: Iterable[int]) -> int:
    return decimal_to_american(combined_decimal(odds_list))


def format_american_odds(odds: int) -> str:
    if odds > 0:
        return f"+{odds}"
    return str(odds)


def parse_odds_input(text: str) -> Optional[int]:
    """Parse "+150", "-220" or "150"; None when not a usable odds value."""
    cleaned = "".join(text.split())
    try:
        value = int(cleaned)
    except ValueError:
        return None
    if not is_valid_american_odds(value):
        return None
    return value
