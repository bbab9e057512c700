"""Propagate a bet's outcome into every parlay leg that references it.

Both entry points run inside the caller's unit of work (bet settlement or
cancellation) and skip parlays that are no longer pending, so calling them
twice for the same bet never touches the ledger twice.
"""
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from sidebets.core.database import utcnow
from sidebets.models import Parlay
from sidebets.models.enums import BetResult, BetStatus, TransactionType
from sidebets.services import ledger_service, queries
from sidebets.services.ledger_service import LedgerRef
from sidebets.services.odds import combined_decimal, to_money

logger = logging.getLogger(__name__)

ODDS_PLACES = Decimal("0.000001")


def _pending_legs_on_bet(db: Session, bet_id: str):
    for leg in queries.legs_for_bet(db, bet_id):
        parlay = queries.get_parlay_for_update(db, leg.parlay_id)
        if parlay is None or parlay.result != BetResult.PENDING.value:
            continue
        yield leg, parlay


def _settle_parlay(db: Session, parlay: Parlay, result: BetResult):
    if result == BetResult.WON:
        ledger_service.settle_win(
            db, parlay.user_id, parlay.group_id, parlay.amount, parlay.potential_payout,
            TransactionType.PARLAY_WON,
            LedgerRef(parlay_id=parlay.id, note=f"Parlay won! Payout: {parlay.potential_payout:.2f}"),
        )
    elif result == BetResult.LOST:
        ledger_service.settle_loss(
            db, parlay.user_id, parlay.group_id, parlay.amount, TransactionType.PARLAY_LOST,
            LedgerRef(parlay_id=parlay.id, note=f"Parlay lost (would have paid {parlay.potential_payout:.2f})"),
        )
    else:
        ledger_service.settle_push(
            db, parlay.user_id, parlay.group_id, parlay.amount, TransactionType.PARLAY_CANCELLED,
            LedgerRef(parlay_id=parlay.id, note="Parlay voided, every leg was cancelled"),
        )

    parlay.result = result.value
    parlay.settled_at = utcnow()
    db.flush()
    logger.info("parlay %s settled %s for user %s", parlay.id, result.value, parlay.user_id)


def _settle_if_all_won(db: Session, parlay: Parlay):
    statuses = queries.bet_statuses_for_parlay(db, parlay.id)
    live_legs = [leg for leg in parlay.legs if leg.result != BetResult.PUSH.value]
    if not live_legs:
        _settle_parlay(db, parlay, BetResult.PUSH)
        return
    all_settled = all(statuses.get(leg.bet_id) == BetStatus.SETTLED.value for leg in live_legs)
    all_won = all(leg.result == BetResult.WON.value for leg in live_legs)
    if all_settled and all_won:
        _settle_parlay(db, parlay, BetResult.WON)


def resolve_settled_bet(db: Session, bet_id: str, winning_option_id: str):
    for leg, parlay in _pending_legs_on_bet(db, bet_id):
        if leg.option_id == winning_option_id:
            leg.result = BetResult.WON.value
            db.flush()
            _settle_if_all_won(db, parlay)
        else:
            # one losing leg sinks the parlay regardless of the others
            leg.result = BetResult.LOST.value
            db.flush()
            _settle_parlay(db, parlay, BetResult.LOST)


def resolve_cancelled_bet(db: Session, bet_id: str):
    """Drop legs on a cancelled bet out of their parlays.

    The pushed leg no longer counts: combined odds and potential payout are
    recomputed from the remaining legs. A parlay left with no live legs is
    voided and its stake refunded; one whose remaining legs have all won
    pays out at the reduced odds.
    """
    for leg, parlay in _pending_legs_on_bet(db, bet_id):
        leg.result = BetResult.PUSH.value
        live_odds = [l.odds_at_placement for l in parlay.legs if l.result != BetResult.PUSH.value]
        if live_odds:
            combined = combined_decimal(live_odds)
            parlay.combined_decimal_odds = combined.quantize(ODDS_PLACES)
            parlay.potential_payout = to_money(Decimal(parlay.amount) * combined)
        else:
            parlay.combined_decimal_odds = Decimal("1.000000")
            parlay.potential_payout = to_money(parlay.amount)
        db.flush()
        logger.info("parlay %s leg on cancelled bet %s pushed, payout now %s", parlay.id, bet_id, parlay.potential_payout)
        _settle_if_all_won(db, parlay)
