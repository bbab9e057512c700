import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from sidebets.core.database import transaction, utcnow
from sidebets.core.errors import Forbidden, InvalidState, NotFound, ValidationError
from sidebets.models import Parlay, ParlayLeg
from sidebets.models.enums import BetResult, BetStatus, TransactionType
from sidebets.services import ledger_service, membership_service, queries
from sidebets.services.ledger_service import LedgerRef
from sidebets.services.odds import combined_decimal, decimal_to_american, to_money
from sidebets.services.wager_service import ensure_accepting_wagers, validate_stake

logger = logging.getLogger(__name__)

MIN_LEGS = 2
MAX_LEGS = 10
ODDS_PLACES = Decimal("0.000001")


@dataclass
class LegSpec:
    bet_id: str
    option_id: str


def effective_american_odds(parlay: Parlay) -> Optional[int]:
    # a voided parlay sits at even money and has no American price
    if Decimal(parlay.combined_decimal_odds) <= 1:
        return None
    return decimal_to_american(parlay.combined_decimal_odds)


def create_parlay(
    db: Session,
    user_id: str,
    group_id: str,
    amount,
    legs: Sequence[LegSpec],
    now: Optional[datetime] = None,
) -> Parlay:
    amount = validate_stake(amount)
    if len(legs) < MIN_LEGS:
        raise ValidationError(f"Parlay must have at least {MIN_LEGS} legs")
    if len(legs) > MAX_LEGS:
        raise ValidationError(f"Maximum {MAX_LEGS} legs in a parlay")
    bet_ids = [leg.bet_id for leg in legs]
    if len(set(bet_ids)) != len(bet_ids):
        raise ValidationError("Each leg must be from a different bet")
    now = now or utcnow()

    with transaction(db):
        membership_service.verify_membership(db, user_id, group_id)

        options = {o.id: o for o in queries.options_by_ids(db, [leg.option_id for leg in legs])}
        # lock in id order so concurrent placements on shared bets cannot deadlock
        bets = {}
        for bet_id in sorted({o.bet_id for o in options.values()}):
            bets[bet_id] = queries.get_bet_for_update(db, bet_id)

        snapshots = []
        for leg in legs:
            option = options.get(leg.option_id)
            if option is None:
                raise NotFound("Option not found")
            if option.bet_id != leg.bet_id:
                raise ValidationError("Option does not belong to the specified bet")
            bet = bets[option.bet_id]
            if bet.group_id != group_id:
                raise ValidationError("Bet does not belong to this group")
            ensure_accepting_wagers(bet, now)
            snapshots.append((leg, option))

        combined = combined_decimal(option.american_odds for _, option in snapshots)
        parlay = Parlay(
            group_id=group_id,
            user_id=user_id,
            amount=amount,
            combined_decimal_odds=combined.quantize(ODDS_PLACES),
            potential_payout=to_money(amount * combined),
            result=BetResult.PENDING.value,
        )
        parlay.legs = [
            ParlayLeg(bet_id=leg.bet_id, option_id=option.id, odds_at_placement=option.american_odds)
            for leg, option in snapshots
        ]
        db.add(parlay)
        db.flush()

        summary = " + ".join(option.name for _, option in snapshots)
        ledger_service.reserve(
            db, user_id, group_id, amount, TransactionType.PARLAY_PLACED,
            LedgerRef(parlay_id=parlay.id, note=f"Parlay: {summary}"),
        )

    logger.info("parlay %s placed by %s: %d legs, stake %s, payout %s",
                parlay.id, user_id, len(legs), amount, parlay.potential_payout)
    return parlay


def cancel_parlay(db: Session, user_id: str, parlay_id: str):
    with transaction(db):
        parlay = queries.get_parlay_for_update(db, parlay_id)
        if parlay is None:
            raise NotFound("Parlay not found")
        if parlay.user_id != user_id:
            raise Forbidden("You can only cancel your own parlays")
        if parlay.result != BetResult.PENDING.value:
            raise InvalidState("Cannot cancel a settled parlay")

        statuses = queries.bet_statuses_for_parlay(db, parlay.id)
        if any(status != BetStatus.OPEN.value for status in statuses.values()):
            raise InvalidState("Cannot cancel parlay - one or more bets have been locked or settled")

        ledger_service.release(
            db, user_id, parlay.group_id, parlay.amount, TransactionType.PARLAY_CANCELLED,
            LedgerRef(parlay_id=parlay.id, note="Parlay cancelled"),
        )
        db.delete(parlay)

    logger.info("parlay %s cancelled by %s", parlay_id, user_id)


def get_parlay(db: Session, parlay_id: str, actor_id: str) -> Parlay:
    parlay = queries.get_parlay(db, parlay_id)
    if parlay is None:
        raise NotFound("Parlay not found")
    membership_service.verify_membership(db, actor_id, parlay.group_id)
    return parlay


def list_group_parlays(db: Session, group_id: str, actor_id: str) -> List[Parlay]:
    membership_service.verify_membership(db, actor_id, group_id)
    return queries.parlays_for_group(db, group_id)


def list_my_parlays(db: Session, group_id: str, user_id: str) -> List[Parlay]:
    membership_service.verify_membership(db, user_id, group_id)
    return queries.parlays_for_group(db, group_id, user_id=user_id)
