import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from sidebets.core.database import as_utc_naive, transaction, utcnow
from sidebets.core.errors import Forbidden, InvalidState, NotFound, ValidationError
from sidebets.models import Bet, BetOption
from sidebets.models.enums import BetResult, BetStatus, TransactionType
from sidebets.services import cascade_service, ledger_service, membership_service, queries
from sidebets.services.ledger_service import LedgerRef
from sidebets.services.odds import is_valid_american_odds

logger = logging.getLogger(__name__)

MIN_OPTIONS = 2
MAX_OPTIONS = 10

_TERMINAL = {BetStatus.SETTLED.value, BetStatus.CANCELLED.value}


@dataclass
class OptionSpec:
    name: str
    american_odds: int
    description: Optional[str] = None


def _load_bet(db: Session, bet_id: str, for_update: bool = False) -> Bet:
    bet = queries.get_bet_for_update(db, bet_id) if for_update else queries.get_bet(db, bet_id)
    if bet is None:
        raise NotFound("Bet not found")
    return bet


def _require_creator_or_admin(db: Session, bet: Bet, actor_id: str, action: str):
    membership = membership_service.verify_membership(db, actor_id, bet.group_id)
    if bet.created_by_id != actor_id and not membership_service.is_admin(membership):
        raise Forbidden(f"Only the bet creator or group admin can {action} the bet")


def create_bet(
    db: Session,
    user_id: str,
    group_id: str,
    title: str,
    options: Sequence[OptionSpec],
    description: Optional[str] = None,
    event_date: Optional[datetime] = None,
    locks_at: Optional[datetime] = None,
) -> Bet:
    if not title or not title.strip():
        raise ValidationError("Title is required")
    if len(options) < MIN_OPTIONS:
        raise ValidationError(f"At least {MIN_OPTIONS} options required")
    if len(options) > MAX_OPTIONS:
        raise ValidationError(f"Maximum {MAX_OPTIONS} options allowed")
    for opt in options:
        if not opt.name or not opt.name.strip():
            raise ValidationError("Option name is required")
        if not is_valid_american_odds(opt.american_odds):
            raise ValidationError("Odds must be +100 or higher, or -100 or lower")

    with transaction(db):
        membership_service.verify_membership(db, user_id, group_id)
        bet = Bet(
            group_id=group_id,
            created_by_id=user_id,
            title=title.strip(),
            description=description,
            event_date=as_utc_naive(event_date),
            locks_at=as_utc_naive(locks_at),
            status=BetStatus.OPEN.value,
        )
        bet.options = [
            BetOption(name=opt.name.strip(), description=opt.description, american_odds=opt.american_odds, order=index)
            for index, opt in enumerate(options)
        ]
        db.add(bet)

    logger.info("bet %s created in group %s with %d options", bet.id, group_id, len(options))
    return bet


def get_bet(db: Session, bet_id: str, actor_id: str) -> Bet:
    bet = _load_bet(db, bet_id)
    membership_service.verify_membership(db, actor_id, bet.group_id)
    return bet


def list_group_bets(db: Session, group_id: str, actor_id: str) -> List[Bet]:
    membership_service.verify_membership(db, actor_id, group_id)
    return queries.bets_for_group(db, group_id)


def lock_bet(db: Session, bet_id: str, actor_id: str) -> Bet:
    with transaction(db):
        bet = _load_bet(db, bet_id, for_update=True)
        _require_creator_or_admin(db, bet, actor_id, "lock")
        if bet.status != BetStatus.OPEN.value:
            raise InvalidState("Only open bets can be locked")
        bet.status = BetStatus.LOCKED.value

    logger.info("bet %s locked by %s", bet_id, actor_id)
    return bet


def settle_bet(db: Session, bet_id: str, winning_option_id: str, actor_id: str) -> Bet:
    """Declare the winner, settle every wager, then cascade into parlays.

    Runs as one unit of work: either the bet, all its wagers and all affected
    parlays settle, or nothing does and the bet stays open for a retry.
    """
    with transaction(db):
        bet = _load_bet(db, bet_id, for_update=True)
        _require_creator_or_admin(db, bet, actor_id, "settle")
        if bet.status in _TERMINAL:
            raise InvalidState(f"Bet is not open for settlement (status: {bet.status})")

        winning = next((o for o in bet.options if o.id == winning_option_id), None)
        if winning is None:
            raise ValidationError("Invalid winning option")

        options = {o.id: o for o in bet.options}
        bet.status = BetStatus.SETTLED.value
        bet.winning_option_id = winning.id
        bet.settled_at = utcnow()

        wagers = queries.wagers_for_bet(db, bet.id)
        for wager in wagers:
            option_name = options[wager.option_id].name
            if wager.option_id == winning.id:
                ledger_service.settle_win(
                    db, wager.user_id, bet.group_id, wager.amount, wager.potential_payout,
                    TransactionType.WAGER_WON,
                    LedgerRef(wager_id=wager.id, bet_id=bet.id,
                              note=f'Won wager on "{option_name}" - Payout: {wager.potential_payout:.2f}'),
                )
                wager.result = BetResult.WON.value
            else:
                ledger_service.settle_loss(
                    db, wager.user_id, bet.group_id, wager.amount, TransactionType.WAGER_LOST,
                    LedgerRef(wager_id=wager.id, bet_id=bet.id, note=f'Lost wager on "{option_name}"'),
                )
                wager.result = BetResult.LOST.value

        db.flush()
        cascade_service.resolve_settled_bet(db, bet.id, winning.id)

    logger.info("bet %s settled by %s, winner %s, %d wagers", bet_id, actor_id, winning_option_id, len(wagers))
    return bet


def cancel_bet(db: Session, bet_id: str, actor_id: str) -> Bet:
    with transaction(db):
        bet = _load_bet(db, bet_id, for_update=True)
        _require_creator_or_admin(db, bet, actor_id, "cancel")
        if bet.status in _TERMINAL:
            raise InvalidState(f"Bet can no longer be cancelled (status: {bet.status})")

        bet.status = BetStatus.CANCELLED.value
        wagers = queries.wagers_for_bet(db, bet.id)
        for wager in wagers:
            ledger_service.settle_push(
                db, wager.user_id, bet.group_id, wager.amount, TransactionType.BET_CANCELLED,
                LedgerRef(wager_id=wager.id, bet_id=bet.id, note=f'Refund for cancelled bet: "{bet.title}"'),
            )
            wager.result = BetResult.PUSH.value

        db.flush()
        cascade_service.resolve_cancelled_bet(db, bet.id)

    logger.info("bet %s cancelled by %s, %d wagers refunded", bet_id, actor_id, len(wagers))
    return bet


def delete_bet(db: Session, bet_id: str, actor_id: str):
    with transaction(db):
        bet = _load_bet(db, bet_id, for_update=True)
        if bet.created_by_id != actor_id:
            raise Forbidden("Only the bet creator can delete this bet")
        if bet.status != BetStatus.OPEN.value:
            raise InvalidState("Only open bets can be deleted")
        if queries.count_wagers_for_bet(db, bet.id) or queries.count_legs_for_bet(db, bet.id):
            raise InvalidState("Cannot delete a bet that has wagers. Cancel it instead.")
        db.delete(bet)

    logger.info("bet %s deleted by %s", bet_id, actor_id)
