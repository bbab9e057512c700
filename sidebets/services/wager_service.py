import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from sidebets.core.config import settings
from sidebets.core.database import transaction, utcnow
from sidebets.core.errors import Forbidden, InvalidState, NotFound, ValidationError
from sidebets.models import Bet, Wager
from sidebets.models.enums import BetStatus, TransactionType
from sidebets.services import ledger_service, membership_service, queries
from sidebets.services.ledger_service import LedgerRef
from sidebets.services.odds import payout, to_money

logger = logging.getLogger(__name__)


def validate_stake(amount):
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("Amount must be positive")
    if amount > settings.MAX_STAKE:
        raise ValidationError(f"Amount cannot exceed {settings.MAX_STAKE}")
    return amount


def ensure_accepting_wagers(bet: Bet, now: datetime):
    if bet.status != BetStatus.OPEN.value:
        raise InvalidState(f'Bet "{bet.title}" is no longer open for wagers')
    if bet.locks_at is not None and now > bet.locks_at:
        raise InvalidState(f'Betting is closed for "{bet.title}"')


def place_wager(db: Session, user_id: str, option_id: str, amount, now: Optional[datetime] = None) -> Wager:
    amount = validate_stake(amount)
    now = now or utcnow()

    with transaction(db):
        option = queries.get_option(db, option_id)
        if option is None:
            raise NotFound("Option not found")
        bet = queries.get_bet_for_update(db, option.bet_id)

        ensure_accepting_wagers(bet, now)
        membership_service.verify_membership(db, user_id, bet.group_id)

        if bet.created_by_id == user_id:
            group = membership_service.get_group(db, bet.group_id)
            if not group.allow_creator_wagers:
                raise InvalidState("Bet creators cannot wager on their own bets in this group")

        if queries.wager_for_user_on_bet(db, user_id, bet.id) is not None:
            raise InvalidState("You already have a wager on this bet. Cancel it first to place a new one.")

        wager = Wager(
            bet_id=bet.id,
            option_id=option.id,
            user_id=user_id,
            amount=amount,
            odds_at_wager=option.american_odds,
            potential_payout=to_money(payout(option.american_odds, amount)),
        )
        db.add(wager)
        db.flush()

        ledger_service.reserve(
            db, user_id, bet.group_id, amount, TransactionType.WAGER_PLACED,
            LedgerRef(wager_id=wager.id, bet_id=bet.id, note=f'Wager on "{option.name}"'),
        )

    logger.info("wager %s placed by %s on bet %s: %s at %s", wager.id, user_id, bet.id, amount, wager.odds_at_wager)
    return wager


def cancel_wager(db: Session, user_id: str, wager_id: str):
    with transaction(db):
        wager = queries.get_wager(db, wager_id)
        if wager is None:
            raise NotFound("Wager not found")
        if wager.user_id != user_id:
            raise Forbidden("You can only cancel your own wagers")

        bet = queries.get_bet_for_update(db, wager.bet_id)
        if bet.status != BetStatus.OPEN.value:
            raise InvalidState("Cannot cancel wager on a locked or settled bet")

        option = queries.get_option(db, wager.option_id)
        ledger_service.release(
            db, user_id, bet.group_id, wager.amount, TransactionType.WAGER_CANCELLED,
            LedgerRef(wager_id=wager.id, bet_id=bet.id, note=f'Cancelled wager on "{option.name}"'),
        )
        db.delete(wager)

    logger.info("wager %s cancelled by %s", wager_id, user_id)


def list_my_wagers(db: Session, user_id: str, group_id: str) -> List[Wager]:
    membership_service.verify_membership(db, user_id, group_id)
    return queries.wagers_for_user_in_group(db, user_id, group_id)
