"""Named reads against the store.

One function per access pattern so each operation asks for exactly the rows
it needs. Functions suffixed ``_for_update`` take a row lock on backends that
support ``SELECT ... FOR UPDATE``.
"""
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from sidebets.models import (
    Bet,
    BetOption,
    CreditTransaction,
    Group,
    GroupMembership,
    LedgerEntry,
    Parlay,
    ParlayLeg,
    Wager,
)


def get_group(db: Session, group_id: str) -> Optional[Group]:
    return db.query(Group).filter(Group.id == group_id).first()


def get_membership(db: Session, user_id: str, group_id: str) -> Optional[GroupMembership]:
    return (
        db.query(GroupMembership)
        .filter(GroupMembership.user_id == user_id, GroupMembership.group_id == group_id)
        .first()
    )


def get_ledger_entry(db: Session, user_id: str, group_id: str) -> Optional[LedgerEntry]:
    return (
        db.query(LedgerEntry)
        .filter(LedgerEntry.user_id == user_id, LedgerEntry.group_id == group_id)
        .first()
    )


def get_ledger_entry_for_update(db: Session, user_id: str, group_id: str) -> Optional[LedgerEntry]:
    return (
        db.query(LedgerEntry)
        .filter(LedgerEntry.user_id == user_id, LedgerEntry.group_id == group_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def ledger_entries_for_group(db: Session, group_id: str) -> List[LedgerEntry]:
    return db.query(LedgerEntry).filter(LedgerEntry.group_id == group_id).all()


def last_transaction_seq(db: Session, user_id: str, group_id: str) -> int:
    seq = (
        db.query(func.max(CreditTransaction.seq))
        .filter(CreditTransaction.user_id == user_id, CreditTransaction.group_id == group_id)
        .scalar()
    )
    return seq or 0


def transactions_for_member(
    db: Session, user_id: str, group_id: str, newest_first: bool = True, limit=None, offset: int = 0
) -> List[CreditTransaction]:
    order = CreditTransaction.seq.desc() if newest_first else CreditTransaction.seq.asc()
    query = (
        db.query(CreditTransaction)
        .filter(CreditTransaction.user_id == user_id, CreditTransaction.group_id == group_id)
        .order_by(order)
        .offset(offset)
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_bet(db: Session, bet_id: str) -> Optional[Bet]:
    return db.query(Bet).filter(Bet.id == bet_id).first()


def get_bet_for_update(db: Session, bet_id: str) -> Optional[Bet]:
    return db.query(Bet).filter(Bet.id == bet_id).with_for_update().populate_existing().first()


def bets_for_group(db: Session, group_id: str) -> List[Bet]:
    return db.query(Bet).filter(Bet.group_id == group_id).order_by(Bet.created_at.desc()).all()


def bets_by_ids(db: Session, bet_ids) -> List[Bet]:
    if not bet_ids:
        return []
    return db.query(Bet).filter(Bet.id.in_(list(bet_ids))).all()


def get_option(db: Session, option_id: str) -> Optional[BetOption]:
    return db.query(BetOption).filter(BetOption.id == option_id).first()


def options_by_ids(db: Session, option_ids) -> List[BetOption]:
    if not option_ids:
        return []
    return db.query(BetOption).filter(BetOption.id.in_(list(option_ids))).all()


def get_wager(db: Session, wager_id: str) -> Optional[Wager]:
    return db.query(Wager).filter(Wager.id == wager_id).first()


def wager_for_user_on_bet(db: Session, user_id: str, bet_id: str) -> Optional[Wager]:
    return db.query(Wager).filter(Wager.bet_id == bet_id, Wager.user_id == user_id).first()


def wagers_for_bet(db: Session, bet_id: str) -> List[Wager]:
    return db.query(Wager).filter(Wager.bet_id == bet_id).order_by(Wager.created_at.asc()).all()


def count_wagers_for_bet(db: Session, bet_id: str) -> int:
    return db.query(func.count(Wager.id)).filter(Wager.bet_id == bet_id).scalar()


def wagers_for_user_in_group(db: Session, user_id: str, group_id: str) -> List[Wager]:
    return (
        db.query(Wager)
        .join(Bet, Bet.id == Wager.bet_id)
        .filter(Wager.user_id == user_id, Bet.group_id == group_id)
        .order_by(Wager.created_at.desc())
        .all()
    )


def get_parlay(db: Session, parlay_id: str) -> Optional[Parlay]:
    return db.query(Parlay).filter(Parlay.id == parlay_id).first()


def get_parlay_for_update(db: Session, parlay_id: str) -> Optional[Parlay]:
    return db.query(Parlay).filter(Parlay.id == parlay_id).with_for_update().populate_existing().first()


def parlays_for_group(db: Session, group_id: str, user_id: Optional[str] = None) -> List[Parlay]:
    query = db.query(Parlay).filter(Parlay.group_id == group_id)
    if user_id is not None:
        query = query.filter(Parlay.user_id == user_id)
    return query.order_by(Parlay.created_at.desc()).all()


def legs_for_bet(db: Session, bet_id: str) -> List[ParlayLeg]:
    return db.query(ParlayLeg).filter(ParlayLeg.bet_id == bet_id).all()


def count_legs_for_bet(db: Session, bet_id: str) -> int:
    return db.query(func.count(ParlayLeg.id)).filter(ParlayLeg.bet_id == bet_id).scalar()


def bet_statuses_for_parlay(db: Session, parlay_id: str) -> dict:
    """Map bet id -> bet status for every leg of a parlay."""
    rows = (
        db.query(ParlayLeg.bet_id, Bet.status)
        .join(Bet, Bet.id == ParlayLeg.bet_id)
        .filter(ParlayLeg.parlay_id == parlay_id)
        .all()
    )
    return {bet_id: status for bet_id, status in rows}
