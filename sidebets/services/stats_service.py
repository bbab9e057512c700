from dataclasses import dataclass
from decimal import Decimal
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from sidebets.core.errors import ValidationError
from sidebets.models import Bet, Group, GroupMembership, Parlay, Wager
from sidebets.models.enums import BetStatus, MembershipStatus
from sidebets.services import ledger_service, membership_service, queries


@dataclass
class LeaderboardRow:
    user_id: str
    available_balance: Decimal
    allocated_balance: Decimal
    total_balance: Decimal


def leaderboard(db: Session, group_id: str, actor_id: str) -> List[LeaderboardRow]:
    membership_service.verify_membership(db, actor_id, group_id)
    rows = [
        LeaderboardRow(
            user_id=entry.user_id,
            available_balance=Decimal(entry.available_balance),
            allocated_balance=Decimal(entry.allocated_balance),
            total_balance=Decimal(entry.available_balance) + Decimal(entry.allocated_balance),
        )
        for entry in queries.ledger_entries_for_group(db, group_id)
    ]
    rows.sort(key=lambda r: r.total_balance, reverse=True)
    return rows


def transaction_history(db: Session, group_id: str, user_id: str, limit: int = 50, offset: int = 0):
    if not 1 <= limit <= 100:
        raise ValidationError("Limit must be between 1 and 100")
    if offset < 0:
        raise ValidationError("Offset cannot be negative")
    membership_service.verify_membership(db, user_id, group_id)
    return queries.transactions_for_member(db, user_id, group_id, limit=limit, offset=offset)


def reconcile_member(db: Session, group_id: str, user_id: str, actor_id: str):
    if actor_id == user_id:
        membership_service.verify_membership(db, actor_id, group_id)
    else:
        membership_service.verify_admin(db, actor_id, group_id)
    return ledger_service.reconcile(db, user_id, group_id)


def platform_summary(db: Session) -> dict:
    bet_stats = {status.value: 0 for status in BetStatus}
    bet_stats["total"] = 0
    for status, count in db.query(Bet.status, func.count(Bet.id)).group_by(Bet.status).all():
        bet_stats[status] = count
        bet_stats["total"] += count

    total_wagered = db.query(func.coalesce(func.sum(Wager.amount), 0)).scalar()
    return {
        "groups": db.query(func.count(Group.id)).scalar(),
        "memberships": (
            db.query(func.count())
            .select_from(GroupMembership)
            .filter(GroupMembership.status == MembershipStatus.APPROVED.value)
            .scalar()
        ),
        "bets": bet_stats,
        "wagers": db.query(func.count(Wager.id)).scalar(),
        "parlays": db.query(func.count(Parlay.id)).scalar(),
        "total_wagered": Decimal(total_wagered).quantize(Decimal("0.01")),
    }
