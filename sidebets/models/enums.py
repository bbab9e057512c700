from enum import Enum


class BetStatus(str, Enum):
    OPEN = "open"
    LOCKED = "locked"
    SETTLED = "settled"
    CANCELLED = "cancelled"


class BetResult(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    PUSH = "push"


class MemberRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class MembershipStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TransactionType(str, Enum):
    INITIAL = "initial"
    ADMIN_ADJUSTMENT = "admin_adjustment"
    WAGER_PLACED = "wager_placed"
    WAGER_CANCELLED = "wager_cancelled"
    WAGER_WON = "wager_won"
    WAGER_LOST = "wager_lost"
    BET_CANCELLED = "bet_cancelled"
    PARLAY_PLACED = "parlay_placed"
    PARLAY_CANCELLED = "parlay_cancelled"
    PARLAY_WON = "parlay_won"
    PARLAY_LOST = "parlay_lost"
