from sidebets.models.group import Group, GroupMembership
from sidebets.models.ledger import LedgerEntry
from sidebets.models.bet import Bet, BetOption
from sidebets.models.wager import Wager
from sidebets.models.parlay import Parlay, ParlayLeg
from sidebets.models.transaction import CreditTransaction

__all__ = [
    "Group",
    "GroupMembership",
    "LedgerEntry",
    "Bet",
    "BetOption",
    "Wager",
    "Parlay",
    "ParlayLeg",
    "CreditTransaction",
]
