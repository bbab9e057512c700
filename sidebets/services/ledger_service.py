"""Per (user, group) credit ledger.

Each entry holds two buckets: ``available`` (spendable) and ``allocated``
(held against open wagers and parlays). Every mutation below reads the entry
under a row lock, computes the new balances, writes them and appends exactly
one ``CreditTransaction`` row. None of these functions commit; they run
inside the caller's ``transaction(db)`` so the ledger write and the caller's
own changes (a new wager, a settled bet) land together or not at all.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from sidebets.core.database import utcnow
from sidebets.core.errors import Conflict, InsufficientCredits, NoCreditsInGroup, ValidationError
from sidebets.models import CreditTransaction, LedgerEntry
from sidebets.models.enums import TransactionType
from sidebets.services import queries
from sidebets.services.odds import to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

_RESERVE_TYPES = {TransactionType.WAGER_PLACED, TransactionType.PARLAY_PLACED}
_RELEASE_TYPES = {TransactionType.WAGER_CANCELLED, TransactionType.PARLAY_CANCELLED}
_WIN_TYPES = {TransactionType.WAGER_WON, TransactionType.PARLAY_WON}
_LOSS_TYPES = {TransactionType.WAGER_LOST, TransactionType.PARLAY_LOST}
_PUSH_TYPES = {TransactionType.BET_CANCELLED, TransactionType.PARLAY_CANCELLED}


@dataclass
class Balance:
    available: Decimal
    allocated: Decimal

    @property
    def total(self) -> Decimal:
        return self.available + self.allocated


@dataclass
class LedgerRef:
    """What caused a ledger mutation; copied onto the transaction row."""
    wager_id: Optional[str] = None
    bet_id: Optional[str] = None
    parlay_id: Optional[str] = None
    note: Optional[str] = None


@dataclass
class ReconciliationReport:
    user_id: str
    group_id: str
    transaction_count: int
    available: Decimal
    allocated: Decimal
    issues: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def _positive(amount, label: str = "Amount") -> Decimal:
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError(f"{label} must be positive")
    return amount


def _check_kind(kind: TransactionType, allowed: set, operation: str):
    if kind not in allowed:
        raise ValueError(f"{kind} is not a valid transaction type for {operation}")


def _locked_entry(db: Session, user_id: str, group_id: str) -> LedgerEntry:
    entry = queries.get_ledger_entry_for_update(db, user_id, group_id)
    if entry is None:
        raise NoCreditsInGroup()
    return entry


def _apply(
    db: Session,
    entry: LedgerEntry,
    kind: TransactionType,
    amount: Decimal,
    new_available: Decimal,
    new_allocated: Decimal,
    ref: Optional[LedgerRef] = None,
    adjusted_by: Optional[str] = None,
) -> CreditTransaction:
    if new_available < 0 or new_allocated < 0:
        # a ledger that would go negative here is corrupt, not short on funds
        raise Conflict(
            f"Ledger for user {entry.user_id} in group {entry.group_id} would go negative "
            f"(available {new_available:.2f}, allocated {new_allocated:.2f})"
        )

    ref = ref or LedgerRef()
    entry.available_balance = to_money(new_available)
    entry.allocated_balance = to_money(new_allocated)
    entry.updated_at = utcnow()

    tx = CreditTransaction(
        user_id=entry.user_id,
        group_id=entry.group_id,
        seq=queries.last_transaction_seq(db, entry.user_id, entry.group_id) + 1,
        type=kind.value,
        amount=to_money(amount),
        balance_after=entry.available_balance,
        allocated_after=entry.allocated_balance,
        wager_id=ref.wager_id,
        bet_id=ref.bet_id,
        parlay_id=ref.parlay_id,
        adjusted_by_user_id=adjusted_by,
        note=ref.note,
    )
    db.add(tx)
    db.flush()

    logger.info(
        "ledger %s user=%s group=%s amount=%s available=%s allocated=%s",
        kind.value, entry.user_id, entry.group_id, tx.amount,
        entry.available_balance, entry.allocated_balance,
    )
    return tx


def get_balance(db: Session, user_id: str, group_id: str) -> Balance:
    entry = queries.get_ledger_entry(db, user_id, group_id)
    if entry is None:
        return Balance(available=ZERO, allocated=ZERO)
    return Balance(available=Decimal(entry.available_balance), allocated=Decimal(entry.allocated_balance))


def initialize(db: Session, user_id: str, group_id: str, amount) -> CreditTransaction:
    amount = to_money(amount)
    if amount < 0:
        raise ValidationError("Initial credits cannot be negative")
    if queries.get_ledger_entry(db, user_id, group_id) is not None:
        raise Conflict("Credits for this member are already initialized")

    entry = LedgerEntry(user_id=user_id, group_id=group_id, available_balance=ZERO, allocated_balance=ZERO)
    db.add(entry)
    db.flush()
    return _apply(
        db, entry, TransactionType.INITIAL, amount, amount, ZERO,
        LedgerRef(note="Initial credits"),
    )


def reserve(db: Session, user_id: str, group_id: str, amount, kind: TransactionType, ref: Optional[LedgerRef] = None):
    _check_kind(kind, _RESERVE_TYPES, "reserve")
    amount = _positive(amount, "Stake")
    entry = _locked_entry(db, user_id, group_id)
    available = Decimal(entry.available_balance)
    if available < amount:
        raise InsufficientCredits(available=available, required=amount)
    return _apply(db, entry, kind, -amount, available - amount, Decimal(entry.allocated_balance) + amount, ref)


def release(db: Session, user_id: str, group_id: str, amount, kind: TransactionType, ref: Optional[LedgerRef] = None):
    _check_kind(kind, _RELEASE_TYPES, "release")
    return _return_stake(db, user_id, group_id, amount, kind, ref)


def settle_push(db: Session, user_id: str, group_id: str, stake, kind: TransactionType, ref: Optional[LedgerRef] = None):
    _check_kind(kind, _PUSH_TYPES, "settle_push")
    return _return_stake(db, user_id, group_id, stake, kind, ref)


def _return_stake(db, user_id, group_id, amount, kind, ref):
    amount = _positive(amount, "Stake")
    entry = _locked_entry(db, user_id, group_id)
    return _apply(
        db, entry, kind, amount,
        Decimal(entry.available_balance) + amount,
        Decimal(entry.allocated_balance) - amount,
        ref,
    )


def settle_win(db: Session, user_id: str, group_id: str, stake, payout, kind: TransactionType, ref: Optional[LedgerRef] = None):
    """Release the stake and credit the full payout (stake included)."""
    _check_kind(kind, _WIN_TYPES, "settle_win")
    stake = _positive(stake, "Stake")
    payout = _positive(payout, "Payout")
    entry = _locked_entry(db, user_id, group_id)
    return _apply(
        db, entry, kind, payout,
        Decimal(entry.available_balance) + payout,
        Decimal(entry.allocated_balance) - stake,
        ref,
    )


def settle_loss(db: Session, user_id: str, group_id: str, stake, kind: TransactionType, ref: Optional[LedgerRef] = None):
    _check_kind(kind, _LOSS_TYPES, "settle_loss")
    stake = _positive(stake, "Stake")
    entry = _locked_entry(db, user_id, group_id)
    return _apply(
        db, entry, kind, -stake,
        Decimal(entry.available_balance),
        Decimal(entry.allocated_balance) - stake,
        ref,
    )


def admin_adjust(db: Session, user_id: str, group_id: str, signed_amount, note: Optional[str], adjusted_by: str):
    amount = to_money(signed_amount)
    if amount == 0:
        raise ValidationError("Amount cannot be zero")
    entry = _locked_entry(db, user_id, group_id)
    available = Decimal(entry.available_balance)
    if available + amount < 0:
        raise ValidationError(f"Cannot reduce credits below 0. Current available: {available:.2f}")
    return _apply(
        db, entry, TransactionType.ADMIN_ADJUSTMENT, amount,
        available + amount, Decimal(entry.allocated_balance),
        LedgerRef(note=note), adjusted_by=adjusted_by,
    )


def reconcile(db: Session, user_id: str, group_id: str) -> ReconciliationReport:
    """Replay the full history of a member and compare it with the stored entry.

    Every row must move the buckets the way its type says it does, and the
    last row's snapshot must match the current balances.
    """
    history = queries.transactions_for_member(db, user_id, group_id, newest_first=False)
    entry = queries.get_ledger_entry(db, user_id, group_id)
    current = get_balance(db, user_id, group_id)
    report = ReconciliationReport(
        user_id=user_id,
        group_id=group_id,
        transaction_count=len(history),
        available=current.available,
        allocated=current.allocated,
    )

    if entry is None:
        if history:
            report.issues.append("Transactions exist but the ledger entry is missing")
        return report
    if not history:
        report.issues.append("Ledger entry has no transaction history")
        return report

    prev_available = prev_allocated = None
    for expected_seq, tx in enumerate(history, start=1):
        label = f"#{tx.seq} {tx.type}"
        if tx.seq != expected_seq:
            report.issues.append(f"{label}: expected sequence {expected_seq}")
        amount = Decimal(tx.amount)
        available = Decimal(tx.balance_after)
        allocated = Decimal(tx.allocated_after)
        kind = TransactionType(tx.type)

        if prev_available is None:
            if kind != TransactionType.INITIAL:
                report.issues.append(f"{label}: history must start with an initial transaction")
            elif available != amount or allocated != 0:
                report.issues.append(f"{label}: initial snapshot does not match amount")
        else:
            d_available = available - prev_available
            d_allocated = allocated - prev_allocated
            problem = _check_deltas(kind, amount, d_available, d_allocated)
            if problem:
                report.issues.append(f"{label}: {problem}")

        prev_available, prev_allocated = available, allocated

    if prev_available != current.available or prev_allocated != current.allocated:
        report.issues.append(
            f"Stored balance {current.available:.2f}/{current.allocated:.2f} differs from "
            f"history {prev_available:.2f}/{prev_allocated:.2f}"
        )
    return report


def _check_deltas(kind: TransactionType, amount: Decimal, d_available: Decimal, d_allocated: Decimal) -> Optional[str]:
    if kind == TransactionType.INITIAL:
        return "duplicate initial transaction"
    if kind == TransactionType.ADMIN_ADJUSTMENT:
        ok = d_available == amount and d_allocated == 0
    elif kind in _RESERVE_TYPES:
        ok = amount < 0 and d_available == amount and d_allocated == -amount
    elif kind in _RELEASE_TYPES or kind in _PUSH_TYPES:
        ok = amount > 0 and d_available == amount and d_allocated == -amount
    elif kind in _WIN_TYPES:
        # the released stake is not on the row, only that something was released
        ok = amount > 0 and d_available == amount and d_allocated < 0
    elif kind in _LOSS_TYPES:
        ok = amount < 0 and d_available == 0 and d_allocated == amount
    else:
        return f"unknown transaction type {kind}"
    if ok:
        return None
    return f"moved available by {d_available:.2f} and allocated by {d_allocated:.2f} for amount {amount:.2f}"
