from datetime import timedelta
from decimal import Decimal

import pytest

from sidebets.core.database import utcnow
from sidebets.core.errors import Forbidden, InsufficientCredits, InvalidState, NotFound, ValidationError
from sidebets.models import CreditTransaction, Wager
from sidebets.services import bet_service, ledger_service, membership_service, queries, wager_service
from tests.conftest import ADMIN, ALICE, BOB, OUTSIDER


def balance(db, group, user):
    b = ledger_service.get_balance(db, user, group.id)
    return b.available, b.allocated


def test_place_wager_snapshots_odds_and_reserves(db, group, make_bet):
    bet = make_bet(odds=(150, -180))
    option = bet.options[0]

    wager = wager_service.place_wager(db, ALICE, option.id, 200)

    assert wager.odds_at_wager == 150
    assert wager.potential_payout == 500
    assert wager.result == "pending"
    assert balance(db, group, ALICE) == (800, 200)

    tx = db.query(CreditTransaction).filter(CreditTransaction.wager_id == wager.id).one()
    assert tx.type == "wager_placed"
    assert tx.amount == -200
    assert tx.bet_id == bet.id


def test_negative_odds_payout(db, group, make_bet):
    bet = make_bet(odds=(-150, 130))
    wager = wager_service.place_wager(db, ALICE, bet.options[0].id, 150)
    assert wager.potential_payout == 250


def test_payout_rounded_to_cents(db, group, make_bet):
    bet = make_bet(odds=(-110, -110))
    wager = wager_service.place_wager(db, ALICE, bet.options[0].id, 10)
    assert wager.potential_payout == Decimal("19.09")


def test_unknown_option(db, group):
    with pytest.raises(NotFound):
        wager_service.place_wager(db, ALICE, "missing-option", 10)


@pytest.mark.parametrize("amount", [0, -5, Decimal("1000000.01")])
def test_stake_bounds(db, group, make_bet, amount):
    bet = make_bet()
    with pytest.raises(ValidationError):
        wager_service.place_wager(db, ALICE, bet.options[0].id, amount)


def test_non_member_cannot_wager(db, group, make_bet):
    bet = make_bet()
    with pytest.raises(Forbidden):
        wager_service.place_wager(db, OUTSIDER, bet.options[0].id, 10)


def test_one_wager_per_bet(db, group, make_bet):
    bet = make_bet()
    wager_service.place_wager(db, ALICE, bet.options[0].id, 10)
    with pytest.raises(InvalidState, match="already have a wager"):
        wager_service.place_wager(db, ALICE, bet.options[1].id, 10)
    assert balance(db, group, ALICE) == (990, 10)


def test_past_lock_time_rejected(db, group, make_bet):
    bet = make_bet(locks_at=utcnow() + timedelta(hours=1))
    later = utcnow() + timedelta(hours=2)
    with pytest.raises(InvalidState, match="closed"):
        wager_service.place_wager(db, ALICE, bet.options[0].id, 10, now=later)
    assert balance(db, group, ALICE) == (1000, 0)


def test_locked_bet_rejects_wagers(db, group, make_bet):
    bet = make_bet()
    bet_service.lock_bet(db, bet.id, ADMIN)
    with pytest.raises(InvalidState, match="no longer open"):
        wager_service.place_wager(db, ALICE, bet.options[0].id, 10)


def test_creator_self_wager_blocked_when_group_disallows(db):
    group = membership_service.create_group(db, ADMIN, "Strict", allow_creator_wagers=False)
    membership_service.admit_member(db, group.id, ALICE, ADMIN)
    options = [bet_service.OptionSpec("Yes", 120), bet_service.OptionSpec("No", -140)]
    bet = bet_service.create_bet(db, ALICE, group.id, "Will it rain?", options)

    with pytest.raises(InvalidState, match="own bets"):
        wager_service.place_wager(db, ALICE, bet.options[0].id, 10)
    # the admin did not create this bet and may wager on it
    wager_service.place_wager(db, ADMIN, bet.options[0].id, 10)


def test_creator_self_wager_allowed_by_default(db, group, make_bet):
    bet = make_bet(creator=ADMIN)
    wager_service.place_wager(db, ADMIN, bet.options[0].id, 10)


def test_insufficient_credits_creates_nothing(db, group, make_bet):
    bet = make_bet()
    with pytest.raises(InsufficientCredits):
        wager_service.place_wager(db, ALICE, bet.options[0].id, 1500)
    assert db.query(Wager).count() == 0
    assert balance(db, group, ALICE) == (1000, 0)


def test_cancel_wager_refunds_and_deletes(db, group, make_bet):
    bet = make_bet()
    wager = wager_service.place_wager(db, ALICE, bet.options[0].id, 200)

    wager_service.cancel_wager(db, ALICE, wager.id)

    assert db.query(Wager).count() == 0
    assert balance(db, group, ALICE) == (1000, 0)
    types = [t.type for t in db.query(CreditTransaction).filter(CreditTransaction.user_id == ALICE)
             .order_by(CreditTransaction.seq)]
    assert types == ["initial", "wager_placed", "wager_cancelled"]
    # a fresh wager is allowed once the old one is gone
    wager_service.place_wager(db, ALICE, bet.options[1].id, 50)


def test_only_owner_cancels(db, group, make_bet):
    bet = make_bet()
    wager = wager_service.place_wager(db, ALICE, bet.options[0].id, 10)
    with pytest.raises(Forbidden):
        wager_service.cancel_wager(db, BOB, wager.id)


def test_cannot_cancel_after_lock(db, group, make_bet):
    bet = make_bet()
    wager = wager_service.place_wager(db, ALICE, bet.options[0].id, 10)
    bet_service.lock_bet(db, bet.id, ADMIN)
    with pytest.raises(InvalidState):
        wager_service.cancel_wager(db, ALICE, wager.id)
    assert balance(db, group, ALICE) == (990, 10)


def test_list_my_wagers_scoped_to_group(db, group, make_bet):
    bet = make_bet()
    wager_service.place_wager(db, ALICE, bet.options[0].id, 10)
    wager_service.place_wager(db, BOB, bet.options[1].id, 10)
    mine = wager_service.list_my_wagers(db, ALICE, group.id)
    assert [w.user_id for w in mine] == [ALICE]


def test_place_wager_locks_the_bet(db, group, make_bet, monkeypatch):
    bet = make_bet()
    locked = []
    real = queries.get_bet_for_update

    def _recording(session, bet_id):
        locked.append(bet_id)
        return real(session, bet_id)

    monkeypatch.setattr(queries, "get_bet_for_update", _recording)
    wager_service.place_wager(db, ALICE, bet.options[0].id, 10)
    assert locked == [bet.id]
