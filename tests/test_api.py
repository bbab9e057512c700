from decimal import Decimal

from tests.conftest import ADMIN, ALICE, BOB, OUTSIDER, auth_headers


def _create_group(client, owner=ADMIN, **extra):
    resp = client.post("/groups/", json={"name": "Office Pool", **extra}, headers=auth_headers(owner))
    assert resp.status_code == 201, resp.text
    return resp.json()


def _admit(client, group_id, user, by=ADMIN):
    resp = client.post(f"/groups/{group_id}/members", json={"user_id": user}, headers=auth_headers(by))
    assert resp.status_code == 201, resp.text
    return resp.json()


def _create_bet(client, group_id, odds=(150, -180), owner=ADMIN):
    payload = {
        "group_id": group_id,
        "title": "Derby",
        "options": [{"name": f"Pick {i}", "american_odds": o} for i, o in enumerate(odds)],
    }
    resp = client.post("/bets/", json=payload, headers=auth_headers(owner))
    assert resp.status_code == 201, resp.text
    return resp.json()


def _credits(client, group_id, user):
    resp = client.get(f"/credits/{group_id}", headers=auth_headers(user))
    assert resp.status_code == 200, resp.text
    body = resp.json()
    return Decimal(body["available_balance"]), Decimal(body["allocated_balance"])


def test_requires_token(client):
    assert client.get("/credits/anything").status_code == 401
    resp = client.get("/credits/anything", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_wager_flow_end_to_end(client):
    group = _create_group(client)
    assert Decimal(group["default_credits"]) == 1000
    _admit(client, group["id"], ALICE)
    bet = _create_bet(client, group["id"])

    resp = client.post("/wagers/", json={"option_id": bet["options"][0]["id"], "amount": "200"},
                       headers=auth_headers(ALICE))
    assert resp.status_code == 201, resp.text
    wager = resp.json()
    assert Decimal(wager["potential_payout"]) == 500
    assert _credits(client, group["id"], ALICE) == (800, 200)

    resp = client.post(f"/bets/{bet['id']}/settle", json={"winning_option_id": bet["options"][0]["id"]},
                       headers=auth_headers(ADMIN))
    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == "settled"
    assert _credits(client, group["id"], ALICE) == (1300, 0)

    resp = client.post(f"/bets/{bet['id']}/settle", json={"winning_option_id": bet["options"][0]["id"]},
                       headers=auth_headers(ADMIN))
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_state"
    assert _credits(client, group["id"], ALICE) == (1300, 0)

    history = client.get(f"/credits/{group['id']}/transactions", headers=auth_headers(ALICE)).json()
    assert [tx["type"] for tx in history] == ["wager_won", "wager_placed", "initial"]

    report = client.get(f"/credits/{group['id']}/reconcile", headers=auth_headers(ALICE)).json()
    assert report["ok"] is True
    assert report["transaction_count"] == 3


def test_error_mapping(client):
    group = _create_group(client, default_credits=100)
    _admit(client, group["id"], ALICE)
    bet = _create_bet(client, group["id"])

    resp = client.post("/wagers/", json={"option_id": bet["options"][0]["id"], "amount": "500"},
                       headers=auth_headers(ALICE))
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "insufficient_credits"
    assert "100.00" in body["detail"] and "500.00" in body["detail"]

    resp = client.post("/wagers/", json={"option_id": "missing", "amount": "5"}, headers=auth_headers(ALICE))
    assert resp.status_code == 404

    resp = client.get(f"/bets/{bet['id']}", headers=auth_headers(OUTSIDER))
    assert resp.status_code == 403
    assert resp.json()["error"] == "forbidden"

    payload = {"group_id": group["id"], "title": "Bad", "options": [{"name": "a", "american_odds": 50},
                                                                  {"name": "b", "american_odds": 120}]}
    resp = client.post("/bets/", json=payload, headers=auth_headers(ADMIN))
    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"

    resp = client.post(f"/groups/{group['id']}/members", json={"user_id": ALICE}, headers=auth_headers(ADMIN))
    assert resp.status_code == 409


def test_parlay_endpoints(client):
    group = _create_group(client)
    _admit(client, group["id"], ALICE)
    b1 = _create_bet(client, group["id"], odds=(100, 100))
    b2 = _create_bet(client, group["id"], odds=(100, 100))

    payload = {
        "group_id": group["id"],
        "amount": "50",
        "legs": [
            {"bet_id": b1["id"], "option_id": b1["options"][0]["id"]},
            {"bet_id": b2["id"], "option_id": b2["options"][0]["id"]},
        ],
    }
    resp = client.post("/parlays/", json=payload, headers=auth_headers(ALICE))
    assert resp.status_code == 201, resp.text
    parlay = resp.json()
    assert Decimal(parlay["potential_payout"]) == 200
    assert parlay["american_odds"] == 300
    assert len(parlay["legs"]) == 2

    for bet in (b1, b2):
        resp = client.post(f"/bets/{bet['id']}/settle", json={"winning_option_id": bet["options"][0]["id"]},
                           headers=auth_headers(ADMIN))
        assert resp.status_code == 200, resp.text

    resp = client.get(f"/parlays/{parlay['id']}", headers=auth_headers(ALICE))
    assert resp.json()["result"] == "won"
    assert _credits(client, group["id"], ALICE) == (1150, 0)

    mine = client.get(f"/parlays/group/{group['id']}/mine", headers=auth_headers(ALICE)).json()
    assert [p["id"] for p in mine] == [parlay["id"]]


def test_cancel_endpoints(client):
    group = _create_group(client)
    _admit(client, group["id"], ALICE)
    bet = _create_bet(client, group["id"])

    wager = client.post("/wagers/", json={"option_id": bet["options"][1]["id"], "amount": "90"},
                        headers=auth_headers(ALICE)).json()
    assert client.delete(f"/wagers/{wager['id']}", headers=auth_headers(ADMIN)).status_code == 403
    assert client.delete(f"/wagers/{wager['id']}", headers=auth_headers(ALICE)).status_code == 204
    assert _credits(client, group["id"], ALICE) == (1000, 0)

    assert client.post(f"/bets/{bet['id']}/lock", headers=auth_headers(ALICE)).status_code == 403
    assert client.post(f"/bets/{bet['id']}/lock", headers=auth_headers(ADMIN)).json()["status"] == "locked"
    assert client.post(f"/bets/{bet['id']}/cancel", headers=auth_headers(ADMIN)).json()["status"] == "cancelled"


def test_admin_adjust_and_leaderboard(client):
    group = _create_group(client)
    _admit(client, group["id"], ALICE)
    _admit(client, group["id"], BOB)

    resp = client.post(f"/credits/{group['id']}/adjust", json={"target_user_id": BOB, "amount": "250", "note": "bonus"},
                       headers=auth_headers(ADMIN))
    assert resp.status_code == 200, resp.text
    assert resp.json()["type"] == "admin_adjustment"

    resp = client.post(f"/credits/{group['id']}/adjust", json={"target_user_id": ALICE, "amount": "-2000"},
                       headers=auth_headers(ADMIN))
    assert resp.status_code == 422

    resp = client.post(f"/credits/{group['id']}/adjust", json={"target_user_id": BOB, "amount": "5"},
                       headers=auth_headers(ALICE))
    assert resp.status_code == 403

    board = client.get(f"/credits/{group['id']}/leaderboard", headers=auth_headers(ALICE)).json()
    assert board[0]["user_id"] == BOB
    assert Decimal(board[0]["total_balance"]) == 1250

    summary = client.get("/stats/summary").json()
    assert summary["groups"] == 1
    assert summary["memberships"] == 3


def test_voided_parlay_is_still_readable(client):
    group = _create_group(client)
    _admit(client, group["id"], ALICE)
    b1 = _create_bet(client, group["id"], odds=(100, 100))
    b2 = _create_bet(client, group["id"], odds=(100, 100))
    payload = {
        "group_id": group["id"],
        "amount": "50",
        "legs": [
            {"bet_id": b1["id"], "option_id": b1["options"][0]["id"]},
            {"bet_id": b2["id"], "option_id": b2["options"][0]["id"]},
        ],
    }
    parlay = client.post("/parlays/", json=payload, headers=auth_headers(ALICE)).json()

    for bet in (b1, b2):
        resp = client.post(f"/bets/{bet['id']}/cancel", headers=auth_headers(ADMIN))
        assert resp.status_code == 200, resp.text

    resp = client.get(f"/parlays/{parlay['id']}", headers=auth_headers(ALICE))
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["result"] == "push"
    assert body["american_odds"] is None
    assert Decimal(body["potential_payout"]) == 50
    assert [leg["result"] for leg in body["legs"]] == ["push", "push"]

    for path in (f"/parlays/group/{group['id']}", f"/parlays/group/{group['id']}/mine"):
        resp = client.get(path, headers=auth_headers(ALICE))
        assert resp.status_code == 200, resp.text
        assert [p["id"] for p in resp.json()] == [parlay["id"]]

    assert _credits(client, group["id"], ALICE) == (1000, 0)
