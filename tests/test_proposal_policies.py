# tests/test_proposal_policies.py
from __future__ import annotations
from datetime import date
import pytest

from app import create_app
from config import TestConfig
from extensions import db
from models import User, ScheduleEntry, Proposal
from blueprints.auth.routes import reset_rate_limit
from blueprints.proposal.policies import BILATERAL, DUEL, SINGLE, get_policy

DRAFT = [{"switch_date": "2024-05-06", "parent_after": "Jennifer"}]

def make_app(policy: str):
    app = create_app("test")
    app.config.update(CONSENT_POLICY=policy)
    with app.app_context():
        db.create_all()
        for name, pw in (("Jennifer", "jpass"), ("Klas", "kpass")):
            u = User(username=name, is_active_flag=True)
            u.set_password(pw)
            db.session.add(u)
        db.session.add(ScheduleEntry(switch_date=date(2024, 1, 1), parent_after="Klas"))
        db.session.commit()
    reset_rate_limit()
    return app

def login(client, username, password):
    r = client.post("/api/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.get_json()
    return {"Authorization": f"Bearer {r.get_json()['token']}"}

def act(client, headers, action, **fields):
    return client.put("/api/proposal", json={"action": action, **fields}, headers=headers)

def _schedule(client, headers):
    rows = client.get("/api/schedule", headers=headers).get_json()["schedule"]
    return [(e["switch_date"], e["parent_after"]) for e in rows]


# ---------- выбор политики ----------
def test_get_policy_lookup():
    assert get_policy("single") is SINGLE
    assert get_policy(" Bilateral ") is BILATERAL
    assert get_policy("DUEL") is DUEL
    with pytest.raises(ValueError):
        get_policy("majority")

def test_unknown_policy_fails_at_startup(monkeypatch):
    monkeypatch.setattr(TestConfig, "CONSENT_POLICY", "nope")
    with pytest.raises(ValueError):
        create_app("test")

def test_policy_shape():
    assert SINGLE.shared and BILATERAL.shared and not DUEL.shared
    assert SINGLE.approvals_required == 1
    assert BILATERAL.approvals_required == 2
    assert "send" in DUEL.actions and "create" not in DUEL.actions


# ---------- single ----------
@pytest.fixture()
def single_client():
    app = make_app("single")
    yield app.test_client()
    with app.app_context():
        db.drop_all()

def test_single_accept_merges_immediately(single_client):
    c = single_client
    jen = login(c, "Jennifer", "jpass")
    assert act(c, jen, "create").status_code == 200
    act(c, jen, "update_schedule", schedule_data=DRAFT)
    r = act(c, jen, "accept")
    assert r.status_code == 200
    assert r.get_json()["merged"] is True
    assert _schedule(c, jen) == [("2024-05-06", "Jennifer")]
    assert c.get("/api/proposal", headers=jen).get_json()["policy"] == "single"


# ---------- duel ----------
@pytest.fixture()
def duel():
    app = make_app("duel")
    c = app.test_client()
    yield app, c, login(c, "Jennifer", "jpass"), login(c, "Klas", "kpass")
    with app.app_context():
        db.drop_all()

def _rows(client, headers):
    js = client.get("/api/proposal", headers=headers).get_json()
    assert js["policy"] == "duel"
    return {p["owner"]: p for p in js["proposals"]}

def test_duel_initial_state(duel):
    _, c, jen, _ = duel
    rows = _rows(c, jen)
    assert set(rows) == {"Jennifer", "Klas"}
    assert rows["Jennifer"]["is_active"] is False
    assert rows["Klas"]["schedule_data"] is None

def test_duel_owner_required(duel):
    _, c, jen, _ = duel
    r = act(c, jen, "activate")
    assert r.status_code == 400
    assert r.get_json()["error"] == "owner required"

def test_duel_ownership_rules(duel):
    _, c, jen, klas = duel
    assert act(c, jen, "activate", owner="Jennifer").status_code == 200

    r = act(c, klas, "update_schedule", owner="Jennifer", schedule_data=DRAFT)
    assert r.status_code == 403
    assert r.get_json()["error"] == "Can only modify your own proposal"

    r = act(c, jen, "respond", owner="Jennifer")
    assert r.status_code == 403
    assert r.get_json()["error"] == "Can only respond to other person's proposal"

    r = act(c, jen, "accept", owner="Jennifer")
    assert r.status_code == 403

def test_duel_inactive_draft_rejects_edits(duel):
    _, c, jen, _ = duel
    r = act(c, jen, "update_schedule", owner="Jennifer", schedule_data=DRAFT)
    assert r.status_code == 400
    assert r.get_json()["error"] == "Proposal is not active"
    r = act(c, jen, "copy_from_other", owner="Jennifer")
    assert r.status_code == 400
    assert r.get_json()["error"] == "Proposal has no data"

def test_duel_unsent_draft_is_hidden_and_cannot_be_accepted(duel):
    _, c, jen, klas = duel
    act(c, jen, "activate", owner="Jennifer")
    act(c, jen, "update_schedule", owner="Jennifer", schedule_data=DRAFT)

    assert _rows(c, jen)["Jennifer"]["schedule_data"] == DRAFT
    assert _rows(c, klas)["Jennifer"]["schedule_data"] is None

    r = act(c, klas, "accept", owner="Jennifer")
    assert r.status_code == 400
    assert r.get_json()["error"] == "Proposal has not been sent"

def test_duel_send_respond_accept(duel):
    app, c, jen, klas = duel
    act(c, jen, "activate", owner="Jennifer")
    act(c, jen, "update_schedule", owner="Jennifer", schedule_data=DRAFT)
    act(c, jen, "add_comment", owner="Jennifer", comment="Maj enligt önskemål")
    assert act(c, jen, "send", owner="Jennifer").status_code == 200

    seen = _rows(c, klas)["Jennifer"]
    assert seen["is_sent"] is True
    assert seen["schedule_data"] == DRAFT
    assert [cm["comment"] for cm in seen["comments"]] == ["Maj enligt önskemål"]

    # Klas берёт черновик Jennifer за основу своего
    r = act(c, klas, "respond", owner="Jennifer")
    assert r.status_code == 200
    mine = _rows(c, klas)["Klas"]
    assert mine["is_active"] is True and mine["is_sent"] is False
    assert mine["schedule_data"] == DRAFT

    r = act(c, klas, "accept", owner="Jennifer")
    assert r.status_code == 200
    assert r.get_json()["merged"] is True
    assert _schedule(c, jen) == [("2024-05-06", "Jennifer")]

    rows = _rows(c, jen)
    for owner in ("Jennifer", "Klas"):
        assert rows[owner]["is_active"] is False
        assert rows[owner]["is_sent"] is False
    with app.app_context():
        assert all(not p.entries for p in Proposal.query.all())

def test_duel_copy_helpers(duel):
    _, c, jen, klas = duel
    act(c, klas, "activate", owner="Klas")
    act(c, klas, "update_schedule", owner="Klas", schedule_data=DRAFT)

    act(c, jen, "activate", owner="Jennifer")
    assert act(c, jen, "copy_from_other", owner="Jennifer").status_code == 200
    assert _rows(c, jen)["Jennifer"]["schedule_data"] == DRAFT

    assert act(c, jen, "copy_from_confirmed", owner="Jennifer").status_code == 200
    assert _rows(c, jen)["Jennifer"]["schedule_data"] == [
        {"switch_date": "2024-01-01", "parent_after": "Klas"},
    ]

    assert act(c, klas, "deactivate", owner="Klas").status_code == 200
    assert _rows(c, klas)["Klas"]["is_active"] is False

def test_duel_proposal_view(duel):
    _, c, jen, klas = duel
    act(c, jen, "activate", owner="Jennifer")
    act(c, jen, "update_schedule", owner="Jennifer", schedule_data=DRAFT)

    may = c.get("/api/calendar/2024/5?view=proposal", headers=jen).get_json()
    day = next(d for d in may["days"] if d["date"] == "2024-05-10")
    assert day["parent"] == "Jennifer"
    # у Klas своего черновика нет: видит подтверждённое
    may = c.get("/api/calendar/2024/5?view=proposal", headers=klas).get_json()
    day = next(d for d in may["days"] if d["date"] == "2024-05-10")
    assert day["parent"] == "Klas"

def test_shared_actions_unknown_in_duel(duel):
    _, c, jen, _ = duel
    r = act(c, jen, "create", owner="Jennifer")
    assert r.status_code == 400
    assert r.get_json()["error"] == "Unknown action"

def test_duel_comment_on_other_draft_requires_send(duel):
    _, c, jen, klas = duel
    act(c, jen, "activate", owner="Jennifer")

    r = act(c, klas, "add_comment", owner="Jennifer", comment="Hur blir påsken?")
    assert r.status_code == 400
    assert r.get_json()["error"] == "Proposal has not been sent"
    assert act(c, jen, "add_comment", owner="Jennifer", comment="utkast").status_code == 200

    act(c, jen, "send", owner="Jennifer")
    assert act(c, klas, "add_comment", owner="Jennifer", comment="Hur blir påsken?").status_code == 200
    comments = _rows(c, klas)["Jennifer"]["comments"]
    assert [(cm["author"], cm["comment"]) for cm in comments] == [
        ("Jennifer", "utkast"), ("Klas", "Hur blir påsken?"),
    ]
