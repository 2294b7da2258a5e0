from __future__ import annotations
from datetime import date
import pytest

from app import create_app, _seed_from_config
from extensions import db
from models import User, ScheduleEntry
from seed import ensure_users, get_or_create_user, seed_demo_schedule
from scripts.dump_api_routes import collect

@pytest.fixture()
def app():
    app = create_app("test")
    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()

def test_ensure_users_is_idempotent(app):
    assert ensure_users() == 2
    assert ensure_users() == 0
    assert {u.username for u in User.query.all()} == {"Jennifer", "Klas"}

def test_get_or_create_keeps_existing_password(app):
    user, created = get_or_create_user("Klas", "first")
    assert created
    same, created = get_or_create_user("Klas", "second")
    assert not created and same.id == user.id
    assert same.check_password("first")

def test_demo_schedule_alternates_on_mondays(app):
    n = seed_demo_schedule(start=date(2024, 1, 3), weeks=4)
    assert n == 4
    rows = ScheduleEntry.query.order_by(ScheduleEntry.switch_date).all()
    assert rows[0].switch_date == date(2024, 1, 1)
    assert all(r.switch_date.weekday() == 0 for r in rows)
    assert [r.parent_after for r in rows] == ["Jennifer", "Klas", "Jennifer", "Klas"]
    # непустое расписание не трогаем
    assert seed_demo_schedule(start=date(2025, 1, 1)) == 0

def test_seed_from_config(app):
    app.config.update(SEED_TEST_DATA=True, DEFAULT_USERS=[{"username": "Jennifer", "password": "x"}])
    _seed_from_config(app)
    _seed_from_config(app)
    assert User.query.filter_by(username="Jennifer").count() == 1
    assert User.query.filter_by(username="Jennifer").first().check_password("x")

def test_route_dump_lists_api(app):
    urls = {r["url"] for r in collect(app)}
    assert {"/health", "/api/login", "/api/schedule", "/api/proposal", "/api/proposals"} <= urls
    assert "/api/calendar/<int:year>/<int:month>" in urls
