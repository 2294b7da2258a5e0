"""
Idempotent seed-скрипт.
Запуск:
  python seed.py --reset           # дропнуть и пересоздать БД + пользователи + демо-расписание
  python seed.py --ensure-users    # создать только Jennifer/Klas (без расписания)
  python seed.py --demo-schedule   # мягко добавить демо-расписание, если подтверждённого ещё нет
  python seed.py                   # пользователи + демо-расписание (idempotent)
"""
from __future__ import annotations
import argparse
import os
from datetime import date, timedelta

from app import create_app
from extensions import db
from config import PARTIES
from models import User, ScheduleEntry

DEFAULT_PASSWORDS = {
    "Jennifer": os.getenv("JENNIFER_PASSWORD", "jennifer"),
    "Klas": os.getenv("KLAS_PASSWORD", "klas"),
}

def get_or_create_user(username: str, password: str) -> tuple[User, bool]:
    """Идемпотентное создание по username; пароль существующего не трогаем."""
    user = User.query.filter_by(username=username).first()
    if user:
        return user, False
    user = User(username=username, is_active_flag=True)
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    return user, True

def ensure_users() -> int:
    created = 0
    for party in PARTIES:
        _, is_new = get_or_create_user(party, DEFAULT_PASSWORDS[party])
        created += int(is_new)
    db.session.commit()
    return created

def seed_demo_schedule(start: date | None = None, weeks: int = 52) -> int:
    """Неделя через неделю, смена по понедельникам. Не трогает непустое расписание."""
    if ScheduleEntry.query.first():
        return 0
    start = start or date.today()
    monday = start - timedelta(days=start.weekday())
    rows = [
        ScheduleEntry(switch_date=monday + timedelta(weeks=i), parent_after=PARTIES[i % 2])
        for i in range(weeks)
    ]
    db.session.add_all(rows)
    db.session.commit()
    return len(rows)

def main():
    ap = argparse.ArgumentParser(description="Seed custody schedule database")
    ap.add_argument("--reset", action="store_true", help="drop & create all tables")
    ap.add_argument("--ensure-users", action="store_true", help="only create the two party users")
    ap.add_argument("--demo-schedule", action="store_true", help="only add demo schedule if empty")
    args = ap.parse_args()

    app = create_app()
    with app.app_context():
        if args.reset:
            db.drop_all()
            db.create_all()
            print("DB reset ✅")
        else:
            db.create_all()

        if args.ensure_users:
            print(f"users created: {ensure_users()}")
            return
        if args.demo_schedule:
            print(f"schedule entries created: {seed_demo_schedule()}")
            return

        print(f"users created: {ensure_users()}")
        print(f"schedule entries created: {seed_demo_schedule()}")

if __name__ == "__main__":
    main()
