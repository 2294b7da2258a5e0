# blueprints/schedule/services.py
from __future__ import annotations
import logging
from datetime import date
from typing import Iterable, List

from extensions import db
from models import ScheduleEntry, DayComment

log = logging.getLogger(__name__)

def list_entries() -> List[ScheduleEntry]:
    return list(ScheduleEntry.query.order_by(ScheduleEntry.switch_date.asc()).all())

def list_day_comments() -> List[DayComment]:
    return list(DayComment.query.order_by(DayComment.date.asc()).all())

def confirmed_payload() -> dict:
    comments = [c.to_dict() for c in list_day_comments()]
    return {
        "schedule": [e.to_dict() for e in list_entries()],
        "day_comments": comments,
        # веб-клиент читает комментарии по этому ключу
        "dayComments": comments,
    }

def replace_schedule(entries: Iterable[tuple[date, str]]) -> int:
    """
    Полная замена подтверждённого расписания: delete-all, затем insert-all.
    Ключ: дата; при дублях побеждает последняя запись. Коммит делает вызывающий.
    """
    by_date: dict[date, str] = {}
    for switch_date, parent_after in entries:
        by_date[switch_date] = parent_after

    ScheduleEntry.query.delete(synchronize_session=False)
    # flush, чтобы DELETE ушёл раньше INSERT-ов (уникальный индекс по дате)
    db.session.flush()
    db.session.add_all([
        ScheduleEntry(switch_date=d, parent_after=p) for d, p in sorted(by_date.items())
    ])
    log.info("confirmed schedule replaced: %d entries", len(by_date))
    return len(by_date)

def replace_day_comments(comments: Iterable[tuple[date, str, str]]) -> int:
    """То же для комментариев к дням: (date, comment, author), не больше одного на дату."""
    by_date: dict[date, tuple[str, str]] = {}
    for d, comment, author in comments:
        by_date[d] = (comment, author)

    DayComment.query.delete(synchronize_session=False)
    db.session.flush()
    db.session.add_all([
        DayComment(date=d, comment=c, author=a) for d, (c, a) in sorted(by_date.items())
    ])
    return len(by_date)
