# blueprints/schedule/calendar_logic.py
from __future__ import annotations
import math
from calendar import monthrange
from datetime import date, timedelta
from typing import Any, Iterable, List, Optional, Tuple

from config import PARTIES

GRID_DAYS = 42  # 6 недель по 7 дней

def _as_date(v) -> date:
    if isinstance(v, date):
        return v
    return date.fromisoformat(str(v)[:10])

def _entry(e: Any) -> Tuple[date, str]:
    """Запись расписания может быть моделью, dict-ом из JSON или кортежем."""
    if isinstance(e, dict):
        return _as_date(e["switch_date"]), e["parent_after"]
    if isinstance(e, (tuple, list)):
        return _as_date(e[0]), e[1]
    return _as_date(e.switch_date), e.parent_after

def sorted_entries(schedule: Iterable[Any]) -> List[Tuple[date, str]]:
    # стабильная сортировка: при одинаковых датах последняя запись идёт последней
    return sorted((_entry(e) for e in schedule), key=lambda x: x[0])

def parent_for_date(day: date, schedule: Iterable[Any]) -> Optional[str]:
    """
    У кого ребёнок в день `day`: parent_after последней смены с датой <= day.
    Если такой смены нет, None. Список может быть не отсортирован.
    """
    parent = None
    for switch_date, parent_after in sorted_entries(schedule):
        if switch_date <= day:
            parent = parent_after
        else:
            break
    return parent

def is_switch_day(day: date, schedule: Iterable[Any]) -> bool:
    return any(_entry(e)[0] == day for e in schedule)

def calendar_days(year: int, month: int) -> List[date]:
    """
    Сетка месяца для календаря: с понедельника, 42 дня (хвосты соседних месяцев).
    Для декабря 9999 года сетка обрывается на date.max.
    """
    first = date(year, month, 1)
    start = first - timedelta(days=first.weekday())
    days = []
    for i in range(GRID_DAYS):
        try:
            days.append(start + timedelta(days=i))
        except OverflowError:
            break
    return days

def months_from(start: date, count: int) -> List[date]:
    out = []
    y, m = start.year, start.month
    for _ in range(count):
        out.append(date(y, m, 1))
        m += 1
        if m > 12:
            y, m = y + 1, 1
    return out

def default_statistics_range(today: date, months: int = 12) -> Tuple[date, date]:
    """С первого числа текущего месяца до последнего дня `months`-го месяца."""
    last_month = months_from(today, months)[-1]
    return today.replace(day=1), last_month.replace(day=monthrange(last_month.year, last_month.month)[1])

def day_info(day: date, current_month: int, schedule: Iterable[Any], comments: Iterable[dict] = ()) -> dict:
    schedule = list(schedule)
    iso = day.isoformat()
    comment = next((c for c in comments if str(c.get("date")) == iso), None)
    return {
        "date": iso,
        "parent": parent_for_date(day, schedule),
        "is_switch": is_switch_day(day, schedule),
        "is_current_month": day.month == current_month,
        "comment": comment,
    }

def _percent(count: int, total: int) -> int:
    # половина округляется вверх: 12.5 -> 13
    return math.floor(count / total * 100 + 0.5) if total > 0 else 0

def calculate_statistics(schedule: Iterable[Any], start: date, end: date) -> dict:
    """
    Сколько дней в [start, end] у каждой стороны.
    total: только дни с определённой стороной; проценты округляются независимо
    и в сумме могут дать не ровно 100.
    """
    schedule = list(schedule)
    counts = {p: 0 for p in PARTIES}
    for i in range((end - start).days + 1):
        # start + i <= end, за date.max не выходим
        parent = parent_for_date(start + timedelta(days=i), schedule)
        if parent in counts:
            counts[parent] += 1

    jennifer, klas = counts["Jennifer"], counts["Klas"]
    total = jennifer + klas
    return {
        "jennifer_days": jennifer,
        "klas_days": klas,
        "jennifer_percent": _percent(jennifer, total),
        "klas_percent": _percent(klas, total),
        "total": total,
    }
