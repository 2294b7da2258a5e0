from __future__ import annotations
import random
from datetime import date, timedelta
from types import SimpleNamespace

from blueprints.schedule.calendar_logic import (
    calculate_statistics, calendar_days, day_info, default_statistics_range,
    is_switch_day, months_from, parent_for_date,
)

SCHEDULE = [
    {"switch_date": "2024-01-01", "parent_after": "Klas"},
    {"switch_date": "2024-01-08", "parent_after": "Jennifer"},
    {"switch_date": "2024-01-15", "parent_after": "Klas"},
]

def test_no_parent_before_first_switch():
    assert parent_for_date(date(2023, 12, 31), SCHEDULE) is None
    assert parent_for_date(date(2024, 1, 1), []) is None

def test_switch_day_belongs_to_new_parent():
    assert parent_for_date(date(2024, 1, 1), SCHEDULE) == "Klas"
    assert parent_for_date(date(2024, 1, 7), SCHEDULE) == "Klas"
    assert parent_for_date(date(2024, 1, 8), SCHEDULE) == "Jennifer"
    assert parent_for_date(date(2030, 1, 1), SCHEDULE) == "Klas"

def test_unsorted_input_and_mixed_entry_types():
    shuffled = list(reversed(SCHEDULE))
    as_models = [SimpleNamespace(switch_date=date.fromisoformat(e["switch_date"]), parent_after=e["parent_after"])
                 for e in SCHEDULE]
    as_tuples = [(date.fromisoformat(e["switch_date"]), e["parent_after"]) for e in SCHEDULE]
    for d in (date(2024, 1, 3), date(2024, 1, 10), date(2024, 2, 1)):
        expected = parent_for_date(d, SCHEDULE)
        assert parent_for_date(d, shuffled) == expected
        assert parent_for_date(d, as_models) == expected
        assert parent_for_date(d, as_tuples) == expected

def test_duplicate_dates_last_one_wins():
    dup = [(date(2024, 1, 1), "Klas"), (date(2024, 1, 1), "Jennifer")]
    assert parent_for_date(date(2024, 1, 2), dup) == "Jennifer"

def test_resolution_is_pure():
    before = [dict(e) for e in SCHEDULE]
    first = parent_for_date(date(2024, 1, 9), SCHEDULE)
    second = parent_for_date(date(2024, 1, 9), SCHEDULE)
    assert first == second == "Jennifer"
    assert SCHEDULE == before

def test_statistics_even_split():
    stats = calculate_statistics(SCHEDULE, date(2024, 1, 1), date(2024, 1, 14))
    assert stats == {
        "jennifer_days": 7, "klas_days": 7,
        "jennifer_percent": 50, "klas_percent": 50, "total": 14,
    }

def test_statistics_skip_days_without_parent():
    stats = calculate_statistics(SCHEDULE, date(2023, 12, 30), date(2024, 1, 2))
    assert stats["klas_days"] == 2
    assert stats["total"] == 2
    assert stats["klas_percent"] == 100

def test_statistics_rounding_not_corrected():
    d0 = date(2024, 3, 1)
    sched = [(d0, "Jennifer"), (d0 + timedelta(days=1), "Klas")]
    stats = calculate_statistics(sched, d0, d0 + timedelta(days=7))
    # 12.5 -> 13, 87.5 -> 88: в сумме 101, так и должно быть
    assert (stats["jennifer_percent"], stats["klas_percent"]) == (13, 88)

def test_statistics_empty_schedule():
    stats = calculate_statistics([], date(2024, 1, 1), date(2024, 1, 31))
    assert stats["total"] == 0
    assert stats["jennifer_percent"] == 0 and stats["klas_percent"] == 0

def test_statistics_sum_equals_days_with_parent():
    rnd = random.Random(42)
    start, end = date(2024, 1, 1), date(2024, 6, 30)
    for _ in range(20):
        sched = [
            (start + timedelta(days=rnd.randint(-30, 200)), rnd.choice(["Jennifer", "Klas"]))
            for _ in range(rnd.randint(0, 8))
        ]
        stats = calculate_statistics(sched, start, end)
        defined = sum(
            1 for i in range((end - start).days + 1)
            if parent_for_date(start + timedelta(days=i), sched) is not None
        )
        assert stats["jennifer_days"] + stats["klas_days"] == defined == stats["total"]

def test_calendar_grid_starts_on_monday():
    days = calendar_days(2024, 1)  # 1 января 2024: понедельник
    assert len(days) == 42
    assert days[0] == date(2024, 1, 1)

    days = calendar_days(2024, 9)  # 1 сентября 2024: воскресенье
    assert days[0] == date(2024, 8, 26)
    assert days[0].weekday() == 0
    assert date(2024, 9, 30) in days

def test_months_and_default_range():
    assert months_from(date(2024, 11, 5), 3) == [date(2024, 11, 1), date(2024, 12, 1), date(2025, 1, 1)]
    assert default_statistics_range(date(2024, 3, 15)) == (date(2024, 3, 1), date(2025, 2, 28))

def test_day_info():
    comments = [{"date": "2024-01-08", "comment": "Hämtning 17:00", "author": "Klas"}]
    info = day_info(date(2024, 1, 8), 1, SCHEDULE, comments)
    assert info["parent"] == "Jennifer"
    assert info["is_switch"] is True
    assert info["is_current_month"] is True
    assert info["comment"]["author"] == "Klas"
    assert is_switch_day(date(2024, 1, 9), SCHEDULE) is False

def test_grid_and_walk_stop_at_max_date():
    days = calendar_days(9999, 12)
    assert days[0] == date(9999, 11, 29)
    assert days[-1] == date.max
    stats = calculate_statistics([(date(9999, 12, 1), "Klas")], date(9999, 12, 30), date.max)
    assert stats["klas_days"] == 2
    assert calculate_statistics([], date(2024, 1, 2), date(2024, 1, 1))["total"] == 0
