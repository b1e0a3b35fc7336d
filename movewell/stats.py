# movewell/stats.py
from datetime import date, timedelta
from typing import Any, Dict, Optional

from .ledger import entries_between, find_entry, is_distance_habit
from .models.progress import ProgressEntry
from .streaks import get_streak

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def week_start(day: date) -> date:
    """Monday of ``day``'s week (Sunday belongs to the week before it)."""
    return day - timedelta(days=day.weekday())


def entry_distance(entry: Optional[ProgressEntry]) -> float:
    if entry is None:
        return 0
    return sum(
        h.actual or 0 for h in entry.habits if is_distance_habit(h.title) and h.actual
    )


def day_bucket(day: date, entry: Optional[ProgressEntry]) -> Dict[str, Any]:
    # only workouts count here, not stretches or warmups
    return {
        "date": day.isoformat(),
        "workouts": len(entry.workouts) if entry else 0,
        "habits": len(entry.habits) if entry else 0,
        "minutes": (entry.minutes_exercised or 0) if entry else 0,
        "calories": (entry.calories_burned or 0) if entry else 0,
        "km": entry_distance(entry),
    }


def build_stats(user_id: int, day: date) -> Dict[str, Any]:
    """
    Read-only summary for ``day``: the day's totals, the user's streak and a
    Monday-through-Sunday rollup of the week containing ``day``.
    """
    today_entry = find_entry(user_id, day)
    streak = get_streak(user_id)

    start = week_start(day)
    end = start + timedelta(days=6)
    by_day = {e.day: e for e in entries_between(user_id, start, end)}

    weekly = {}
    for offset, label in enumerate(WEEKDAY_LABELS):
        d = start + timedelta(days=offset)
        weekly[label] = day_bucket(d, by_day.get(d))

    today = {
        "date": day.isoformat(),
        "distance": entry_distance(today_entry),
        "steps": today_entry.steps if today_entry else 0,
        "minutes_exercised": (today_entry.minutes_exercised or 0) if today_entry else 0,
        "calories_burned": (today_entry.calories_burned or 0) if today_entry else 0,
        "workouts_completed": len(today_entry.workouts) if today_entry else 0,
        "habits_completed": len(today_entry.habits) if today_entry else 0,
        "stretches_completed": len(today_entry.stretches) if today_entry else 0,
        "warmups_completed": len(today_entry.warmups) if today_entry else 0,
        "habits": [h.to_dict() for h in today_entry.habits] if today_entry else [],
    }

    return {
        "today": today,
        "streak": {
            "current": streak.current_streak if streak else 0,
            "longest": streak.longest_streak if streak else 0,
            "total_workouts": streak.total_workouts_completed if streak else 0,
            "total_habits": streak.total_habits_completed if streak else 0,
        },
        "weekly": weekly,
    }
