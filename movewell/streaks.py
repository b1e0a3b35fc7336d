# movewell/streaks.py
from datetime import date
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from . import db
from .days import previous_day, utc_today
from .errors import StreakConflictError
from .models.progress import HABIT
from .models.streak import StreakRecord


def get_streak(user_id: int) -> Optional[StreakRecord]:
    return db.session.get(StreakRecord, user_id)


def advance_streak(record: StreakRecord, today: date, kind: str) -> None:
    """
    Apply one qualifying activity on ``today`` to ``record``.

    Same-day repeats leave the streak alone; the day after the last activity
    extends it; anything else starts a new streak of 1. Totals always move.
    """
    last = record.last_activity_date
    current = record.current_streak or 0

    if last != today:
        if last is not None and last == previous_day(today):
            current += 1
        else:
            current = 1
        record.current_streak = current
        record.longest_streak = max(record.longest_streak or 0, current)
        record.last_activity_date = today

    if kind == HABIT:
        record.total_habits_completed = (record.total_habits_completed or 0) + 1
    else:
        record.total_workouts_completed = (record.total_workouts_completed or 0) + 1


def _get_or_create(user_id: int) -> StreakRecord:
    record = db.session.get(StreakRecord, user_id)
    if record is None:
        record = StreakRecord(
            user_id=user_id,
            current_streak=0,
            longest_streak=0,
            total_workouts_completed=0,
            total_habits_completed=0,
        )
        db.session.add(record)
    return record


def register_activity(user_id: int, kind: str, today: Optional[date] = None) -> StreakRecord:
    """
    Read-modify-write of the user's streak record.

    Concurrent writers for the same user are detected through the record's
    version counter (or the primary key on first insert); the loser rolls back
    and re-reads.
    """
    today = today or utc_today()
    attempts = max(1, int(current_app.config.get("STREAK_UPDATE_ATTEMPTS", 3)))

    for attempt in range(1, attempts + 1):
        try:
            record = _get_or_create(user_id)
            advance_streak(record, today, kind)
            db.session.commit()
            return record
        except (StaleDataError, IntegrityError) as e:
            db.session.rollback()
            current_app.logger.info(
                f"[streak] user_id={user_id} concurrent update (attempt {attempt}/{attempts}): {e}"
            )

    raise StreakConflictError("Streak record is busy, try again")
