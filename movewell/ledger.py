# movewell/ledger.py
"""
Daily progress ledger.

Each (user, day) has one ProgressEntry. Writes fetch-or-create that entry and
apply counter increments as SQL expressions together with the completion row
in a single transaction, so concurrent writers never overwrite each other's
totals and a failed write leaves nothing behind.
"""
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from . import db, streaks
from .days import previous_day
from .errors import ValidationError
from .models.progress import (
    HABIT,
    STRETCH,
    WARMUP,
    WORKOUT,
    ActivityCompletion,
    ProgressEntry,
)

MAX_DISTANCE_KM = 10000
DISTANCE_HABIT_KEYWORDS = ("Walking", "Running")
TIMED_KINDS = (WORKOUT, STRETCH, WARMUP)


@dataclass(frozen=True)
class Completion:
    kind: str
    external_id: str
    title: str
    duration: Optional[float] = None
    calories_burned: Optional[float] = None
    actual: Optional[float] = None

    def to_row(self) -> ActivityCompletion:
        return ActivityCompletion(
            kind=self.kind,
            external_id=self.external_id,
            title=self.title,
            duration=self.duration,
            calories_burned=self.calories_burned,
            actual=self.actual,
        )


# ------------------------------
# Payload validation
# ------------------------------
def is_distance_habit(title: Optional[str]) -> bool:
    title = title or ""
    return any(word in title for word in DISTANCE_HABIT_KEYWORDS)


def _number(value: Any, field: str) -> float:
    # bool is an int subclass; JSON true/false is never a measurement
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ValidationError(f"{field} must be a number")
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"{field} must be a number")
    return float(value)


def _required_text(data: Dict[str, Any], field: str) -> str:
    value = data.get(field)
    if value is None or isinstance(value, (bool, dict, list)):
        return ""
    return str(value).strip()


def parse_steps(data: Dict[str, Any]) -> int:
    steps = data.get("steps")
    if isinstance(steps, bool) or not isinstance(steps, (int, float)):
        raise ValidationError("Valid steps count is required")
    if isinstance(steps, float) and (not math.isfinite(steps) or not steps.is_integer()):
        raise ValidationError("Valid steps count is required")
    if steps < 0:
        raise ValidationError("Valid steps count is required")
    return int(steps)


def parse_activity(kind: str, data: Dict[str, Any]) -> Completion:
    """Workout, stretch or warmup payload -> Completion."""
    if kind not in TIMED_KINDS:
        raise ValueError(f"not a timed activity kind: {kind}")

    external_id = _required_text(data, f"{kind}_id")
    title = _required_text(data, "title")
    if not external_id or not title or data.get("duration") in (None, ""):
        raise ValidationError(f"{kind.capitalize()} details are required")

    duration = _number(data.get("duration"), "duration")
    if duration <= 0:
        raise ValidationError("duration must be greater than 0")

    calories = data.get("calories_burned")
    calories = 0.0 if calories in (None, "") else _number(calories, "calories_burned")
    if calories < 0:
        raise ValidationError("calories_burned cannot be negative")

    return Completion(
        kind=kind,
        external_id=external_id,
        title=title,
        duration=duration,
        calories_burned=calories,
    )


def parse_habit(data: Dict[str, Any]) -> Completion:
    external_id = _required_text(data, "habit_id")
    title = _required_text(data, "title")
    if not external_id or not title:
        raise ValidationError("Habit details are required")

    raw_actual = data.get("actual")
    actual = None

    if is_distance_habit(title):
        try:
            actual = None if raw_actual in (None, "") else _number(raw_actual, "actual")
        except ValidationError:
            actual = None
        if actual is None:
            raise ValidationError(
                "Walking and Running habits require a valid distance value (km)"
            )
        if actual <= 0:
            raise ValidationError("Distance must be greater than 0")
        if actual > MAX_DISTANCE_KM:
            raise ValidationError(
                f"Distance value is too large (max {MAX_DISTANCE_KM} km)"
            )
    elif raw_actual not in (None, ""):
        actual = _number(raw_actual, "actual")

    return Completion(kind=HABIT, external_id=external_id, title=title, actual=actual)


# ------------------------------
# Storage
# ------------------------------
def find_entry(user_id: int, day: date) -> Optional[ProgressEntry]:
    return ProgressEntry.query.filter_by(user_id=user_id, day=day).first()


def get_or_create_entry(user_id: int, day: date) -> ProgressEntry:
    """
    Fetch the (user, day) entry, inserting an empty one if needed.

    Must be called at the start of a transaction: losing an insert race rolls
    the session back before re-reading the winner's row.
    """
    entry = find_entry(user_id, day)
    if entry is not None:
        return entry

    entry = ProgressEntry(
        user_id=user_id,
        day=day,
        steps=0,
        calories_burned=0,
        minutes_exercised=0,
    )
    db.session.add(entry)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        entry = find_entry(user_id, day)
        if entry is None:
            raise
    return entry


def add_steps(user_id: int, day: date, count: int) -> ProgressEntry:
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise ValidationError("Valid steps count is required")
    try:
        entry = get_or_create_entry(user_id, day)
        entry.steps = ProgressEntry.steps + count
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return entry


def find_duplicate(user_id: int, day: date, completion: Completion) -> Optional[ProgressEntry]:
    """Entry of ``day`` or the day before already holding this completion."""
    rows = (
        ProgressEntry.query.join(ActivityCompletion)
        .filter(
            ProgressEntry.user_id == user_id,
            ProgressEntry.day.in_([day, previous_day(day)]),
            ActivityCompletion.kind == completion.kind,
            ActivityCompletion.external_id == completion.external_id,
        )
        .all()
    )
    if not rows:
        return None
    for entry in rows:
        if entry.day == day:
            return entry
    return rows[0]


def _should_dedupe(kind: str) -> bool:
    if kind == HABIT:
        return bool(current_app.config.get("DEDUPE_HABITS", False))
    return True


def record_completion(
    user_id: int, day: date, completion: Completion
) -> Tuple[ProgressEntry, bool]:
    """
    Append ``completion`` to the user's entry for ``day``.

    Returns ``(entry, created)``. A duplicate submission (same kind and id on
    ``day`` or the day before) returns the existing entry with
    ``created=False`` and writes nothing.
    """
    if _should_dedupe(completion.kind):
        existing = find_duplicate(user_id, day, completion)
        if existing is not None:
            current_app.logger.info(
                f"[ledger] duplicate {completion.kind} id='{completion.external_id}' "
                f"user_id={user_id} day={existing.day.isoformat()}"
            )
            return existing, False

    try:
        entry = get_or_create_entry(user_id, day)
        if completion.kind != HABIT:
            entry.minutes_exercised = ProgressEntry.minutes_exercised + (
                completion.duration or 0
            )
            entry.calories_burned = ProgressEntry.calories_burned + (
                completion.calories_burned or 0
            )
        entry.completions.append(completion.to_row())
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    _touch_streak(user_id, completion.kind)
    return entry, True


def _touch_streak(user_id: int, kind: str) -> None:
    # The ledger write is already committed; a streak failure is only logged.
    try:
        streaks.register_activity(user_id, kind)
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"Update streak error for user_id={user_id}: {e}")


def entries_between(user_id: int, start: date, end: date) -> List[ProgressEntry]:
    return (
        ProgressEntry.query.filter(
            ProgressEntry.user_id == user_id,
            ProgressEntry.day >= start,
            ProgressEntry.day <= end,
        )
        .options(selectinload(ProgressEntry.completions))
        .order_by(ProgressEntry.day.desc())
        .all()
    )
