from datetime import date, timedelta

import pytest

from movewell import db, streaks
from movewell.errors import StreakConflictError
from movewell.models.progress import HABIT, STRETCH, WORKOUT
from movewell.models.streak import StreakRecord

DAY_N = date(2025, 6, 2)


def _blank():
    return StreakRecord(
        current_streak=0,
        longest_streak=0,
        total_workouts_completed=0,
        total_habits_completed=0,
    )


def test_first_activity_starts_streak():
    record = _blank()
    streaks.advance_streak(record, DAY_N, WORKOUT)

    assert record.current_streak == 1
    assert record.longest_streak == 1
    assert record.last_activity_date == DAY_N
    assert record.total_workouts_completed == 1


def test_consecutive_days_extend_streak():
    record = _blank()
    streaks.advance_streak(record, DAY_N, WORKOUT)
    streaks.advance_streak(record, DAY_N + timedelta(days=1), WORKOUT)

    assert record.current_streak == 2
    assert record.longest_streak == 2


def test_skipped_day_resets_streak():
    record = _blank()
    streaks.advance_streak(record, DAY_N, WORKOUT)
    streaks.advance_streak(record, DAY_N + timedelta(days=2), WORKOUT)

    assert record.current_streak == 1


def test_same_day_repeat_only_moves_totals():
    record = _blank()
    streaks.advance_streak(record, DAY_N, WORKOUT)
    streaks.advance_streak(record, DAY_N, HABIT)
    streaks.advance_streak(record, DAY_N, STRETCH)

    assert record.current_streak == 1
    assert record.total_workouts_completed == 2
    assert record.total_habits_completed == 1


def test_longest_streak_never_decreases():
    record = _blank()
    for offset in range(4):
        streaks.advance_streak(record, DAY_N + timedelta(days=offset), WORKOUT)
    assert record.longest_streak == 4

    streaks.advance_streak(record, DAY_N + timedelta(days=10), WORKOUT)
    assert record.current_streak == 1
    assert record.longest_streak == 4

    streaks.advance_streak(record, DAY_N + timedelta(days=11), WORKOUT)
    assert record.current_streak == 2
    assert record.longest_streak == 4


def test_register_activity_creates_and_persists(user):
    streaks.register_activity(user.id, WORKOUT, today=DAY_N)
    streaks.register_activity(user.id, HABIT, today=DAY_N + timedelta(days=1))
    db.session.expire_all()

    record = streaks.get_streak(user.id)
    assert record.current_streak == 2
    assert record.longest_streak == 2
    assert record.last_activity_date == DAY_N + timedelta(days=1)
    assert record.total_workouts_completed == 1
    assert record.total_habits_completed == 1


def test_register_activity_bumps_version(user):
    first = streaks.register_activity(user.id, WORKOUT, today=DAY_N)
    version = first.version_id
    second = streaks.register_activity(user.id, WORKOUT, today=DAY_N)

    assert second.version_id == version + 1


def test_register_activity_gives_up_after_repeated_conflicts(app, user, monkeypatch):
    from sqlalchemy.orm.exc import StaleDataError

    app.config["STREAK_UPDATE_ATTEMPTS"] = 2
    calls = []

    def always_stale(record, today, kind):
        calls.append(today)
        raise StaleDataError("row changed underneath")

    monkeypatch.setattr(streaks, "advance_streak", always_stale)

    with pytest.raises(StreakConflictError):
        streaks.register_activity(user.id, WORKOUT, today=DAY_N)
    assert len(calls) == 2


def test_register_activity_retries_after_conflict(user, monkeypatch):
    from sqlalchemy.orm.exc import StaleDataError

    real_advance = streaks.advance_streak
    calls = []

    def stale_once(record, today, kind):
        calls.append(today)
        if len(calls) == 1:
            raise StaleDataError("row changed underneath")
        real_advance(record, today, kind)

    monkeypatch.setattr(streaks, "advance_streak", stale_once)

    record = streaks.register_activity(user.id, WORKOUT, today=DAY_N)
    assert len(calls) == 2
    assert record.current_streak == 1
    assert record.total_workouts_completed == 1


def test_concurrent_writer_is_detected_and_its_update_kept(file_user_id, monkeypatch):
    from sqlalchemy import update

    user_id = file_user_id
    streaks.register_activity(user_id, WORKOUT, today=DAY_N)

    streak_table = StreakRecord.__table__
    real_advance = streaks.advance_streak
    seen_versions = []

    def advance_while_another_writer_commits(record, today, kind):
        seen_versions.append(record.version_id)
        real_advance(record, today, kind)
        if len(seen_versions) == 1:
            # another request for the same user commits between our read and write
            with db.engine.begin() as conn:
                conn.execute(
                    update(streak_table)
                    .where(streak_table.c.user_id == user_id)
                    .values(
                        total_workouts_completed=streak_table.c.total_workouts_completed + 1,
                        version_id=streak_table.c.version_id + 1,
                    )
                )

    monkeypatch.setattr(streaks, "advance_streak", advance_while_another_writer_commits)

    record = streaks.register_activity(user_id, WORKOUT, today=DAY_N + timedelta(days=1))

    # first attempt saw version 1 and lost; the retry re-read version 2
    assert seen_versions == [1, 2]
    db.session.expire_all()
    record = streaks.get_streak(user_id)
    # 1 (first day) + 1 (other writer) + 1 (this activity)
    assert record.total_workouts_completed == 3
    assert record.current_streak == 2
    assert record.version_id == 3
