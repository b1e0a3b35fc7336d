# movewell/models/progress.py
from datetime import datetime
from .. import db

# Completion kinds (tagged variant of ActivityCompletion)
WORKOUT = "workout"
HABIT = "habit"
STRETCH = "stretch"
WARMUP = "warmup"
COMPLETION_KINDS = (WORKOUT, HABIT, STRETCH, WARMUP)

_PK = db.BigInteger().with_variant(db.Integer, "sqlite")


class ProgressEntry(db.Model):
    """One row per user per calendar day."""

    __tablename__ = "progress_entries"
    __table_args__ = (
        # also serves the (user_id, day) range scans
        db.UniqueConstraint("user_id", "day", name="uq_progress_user_day"),
    )

    id = db.Column(_PK, primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id"), nullable=False)
    day = db.Column(db.Date, nullable=False)

    steps = db.Column(db.Integer, default=0, nullable=False)
    calories_burned = db.Column(db.Float, default=0, nullable=False)
    minutes_exercised = db.Column(db.Float, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    user = db.relationship("User", backref="progress_entries")
    completions = db.relationship(
        "ActivityCompletion",
        backref="entry",
        order_by="ActivityCompletion.id",
        cascade="all, delete-orphan",
    )

    def completions_of(self, kind):
        return [c for c in self.completions if c.kind == kind]

    @property
    def workouts(self):
        return self.completions_of(WORKOUT)

    @property
    def habits(self):
        return self.completions_of(HABIT)

    @property
    def stretches(self):
        return self.completions_of(STRETCH)

    @property
    def warmups(self):
        return self.completions_of(WARMUP)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.day.isoformat() if self.day else None,
            "steps": self.steps or 0,
            "calories_burned": self.calories_burned or 0,
            "minutes_exercised": self.minutes_exercised or 0,
            "workouts_completed": [c.to_dict() for c in self.workouts],
            "habits_completed": [c.to_dict() for c in self.habits],
            "stretches_completed": [c.to_dict() for c in self.stretches],
            "warmups_completed": [c.to_dict() for c in self.warmups],
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class ActivityCompletion(db.Model):
    __tablename__ = "activity_completions"
    __table_args__ = (
        db.Index("ix_completion_entry_kind_ext", "entry_id", "kind", "external_id"),
    )

    id = db.Column(_PK, primary_key=True)
    entry_id = db.Column(
        db.BigInteger, db.ForeignKey("progress_entries.id"), nullable=False
    )
    kind = db.Column(db.Enum(*COMPLETION_KINDS, name="completion_kind"), nullable=False)
    external_id = db.Column(db.String(100), nullable=False)
    title = db.Column(db.String(200), nullable=False)

    duration = db.Column(db.Float)          # minutes
    calories_burned = db.Column(db.Float)
    actual = db.Column(db.Float)            # e.g. km for Walking / Running

    completed_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        data = {
            "id": self.external_id,
            "kind": self.kind,
            "title": self.title,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
        if self.kind == HABIT:
            data["actual"] = self.actual
        else:
            data["duration"] = self.duration
            data["calories_burned"] = self.calories_burned or 0
        return data
