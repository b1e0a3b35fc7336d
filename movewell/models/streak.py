# movewell/models/streak.py
from datetime import datetime
from .. import db


class StreakRecord(db.Model):
    __tablename__ = "streaks"

    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id"), primary_key=True)
    current_streak = db.Column(db.Integer, default=0, nullable=False)
    longest_streak = db.Column(db.Integer, default=0, nullable=False)
    last_activity_date = db.Column(db.Date)

    total_workouts_completed = db.Column(db.Integer, default=0, nullable=False)
    total_habits_completed = db.Column(db.Integer, default=0, nullable=False)

    # bumped on every UPDATE; a stale writer gets StaleDataError
    version_id = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    user = db.relationship("User", backref=db.backref("streak", uselist=False))

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self):
        return {
            "current": self.current_streak or 0,
            "longest": self.longest_streak or 0,
            "last_activity_date": (
                self.last_activity_date.isoformat() if self.last_activity_date else None
            ),
            "total_workouts": self.total_workouts_completed or 0,
            "total_habits": self.total_habits_completed or 0,
        }
