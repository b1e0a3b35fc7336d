# movewell/routes/progress_routes.py

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from .. import db, ledger
from ..days import parse_day, resolve_day
from ..errors import ValidationError
from ..models.progress import STRETCH, WARMUP, WORKOUT
from ..stats import build_stats
from ._helpers import current_user, json_body

progress_bp = Blueprint("progress", __name__)


def _entry_response(entry, duplicate=False):
    payload = entry.to_dict()
    payload["duplicate"] = duplicate
    return jsonify(payload), 200


def _record_timed(kind):
    """Shared body of the workout / stretch / warmup endpoints."""
    data = json_body()
    completion = ledger.parse_activity(kind, data)
    day = resolve_day(data.get("date"))
    user = current_user()

    try:
        entry, created = ledger.record_completion(user.id, day, completion)
    except Exception as e:
        current_app.logger.exception(f"Record {kind} error: {e}")
        return jsonify({"error": f"Failed to record {kind}"}), 500

    return _entry_response(entry, duplicate=not created)


# ------------------------------
# GET /api/progress/today?date=YYYY-MM-DD
# ------------------------------
@progress_bp.route("/today", methods=["GET"])
@jwt_required()
def today_progress():
    day = resolve_day(request.args.get("date"))
    user = current_user()

    try:
        entry = ledger.get_or_create_entry(user.id, day)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"Get today progress error: {e}")
        return jsonify({"error": "Failed to fetch progress"}), 500

    return jsonify(entry.to_dict()), 200


# ------------------------------
# GET /api/progress/range?start_date=...&end_date=...
# ------------------------------
@progress_bp.route("/range", methods=["GET"])
@jwt_required()
def progress_range():
    start_raw = request.args.get("start_date")
    end_raw = request.args.get("end_date")
    if not start_raw or not end_raw:
        raise ValidationError("start_date and end_date are required")

    start = parse_day(start_raw, "start_date")
    end = parse_day(end_raw, "end_date")
    if start > end:
        raise ValidationError("start_date must not be after end_date")

    user = current_user()
    try:
        entries = ledger.entries_between(user.id, start, end)
    except Exception as e:
        current_app.logger.exception(f"Get progress range error: {e}")
        return jsonify({"error": "Failed to fetch progress"}), 500

    return jsonify({"entries": [e.to_dict() for e in entries]}), 200


# ------------------------------
# POST /api/progress/steps
# ------------------------------
@progress_bp.route("/steps", methods=["POST"])
@jwt_required()
def add_steps():
    data = json_body()
    steps = ledger.parse_steps(data)
    day = resolve_day(data.get("date"))
    user = current_user()

    try:
        entry = ledger.add_steps(user.id, day, steps)
    except Exception as e:
        current_app.logger.exception(f"Add steps error: {e}")
        return jsonify({"error": "Failed to add steps"}), 500

    return jsonify(entry.to_dict()), 200


@progress_bp.route("/workout", methods=["POST"])
@jwt_required()
def record_workout():
    return _record_timed(WORKOUT)


@progress_bp.route("/stretch", methods=["POST"])
@jwt_required()
def record_stretch():
    return _record_timed(STRETCH)


@progress_bp.route("/warmup", methods=["POST"])
@jwt_required()
def record_warmup():
    return _record_timed(WARMUP)


# ------------------------------
# POST /api/progress/habit
# ------------------------------
@progress_bp.route("/habit", methods=["POST"])
@jwt_required()
def record_habit():
    """
    Expected body:
    {
      "habit_id": "walk-1",
      "title": "Morning Walking",
      "actual": 5.2,          # km, required for Walking / Running
      "date": "2025-06-04"    # optional
    }
    """
    data = json_body()
    completion = ledger.parse_habit(data)
    day = resolve_day(data.get("date"))
    user = current_user()

    try:
        entry, created = ledger.record_completion(user.id, day, completion)
    except Exception as e:
        current_app.logger.exception(f"Record habit error: {e}")
        return jsonify({"error": "Failed to record habit"}), 500

    habits = [h for h in entry.habits if h.external_id == completion.external_id]
    return jsonify(
        {
            "success": True,
            "duplicate": not created,
            "habit": habits[-1].to_dict() if habits else None,
            "progress": entry.to_dict(),
        }
    ), 200


# ------------------------------
# GET /api/progress/stats?date=YYYY-MM-DD
# ------------------------------
@progress_bp.route("/stats", methods=["GET"])
@jwt_required()
def progress_stats():
    day = resolve_day(request.args.get("date"))
    user = current_user()

    try:
        stats = build_stats(user.id, day)
    except Exception as e:
        current_app.logger.exception(f"Get stats error: {e}")
        return jsonify({"error": "Failed to fetch stats"}), 500

    return jsonify(stats), 200
