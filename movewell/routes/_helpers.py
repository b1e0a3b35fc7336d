# movewell/routes/_helpers.py
from flask import request
from flask_jwt_extended import get_jwt_identity

from .. import db
from ..errors import NotFoundError, ValidationError
from ..models.user import User


def current_user_id() -> int:
    try:
        return int(get_jwt_identity())
    except (TypeError, ValueError):
        raise NotFoundError("User not found")


def current_user() -> User:
    user = db.session.get(User, current_user_id())
    if not user:
        raise NotFoundError("User not found")
    return user


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def text_field(data: dict, field: str, strip: bool = True) -> str:
    """String value of ``field``; missing -> "", any other JSON type -> 400."""
    value = data.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value.strip() if strip else value


def email_taken(email: str, exclude_user_id=None) -> bool:
    query = User.query.filter_by(email=email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None
