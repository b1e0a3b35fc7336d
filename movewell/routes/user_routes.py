# movewell/routes/user_routes.py
from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import IntegrityError

from .. import db
from ..errors import AuthError, ConflictError, ValidationError
from ._helpers import current_user, email_taken, json_body, text_field
from .auth_routes import MIN_PASSWORD_LENGTH

user_bp = Blueprint("user", __name__)


@user_bp.route("/profile", methods=["GET"])
@jwt_required()
def get_profile():
    return jsonify({"user": current_user().to_dict()}), 200


@user_bp.route("/profile", methods=["PUT"])
@jwt_required()
def update_profile():
    data = json_body()
    name = text_field(data, "name")
    email = text_field(data, "email").lower()

    if not name or not email:
        raise ValidationError("Name and email are required")

    user = current_user()

    # email must stay unique across users
    if email != user.email and email_taken(email, exclude_user_id=user.id):
        raise ConflictError("Email already in use")

    user.name = name
    user.email = email

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Email already in use")
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"Update profile error: {e}")
        return jsonify({"error": "Failed to update profile"}), 500

    return jsonify({"user": user.to_dict()}), 200


@user_bp.route("/profile-picture", methods=["PUT"])
@jwt_required()
def update_profile_picture():
    data = json_body()
    picture = data.get("profile_picture")
    if not picture or not isinstance(picture, str):
        raise ValidationError("Profile picture is required")

    user = current_user()
    # stored as sent; uploading to object storage is the client's job
    user.profile_picture = picture

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"Upload profile picture error: {e}")
        return jsonify({"error": "Failed to upload profile picture"}), 500

    return jsonify({"user": user.to_dict()}), 200


@user_bp.route("/change-password", methods=["PUT"])
@jwt_required()
def change_password():
    data = json_body()
    current_password = text_field(data, "current_password", strip=False)
    new_password = text_field(data, "new_password", strip=False)

    if not current_password or not new_password:
        raise ValidationError("Current and new passwords are required")

    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"New password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    user = current_user()
    if not user.check_password(current_password):
        raise AuthError("Current password is incorrect")

    user.set_password(new_password)

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"Change password error: {e}")
        return jsonify({"error": "Failed to change password"}), 500

    return jsonify({"message": "Password changed successfully"}), 200
