# movewell/routes/auth_routes.py

from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import create_access_token, jwt_required
from sqlalchemy.exc import IntegrityError

from .. import db
from ..errors import AuthError, ConflictError, ValidationError
from ..models.user import User
from ._helpers import current_user, email_taken, json_body, text_field

auth_bp = Blueprint("auth", __name__)

MIN_PASSWORD_LENGTH = 6


# -----------------------------
# Routes
# -----------------------------
@auth_bp.route("/register", methods=["POST"])
def register():
    data = json_body()

    name = text_field(data, "name")
    email = text_field(data, "email").lower()
    password = text_field(data, "password", strip=False)  # do NOT strip passwords

    if not name or not email or not password:
        raise ValidationError("Name, email, and password are required")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    if email_taken(email):
        raise ConflictError("Email already registered")

    user = User(email=email, name=name)
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        # lost a race with a concurrent registration of the same email
        db.session.rollback()
        raise ConflictError("Email already registered")
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"Register error: {e}")
        return jsonify({"error": "Failed to register user"}), 500

    access_token = create_access_token(identity=str(user.id))
    return jsonify({"token": access_token, "user": user.to_dict()}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Accepts: { "email": "...", "password": "..." }
    """
    data = json_body()

    email = text_field(data, "email").lower()
    password = text_field(data, "password", strip=False)

    # do not log the password
    current_app.logger.info(f"[auth/login] email='{email}' keys={list(data.keys())}")

    if not email or not password:
        raise ValidationError("Email and password are required")

    user = User.query.filter_by(email=email).first()

    if not user:
        current_app.logger.info(f"[auth/login] user NOT found for '{email}'")
        raise AuthError("Invalid credentials")

    if not user.check_password(password):
        current_app.logger.info(f"[auth/login] bad password for user_id={user.id}")
        raise AuthError("Invalid credentials")

    access_token = create_access_token(identity=str(user.id))
    return jsonify({"token": access_token, "user": user.to_dict()}), 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    return jsonify({"user": current_user().to_dict()}), 200
