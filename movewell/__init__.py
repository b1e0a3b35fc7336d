# movewell/__init__.py
from datetime import datetime

from flask import Flask, jsonify
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager

from config import Config

db = SQLAlchemy()
jwt = JWTManager()


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    # weekly stats are keyed Mon..Sun
    app.json.sort_keys = False

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)

    # CORS: allow the mobile app (and others) to call /api/*
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    # -----------------------------
    # JWT error handlers
    # -----------------------------
    @jwt.unauthorized_loader
    def unauthorized_callback(reason):
        return jsonify({"error": "No token provided"}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return jsonify({"error": "Invalid or expired token"}), 401

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"error": "Invalid or expired token"}), 401

    # -----------------------------
    # App error handlers
    # -----------------------------
    from .errors import MoveWellError

    @app.errorhandler(MoveWellError)
    def handle_movewell_error(err):
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(404)
    def handle_not_found(err):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(err):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def handle_internal_error(err):
        original = getattr(err, "original_exception", None) or err
        app.logger.error(f"Unhandled error: {original!r}", exc_info=original)
        return jsonify({"error": "Internal server error"}), 500

    # -----------------------------
    # IMPORT BLUEPRINTS (all routes)
    # -----------------------------
    from .routes.auth_routes import auth_bp
    from .routes.user_routes import user_bp
    from .routes.progress_routes import progress_bp

    # -----------------------------
    # REGISTER BLUEPRINTS
    # -----------------------------
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(user_bp, url_prefix="/api/user")
    app.register_blueprint(progress_bp, url_prefix="/api/progress")

    @app.route("/health")
    def health():
        return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}

    # -----------------------------
    # DB init
    # -----------------------------
    from . import models  # noqa: F401  (register tables)

    with app.app_context():
        db.create_all()

    return app
