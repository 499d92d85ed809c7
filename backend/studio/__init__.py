# backend/studio/__init__.py
import logging

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException

from .config import Config
from .errors import StudioError
from .extensions import db, migrate



def create_app(config_object=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.appointments import appointments_bp
    from .routes.sales import sales_bp
    from .routes.payments import sale_payments_bp, appointment_payments_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(sale_payments_bp)
    app.register_blueprint(appointment_payments_bp)

    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config.get("CORS_ORIGINS", set()):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(StudioError)
    def handle_studio_error(exc: StudioError):
        if exc.status_code >= 500:
            app.logger.error("%s (cause: %r)", exc.message, getattr(exc, "cause", None))
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"message": exc.description}), exc.code
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": "Internal server error", "error": type(exc).__name__}), 500
