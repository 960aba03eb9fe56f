# backend/cashbook/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate
from .time_utils import parse_utc_offset



def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # Fail fast on a malformed store offset; every day boundary depends on it
    app.config["STORE_UTC_OFFSET_DELTA"] = parse_utc_offset(app.config["STORE_UTC_OFFSET"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.cash_register import cash_register_bp
    from .routes.banking import banking_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(cash_register_bp)
    app.register_blueprint(banking_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:4173",
            "http://127.0.0.1:4173",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
