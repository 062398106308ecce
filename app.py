import logging
import os
from pathlib import Path

from flask import Flask, jsonify
from sqlalchemy import text

from models import db
from app_core.errors import install_json_error_handlers
from app_core.api import api_bp
from app_core.metrics import metrics_bp

logger = logging.getLogger("movieslibrary")


def _safe_destination(database_url: str) -> str:
    # drop scheme and credentials before logging
    return database_url.split("@", 1)[-1] if "@" in database_url else database_url


def _log_level(value) -> str:
    # unknown names fall back to INFO instead of failing at import
    level = str(value or "INFO").strip().upper()
    return level if isinstance(logging.getLevelName(level), int) else "INFO"


def create_app(test_config=None):
    app = Flask(__name__)

    # Load env config
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "dev-secret")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["API_TOKEN"] = os.getenv("API_TOKEN")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")

    # Database configuration
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        app.config["SQLALCHEMY_DATABASE_URI"] = database_url
    else:
        instance_db = Path(app.instance_path) / "movieslibrary.db"
        instance_db.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{instance_db}"

    if test_config:
        app.config.update(test_config)

    app.config["LOG_LEVEL"] = _log_level(app.config.get("LOG_LEVEL"))

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Using database -> %s", _safe_destination(app.config["SQLALCHEMY_DATABASE_URI"]))

    # Installing JSON error handlers & SQLAlchemy
    install_json_error_handlers(app)
    db.init_app(app)

    with app.app_context():
        db.create_all()

    # HEALTH CHECK ENDPOINT
    @app.route("/health")
    def health():
        """
        Basic health endpoint for monitoring.
        Returns 200 if DB is reachable, 500 otherwise.
        """
        db_ok = True
        try:
            db.session.execute(text("SELECT 1"))
        except Exception:
            logger.exception("Database health check failed")
            db_ok = False

        status_code = 200 if db_ok else 500

        return jsonify({"status": "ok" if db_ok else "error", "database": db_ok}), status_code

    # Register blueprints
    app.register_blueprint(api_bp)
    app.register_blueprint(metrics_bp)

    return app


app = create_app()

# Development only
if __name__ == "__main__":
    port = int(os.getenv("PORT", 8000))
    app.run(host="0.0.0.0", port=port, debug=True)
