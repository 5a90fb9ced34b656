"""
Flask application factory.

Creates and configures the Flask app, registers all blueprints.
"""
import importlib
import logging

from flask import Flask, request, jsonify

logger = logging.getLogger('benchwatch')


def create_app():
    """Create and configure the Flask application."""
    from benchwatch.logging_config import configure_logging
    from benchwatch.config import SECRET_KEY

    app = Flask(__name__)

    configure_logging()

    app.secret_key = SECRET_KEY

    # ── Shared-token guard for the API ──────────────────────────────────────
    from benchwatch import config
    from benchwatch.auth import token_matches
    from benchwatch.errors import BenchwatchError, Unauthorized

    @app.before_request
    def require_ingest_token():
        if not config.INGEST_TOKEN:
            return  # No token set — open access (local dev)
        if not request.path.startswith('/api/'):
            return
        if token_matches(config.INGEST_TOKEN):
            return
        raise Unauthorized('Invalid or missing bearer token')

    @app.errorhandler(BenchwatchError)
    def handle_benchwatch_error(e):
        if e.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, e.message)
        return jsonify(e.to_dict()), e.status_code

    # Register blueprints
    from benchwatch.routes.health import bp as health_bp
    from benchwatch.routes.projects import bp as projects_bp
    from benchwatch.routes.reports import bp as reports_bp
    from benchwatch.routes.thresholds import bp as thresholds_bp
    from benchwatch.routes.alerts import bp as alerts_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(thresholds_bp)
    app.register_blueprint(alerts_bp)

    # Import models so Base.metadata knows about them (required for SQLAlchemy).
    # Schema is managed by Alembic — no create_all() call.
    importlib.import_module('benchwatch.models.project')
    importlib.import_module('benchwatch.models.dimensions')
    importlib.import_module('benchwatch.models.report')
    importlib.import_module('benchwatch.models.metric')
    importlib.import_module('benchwatch.models.threshold')
    importlib.import_module('benchwatch.models.alert')

    return app
