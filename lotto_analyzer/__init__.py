"""Lotto draw collection, frequency analysis and recommendations (Flask application package)."""

from __future__ import annotations

from typing import Any, Mapping

from dotenv import load_dotenv
from flask import Flask, current_app


def create_app(config_overrides: Mapping[str, Any] | None = None) -> Flask:
    """Application factory.

    Args:
        config_overrides: applied after the environment config, mostly for tests.

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from lotto_analyzer.config import get_config
    from lotto_analyzer.error_handlers import register_error_handlers
    from lotto_analyzer.logging_config import configure_logging
    from lotto_analyzer.routes.analysis import analysis_bp
    from lotto_analyzer.routes.draws import draws_bp
    from lotto_analyzer.routes.health import health_bp
    from lotto_analyzer.routes.recommendations import recommendations_bp
    from lotto_analyzer.services.pipeline import build_pipeline

    app = Flask(__name__)
    app.config.from_object(get_config())
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging(app)
    register_error_handlers(app)

    # One pipeline per app: it owns the reentrancy guard and the latest snapshot.
    app.extensions["pipeline"] = build_pipeline(app.config)

    app.register_blueprint(health_bp)
    app.register_blueprint(analysis_bp)
    app.register_blueprint(draws_bp)
    app.register_blueprint(recommendations_bp)

    return app


def get_pipeline():
    """Return the AnalysisPipeline bound to the current app."""

    return current_app.extensions["pipeline"]
