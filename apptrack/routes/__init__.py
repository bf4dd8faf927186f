"""
Routes Package - Flask Blueprints for the Inbox Application Tracker

Blueprint structure:
- api_bp: classification, sync, dashboard and health endpoints
"""

import logging

from .api import api_bp

logger = logging.getLogger(__name__)


def register_all_blueprints(app):
    """
    Register all Flask blueprints with the application.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(api_bp)
    logger.info("Registered API blueprint")


__all__ = [
    "register_all_blueprints",
    "api_bp",
]
