"""
Inbox Application Tracker - Application Factory

Classifies job-application emails from Gmail and keeps a deduplicated,
incrementally synced record of every application.
"""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from apptrack.config import Config, get_config

logger = logging.getLogger(__name__)


def create_app(config_path=None, config: Optional[Config] = None):
    """
    Application factory for creating Flask app instances.

    Args:
        config_path: Optional path to config.yaml file
        config: Already-loaded Config (takes precedence over config_path)

    Returns:
        Configured Flask application instance
    """
    # Load environment variables
    from dotenv import load_dotenv

    load_dotenv()

    if config is None:
        try:
            config = get_config(config_path)
        except FileNotFoundError as e:
            logger.error(f"Configuration Error: {e}")
            raise

    from apptrack.ai import try_get_provider
    from apptrack.store import ApplicationStore
    from apptrack.sync import SyncCoordinator

    # Without a usable provider every message goes through the heuristics
    provider = try_get_provider(config.to_dict())

    store = ApplicationStore(config.db_path)
    store.init()

    app = Flask(__name__)
    CORS(app)

    app.config["APPTRACK_CONFIG"] = config
    app.config["APPTRACK_AI_PROVIDER"] = provider
    app.config["APPTRACK_STORE"] = store
    app.config["APPTRACK_COORDINATOR"] = SyncCoordinator(store)

    register_blueprints(app)

    return app


def register_blueprints(app):
    """Register all Flask blueprints."""
    from apptrack.routes import register_all_blueprints

    register_all_blueprints(app)
