#!/usr/bin/env python3
"""
Inbox Application Tracker - Main Entry Point

Uses the application factory pattern via apptrack.create_app().

Usage:
    python run.py

Environment Variables:
    FLASK_ENV: development (default), production, testing
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (optional)
    APPTRACK_CONFIG: Path to config.yaml (optional)
    ANTHROPIC_API_KEY / OPENAI_API_KEY: AI provider credentials
"""

import os
from pathlib import Path

from dotenv import load_dotenv

APP_DIR = Path(__file__).parent

# Load environment variables from .env file
load_dotenv(APP_DIR / ".env")

from apptrack.logging_config import setup_logging, get_logger

flask_env = os.environ.get("FLASK_ENV", "development")
log_level = os.environ.get("LOG_LEVEL")
json_logs = flask_env == "production"

setup_logging(level=log_level, json_logs=json_logs)
logger = get_logger(__name__)


def make_engine_factory(app, token_file):
    """Build a SyncEngine per poll tick from the stored Gmail token."""
    from apptrack.email import GmailClient
    from apptrack.routes.api import build_engine

    def factory():
        client = GmailClient.from_authorized_user_file(token_file)
        with app.app_context():
            return build_engine(client)

    return factory


def main():
    """Main entry point for the Inbox Application Tracker."""
    from apptrack import create_app
    from apptrack.scheduler import start_poller

    app = create_app()
    config = app.config["APPTRACK_CONFIG"]
    provider = app.config["APPTRACK_AI_PROVIDER"]

    scheduler = None
    if config.token_file:
        scheduler = start_poller(
            app.config["APPTRACK_COORDINATOR"],
            make_engine_factory(app, config.token_file),
            interval_minutes=config.poll_interval_minutes,
        )
    else:
        logger.info("gmail.token_file not set; background polling disabled")

    logger.info("=" * 60)
    logger.info("  Inbox Application Tracker")
    logger.info("=" * 60)
    logger.info(f"  Environment: {flask_env}")
    logger.info(f"  AI provider: {provider.provider_name if provider else 'heuristics only'}")
    logger.info(f"  Database: {config.db_path}")
    logger.info(f"  Health Check: http://localhost:5000/health")
    logger.info("=" * 60)

    debug_mode = flask_env != "production"
    try:
        # The reloader would start a second poller in the child process
        app.run(debug=debug_mode, host="0.0.0.0", port=5000, use_reloader=False)
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=False)


if __name__ == "__main__":
    main()
