"""
API Routes Blueprint - classification, sync and dashboard endpoints

Endpoints that touch Gmail require an "Authorization: Bearer <token>"
header carrying a Gmail OAuth2 access token.
"""

import logging
from typing import Optional

from flask import Blueprint, current_app, jsonify, request

from apptrack.classifier import MessageClassifier
from apptrack.dashboard import filter_records, sort_records, status_counts
from apptrack.email.client import AuthenticationError, GmailClient, MailProviderError
from apptrack.sync import SyncEngine, format_timestamp, watermark_from_millis

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def build_engine(client) -> SyncEngine:
    """Create a SyncEngine for client using the app's config and AI provider."""
    config = current_app.config["APPTRACK_CONFIG"]
    classifier = MessageClassifier(
        provider=current_app.config.get("APPTRACK_AI_PROVIDER"),
        body_chars=config.ai_body_chars,
    )
    return SyncEngine(
        client,
        classifier,
        max_workers=config.max_workers,
        full_limit=config.full_sync_limit,
        incremental_limit=config.incremental_sync_limit,
    )


def _not_authenticated():
    return jsonify({"error": "Not authenticated"}), 401


@api_bp.route("/classify", methods=["GET"])
def classify_all():
    """Full sync: classify the newest job-related messages."""
    token = _bearer_token()
    if not token:
        return _not_authenticated()

    try:
        engine = build_engine(GmailClient.from_access_token(token))
        result = engine.full_sync()
    except AuthenticationError as e:
        logger.warning(f"Gmail rejected credential: {e}")
        return _not_authenticated()
    except Exception as e:
        logger.error(f"Full sync failed: {e}")
        return jsonify({"error": "Failed to fetch emails", "details": str(e)}), 500

    return jsonify([record.to_dict() for record in result.new_records])


@api_bp.route("/classify/incremental", methods=["POST"])
def classify_incremental():
    """Classify messages received after lastFetchTime (epoch millis)."""
    token = _bearer_token()
    if not token:
        return _not_authenticated()

    data = request.get_json(silent=True) or {}
    last_fetch = data.get("lastFetchTime")
    if isinstance(last_fetch, bool) or not isinstance(last_fetch, (int, float)):
        return jsonify({"error": "lastFetchTime (epoch milliseconds) is required"}), 400

    try:
        watermark = watermark_from_millis(last_fetch)
    except (OverflowError, OSError, ValueError):
        return jsonify({"error": "lastFetchTime is out of range"}), 400

    try:
        engine = build_engine(GmailClient.from_access_token(token))
        result = engine.incremental_sync({}, watermark)
    except AuthenticationError as e:
        logger.warning(f"Gmail rejected credential: {e}")
        return _not_authenticated()
    except Exception as e:
        logger.error(f"Incremental sync failed: {e}")
        return jsonify({"error": "Failed to fetch new emails", "details": str(e)}), 500

    return jsonify([record.to_dict() for record in result.new_records])


@api_bp.route("/sync", methods=["POST"])
def sync_store():
    """Run one coordinated pass against the stored applications."""
    token = _bearer_token()
    if not token:
        return _not_authenticated()

    coordinator = current_app.config["APPTRACK_COORDINATOR"]
    try:
        result = coordinator.run_once(build_engine(GmailClient.from_access_token(token)))
    except AuthenticationError as e:
        logger.warning(f"Gmail rejected credential: {e}")
        return _not_authenticated()
    except MailProviderError as e:
        return jsonify({"error": "Sync failed", "details": str(e)}), 500
    except Exception as e:
        logger.exception("Unexpected sync failure")
        return jsonify({"error": "Sync failed", "details": str(e)}), 500

    if result is None:
        return jsonify({"error": "A sync is already in progress"}), 409

    return jsonify({
        "mode": result.mode,
        "newRecords": len(result.new_records),
        "total": len(result.records),
        "lastSync": format_timestamp(result.watermark),
    })


@api_bp.route("/applications", methods=["GET"])
def list_applications():
    """Stored applications with optional status/search filters and sorting."""
    store = current_app.config["APPTRACK_STORE"]
    records = list(store.load_records().values())

    try:
        shown = filter_records(
            records,
            status=request.args.get("status"),
            search=request.args.get("search"),
        )
        shown = sort_records(
            shown,
            sort_by=request.args.get("sort", "date"),
            order=request.args.get("order", "desc"),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    watermark = store.load_watermark()
    return jsonify({
        "applications": [r.to_dict() for r in shown],
        "stats": status_counts(records),
        "lastSync": format_timestamp(watermark) if watermark else None,
    })


@api_bp.route("/health", methods=["GET"])
def health():
    """Liveness check with the active AI provider and sync status."""
    provider = current_app.config.get("APPTRACK_AI_PROVIDER")
    coordinator = current_app.config["APPTRACK_COORDINATOR"]
    store = current_app.config["APPTRACK_STORE"]
    return jsonify({
        "status": "ok",
        "aiProvider": provider.provider_name if provider else None,
        "store": str(store.db_path),
        "syncInProgress": coordinator.in_progress,
        "lastSyncError": coordinator.last_error,
    })
