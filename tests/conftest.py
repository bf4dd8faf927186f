"""
Pytest configuration and shared fixtures for the Inbox Application Tracker tests.
"""

import base64
import os
import sys
from datetime import datetime, timezone

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from apptrack.ai.base import AIProvider
from apptrack.email.client import MailProviderError


def encode(text):
    """Encode text the way Gmail encodes part data (base64url, no padding)."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def build_message(
    msg_id,
    subject="",
    sender="",
    date="Mon, 15 Jan 2024 10:30:00 -0500",
    body="",
    html=None,
):
    """
    Build a Gmail API 'full' format message.

    The body is a text/plain part; html, when given, adds a text/html
    sibling inside a multipart/alternative payload.
    """
    headers = []
    if subject is not None:
        headers.append({"name": "Subject", "value": subject})
    if sender is not None:
        headers.append({"name": "From", "value": sender})
    if date is not None:
        headers.append({"name": "Date", "value": date})

    parts = [{"mimeType": "text/plain", "body": {"data": encode(body)}}]
    if html is not None:
        parts.append({"mimeType": "text/html", "body": {"data": encode(html)}})

    return {
        "id": msg_id,
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": headers,
            "body": {"size": 0},
            "parts": parts,
        },
    }


class FakeGmailClient:
    """In-memory stand-in for GmailClient."""

    def __init__(self, messages=None, list_error=None, get_errors=None):
        self.messages = dict(messages or {})
        self.list_error = list_error
        self.get_errors = dict(get_errors or {})
        self.queries = []

    def search_messages(self, query, max_results=100):
        self.queries.append((query, max_results))
        if self.list_error:
            raise self.list_error
        return list(self.messages)[:max_results]

    def get_message(self, msg_id, format="full"):
        if msg_id in self.get_errors:
            raise self.get_errors[msg_id]
        return dict(self.messages[msg_id])


class FakeProvider(AIProvider):
    """AI provider returning a scripted reply, or raising it if it is an exception."""

    def __init__(self, reply):
        self.reply = reply
        self.prompts = []

    @property
    def provider_name(self):
        return "fake"

    @property
    def model_name(self):
        return "fake-1"

    def _generate(self, prompt, max_tokens=500):
        self.prompts.append(prompt)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


class FixedClock:
    """Clock returning a settable time."""

    def __init__(self, now=None):
        self.now = now or datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def make_message():
    return build_message


@pytest.fixture
def sample_messages():
    """A small mailbox covering each classification path."""
    return {
        "m1": build_message(
            "m1",
            subject="Interview Invitation at Acme Corp for Backend Developer",
            sender="Acme Recruiting <jobs@acme.com>",
            body="We would like to schedule an interview with you next week.",
        ),
        "m2": build_message(
            "m2",
            subject="Your application",
            sender="jobs@Acme-Careers.com",
            body="Unfortunately, thank you for your interest in the role",
        ),
        "m3": build_message(
            "m3",
            subject="Thanks for applying",
            sender="Globex Talent <talent@globex.com>",
            date=None,
        ),
    }


@pytest.fixture
def failing_list_client():
    return FakeGmailClient(list_error=MailProviderError("quota exceeded", status=429))


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store(tmp_path):
    from apptrack.store import ApplicationStore

    store = ApplicationStore(tmp_path / "applications.db")
    store.init()
    return store


@pytest.fixture
def test_config(tmp_path):
    from apptrack.config import Config

    return Config(
        config_path=tmp_path / "config.yaml",
        data={
            "ai": {"provider": "claude"},
            "gmail": {"max_workers": 2},
            "storage": {"db_path": str(tmp_path / "applications.db")},
        },
    )


@pytest.fixture
def app(test_config, monkeypatch):
    """Flask app with AI classification disabled."""
    from apptrack import create_app

    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    app = create_app(config=test_config)
    app.config["TESTING"] = True
    app.config["APPTRACK_AI_PROVIDER"] = None
    return app


@pytest.fixture
def client(app):
    return app.test_client()
