"""
Tests for AI classification: response parsing, validation and provider setup.
"""

from unittest.mock import Mock, patch

import pytest

from apptrack.ai import ClassificationError, get_available_providers, get_provider, try_get_provider
from apptrack.ai.prompts import build_classify_application_prompt
from apptrack.models import ApplicationStatus
from conftest import FakeProvider

GOOD_REPLY = (
    'Here is the analysis:\n```json\n'
    '{"companyName": "Acme", "jobProfile": "Backend Developer", "applicationStatus": "Interview"}\n'
    '```'
)


def test_parses_json_wrapped_in_prose():
    fields = FakeProvider(GOOD_REPLY).classify_application("Interview", "body", "jobs@acme.com")
    assert fields.company_name == "Acme"
    assert fields.job_profile == "Backend Developer"
    assert fields.status == ApplicationStatus.INTERVIEW


def test_status_is_coerced_case_insensitively():
    reply = '{"companyName": "Acme", "jobProfile": "QA", "applicationStatus": "application received"}'
    fields = FakeProvider(reply).classify_application("s", "b", "f")
    assert fields.status == ApplicationStatus.APPLICATION_RECEIVED


@pytest.mark.parametrize(
    "reply",
    [
        "",
        "I could not determine the company.",
        '{"companyName": "Acme", "jobProfile": ',
        '{"companyName": "Acme", "jobProfile": "QA"}',
        '{"companyName": "", "jobProfile": "QA", "applicationStatus": "Applied"}',
        '{"companyName": "Acme", "jobProfile": "QA", "applicationStatus": "Ghosted"}',
    ],
)
def test_unusable_replies_raise_classification_error(reply):
    with pytest.raises(ClassificationError):
        FakeProvider(reply).classify_application("s", "b", "f")


def test_provider_failure_becomes_classification_error():
    provider = FakeProvider(ConnectionError("network down"))
    with pytest.raises(ClassificationError, match="network down"):
        provider.classify_application("s", "b", "f")


def test_body_truncated_before_prompting():
    provider = FakeProvider(GOOD_REPLY)
    provider.body_chars = 10
    provider.classify_application("Subject", "0123456789ABCDEF", "f")
    assert "0123456789" in provider.prompts[0]
    assert "ABCDEF" not in provider.prompts[0]


def test_prompt_names_keys_and_statuses():
    prompt = build_classify_application_prompt("Your application", "Hello", "jobs@acme.com")
    for key in ("companyName", "jobProfile", "applicationStatus"):
        assert key in prompt
    for status in ApplicationStatus:
        assert status.value in prompt
    assert "jobs@acme.com" in prompt
    assert "email domain" in prompt


def test_get_provider_rejects_unknown_name():
    with pytest.raises(ValueError, match="Unknown AI provider"):
        get_provider({"ai": {"provider": "gemini"}})


def test_claude_provider_requires_api_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
        get_provider({"ai": {"provider": "claude"}})


def test_try_get_provider_returns_none_without_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert try_get_provider({"ai": {"provider": "openai"}}) is None


def test_claude_provider_sends_prompt(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    mock_client = Mock()
    mock_client.messages.create.return_value = Mock(content=[Mock(text=GOOD_REPLY)])

    with patch("apptrack.ai.claude.anthropic.Anthropic", return_value=mock_client):
        provider = get_provider({"ai": {"provider": "claude", "model": "claude-test"}})
        fields = provider.classify_application("Interview", "body", "jobs@acme.com")

    assert provider.model_name == "claude-test"
    assert fields.company_name == "Acme"
    kwargs = mock_client.messages.create.call_args.kwargs
    assert kwargs["model"] == "claude-test"
    assert "Interview" in kwargs["messages"][0]["content"]


def test_openai_provider_sends_prompt(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    mock_client = Mock()
    mock_client.chat.completions.create.return_value = Mock(
        choices=[Mock(message=Mock(content=GOOD_REPLY))]
    )

    with patch("apptrack.ai.openai_provider.OpenAI", return_value=mock_client):
        provider = get_provider({"ai": {"provider": "openai"}})
        fields = provider.classify_application("Interview", "body", "jobs@acme.com")

    assert provider.provider_name == "openai"
    assert provider.model_name == "gpt-4o-mini"
    assert fields.status == ApplicationStatus.INTERVIEW


def test_available_providers_follow_api_keys(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    available = get_available_providers()
    assert available["claude"] is True
    assert available["openai"] is False
