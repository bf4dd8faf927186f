"""
Base AI Provider - Abstract base class for AI providers

This module defines the interface for AI providers (Claude, OpenAI).
Providers only implement raw text generation; prompt construction,
JSON extraction and validation are shared here so every backend returns
the same ClassificationFields for the same model output.
"""

import json
import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from apptrack.ai.prompts import build_classify_application_prompt
from apptrack.models import ApplicationStatus, ClassificationFields

logger = logging.getLogger(__name__)

# Body characters sent to the model
DEFAULT_BODY_CHARS = 1000

REQUIRED_KEYS = ("companyName", "jobProfile", "applicationStatus")


def read_ai_settings(config: Optional[Dict[str, Any]], default_model: str) -> Tuple[str, int]:
    """Return (model, body_chars) from the 'ai' section of a config dict."""
    ai_config = (config or {}).get("ai") or {}
    return (
        ai_config.get("model") or default_model,
        ai_config.get("body_chars") or DEFAULT_BODY_CHARS,
    )


def require_api_key(env_var: str) -> str:
    """
    Read a provider API key from the environment.

    Raises:
        ValueError: If the variable is unset or empty
    """
    api_key = os.environ.get(env_var)
    if not api_key:
        raise ValueError(f"{env_var} not found. Set it in .env or environment variables.")
    return api_key


class ClassificationError(Exception):
    """
    Raised when AI classification is unavailable for a message.

    Covers provider/network failures, responses without JSON, malformed
    JSON and payloads that fail validation. Callers fall back to the
    heuristic classifier.
    """


class AIProvider(ABC):
    """
    Abstract base class for AI providers.

    All providers must return data in the same format to ensure
    the application works identically regardless of which AI is used.
    """

    body_chars: int = DEFAULT_BODY_CHARS

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of this AI provider.

        Returns:
            str: Provider name (e.g., 'claude', 'openai')
        """
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """
        Return the model being used.

        Returns:
            str: Model identifier (e.g., 'claude-sonnet-4-20250514', 'gpt-4o-mini')
        """
        pass

    @abstractmethod
    def _generate(self, prompt: str, max_tokens: int = 500) -> str:
        """
        Send a prompt to the model and return its free-form text reply.

        Implementations may raise any exception; classify_application
        converts it to ClassificationError.
        """
        pass

    def classify_application(self, subject: str, body: str, sender: str) -> ClassificationFields:
        """
        Extract company, role and status from a job-application email.

        Args:
            subject: Email subject line
            body: Plain-text email body (truncated to body_chars)
            sender: Raw From header

        Returns:
            ClassificationFields parsed from the model's JSON reply

        Raises:
            ClassificationError: If the model is unreachable or its reply
                does not contain a valid classification

        Example:
            >>> provider.classify_application(
            ...     "Interview Request - Software Engineer",
            ...     "Hi, we'd like to schedule an interview...",
            ...     "Acme Recruiting <jobs@acme.com>",
            ... )
            ClassificationFields(company_name='Acme', job_profile='Software Engineer',
                                 status=<ApplicationStatus.INTERVIEW: 'Interview'>)
        """
        prompt = build_classify_application_prompt(subject, (body or "")[: self.body_chars], sender)

        try:
            response = self._generate(prompt, max_tokens=500)
        except Exception as e:
            raise ClassificationError(f"{self.provider_name} request failed: {e}") from e

        data = self._parse_json_response(response)
        return self._to_fields(data)

    def _parse_json_response(self, text: str) -> Dict[str, Any]:
        """
        Extract the JSON object from an AI response that might include preamble.

        Takes the first greedy brace-delimited match, so markdown fences and
        explanatory text around the object are ignored.

        Raises:
            ClassificationError: If no JSON object can be extracted

        Example:
            >>> provider._parse_json_response('Here is the result: {"key": "value"}')
            {"key": "value"}
        """
        if not text:
            raise ClassificationError("Empty response text")

        match = re.search(r"\{[\s\S]*\}", text)
        if not match:
            raise ClassificationError(f"No JSON found in response: {text[:200]}")

        try:
            data = json.loads(match.group())
        except json.JSONDecodeError as e:
            raise ClassificationError(f"Malformed JSON in response: {e}") from e

        if not isinstance(data, dict):
            raise ClassificationError("Response JSON is not an object")
        return data

    @staticmethod
    def _to_fields(data: Dict[str, Any]) -> ClassificationFields:
        """Validate the parsed payload against the three-key contract."""
        missing = [k for k in REQUIRED_KEYS if not isinstance(data.get(k), str) or not data[k].strip()]
        if missing:
            raise ClassificationError(f"Response missing fields: {', '.join(missing)}")

        try:
            status = ApplicationStatus.coerce(data["applicationStatus"])
        except ValueError as e:
            raise ClassificationError(str(e)) from e

        return ClassificationFields(
            company_name=data["companyName"].strip(),
            job_profile=data["jobProfile"].strip(),
            status=status,
        )
