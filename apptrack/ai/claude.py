"""
Claude AI Provider - classification through the Anthropic Messages API
"""

from typing import Dict, Optional

import anthropic

from .base import AIProvider, read_ai_settings, require_api_key

API_KEY_ENV = "ANTHROPIC_API_KEY"
DEFAULT_MODEL = "claude-sonnet-4-20250514"

SYSTEM_PROMPT = "You classify job application emails and reply with a single JSON object."


class ClaudeProvider(AIProvider):
    """Anthropic Claude; the default provider."""

    def __init__(self, config: Optional[Dict] = None):
        """
        Args:
            config: Configuration dict with optional 'ai.model' and 'ai.body_chars'

        Raises:
            ValueError: If ANTHROPIC_API_KEY is not set
        """
        self._model, self.body_chars = read_ai_settings(config, DEFAULT_MODEL)
        self._client = anthropic.Anthropic(api_key=require_api_key(API_KEY_ENV))

    @property
    def provider_name(self) -> str:
        return "claude"

    @property
    def model_name(self) -> str:
        return self._model

    def _generate(self, prompt: str, max_tokens: int = 500) -> str:
        response = self._client.messages.create(
            model=self._model,
            max_tokens=max_tokens,
            temperature=0,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
        # Only text blocks carry the answer
        return "".join(block.text for block in response.content if hasattr(block, "text")).strip()
