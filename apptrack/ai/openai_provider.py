"""
OpenAI Provider - GPT classification via chat completions
"""

from typing import Dict, Optional

from openai import OpenAI

from .base import AIProvider, read_ai_settings, require_api_key

API_KEY_ENV = "OPENAI_API_KEY"
DEFAULT_MODEL = "gpt-4o-mini"

SYSTEM_PROMPT = "You are a helpful assistant that analyzes job application emails."


class OpenAIProvider(AIProvider):
    """OpenAI chat-completions provider."""

    def __init__(self, config: Optional[Dict] = None):
        self._model, self.body_chars = read_ai_settings(config, DEFAULT_MODEL)
        self._client = OpenAI(api_key=require_api_key(API_KEY_ENV))

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

    def _generate(self, prompt: str, max_tokens: int = 500) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.1,
            max_tokens=max_tokens,
        )
        return (response.choices[0].message.content or "").strip()
