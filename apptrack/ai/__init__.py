"""
AI Package - AI-powered classification of job-application emails

Supports multiple AI providers: Claude and OpenAI.

Usage:
    from apptrack.ai import get_provider, ClassificationError

    provider = get_provider({'ai': {'provider': 'claude'}})
    try:
        fields = provider.classify_application(subject, body, sender)
    except ClassificationError:
        ...  # fall back to heuristics
"""

from .base import AIProvider, ClassificationError, DEFAULT_BODY_CHARS
from .factory import get_provider, try_get_provider, get_available_providers

__all__ = [
    # Base
    "AIProvider",
    "ClassificationError",
    "DEFAULT_BODY_CHARS",
    # Factory
    "get_provider",
    "try_get_provider",
    "get_available_providers",
]
