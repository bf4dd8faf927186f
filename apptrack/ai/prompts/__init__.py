"""
Shared AI Prompt Templates

Using the same prompts ensures consistent output format regardless of which
AI backend is used.
"""

from .classify_application import build_classify_application_prompt

__all__ = [
    'build_classify_application_prompt',
]
