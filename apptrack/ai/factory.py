"""
AI Provider Factory - picks the classification backend from configuration

Providers are imported lazily, so a missing SDK only matters when that
provider is selected.
"""

import importlib
import logging
import os
from typing import Any, Dict, Optional, Type

from .base import AIProvider

logger = logging.getLogger(__name__)

# name -> (class path, SDK package, API key variable)
PROVIDERS = {
    "claude": ("apptrack.ai.claude.ClaudeProvider", "anthropic", "ANTHROPIC_API_KEY"),
    "openai": ("apptrack.ai.openai_provider.OpenAIProvider", "openai", "OPENAI_API_KEY"),
}

DEFAULT_PROVIDER = "claude"


def _provider_class(name: str) -> Type[AIProvider]:
    class_path = PROVIDERS[name][0]
    module_path, class_name = class_path.rsplit(".", 1)
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ImportError(f"{name} provider needs the '{PROVIDERS[name][1]}' package: {e}") from e
    return getattr(module, class_name)


def get_provider(config: Optional[Dict[str, Any]] = None) -> AIProvider:
    """
    Instantiate the provider named by 'ai.provider' (default: claude).

    Args:
        config: Configuration dict; read from apptrack.config.get_config()
            when omitted

    Raises:
        ValueError: If the provider is unknown or its API key is not set
        ImportError: If the provider's SDK is not installed

    Example:
        >>> get_provider({'ai': {'provider': 'openai'}}).provider_name
        'openai'
    """
    if config is None:
        from apptrack.config import get_config

        config = get_config().to_dict()

    name = ((config.get("ai") or {}).get("provider") or DEFAULT_PROVIDER).lower()
    if name not in PROVIDERS:
        raise ValueError(
            f"Unknown AI provider: '{name}'. Available providers: {', '.join(PROVIDERS)}"
        )
    return _provider_class(name)(config)


def try_get_provider(config: Optional[Dict[str, Any]] = None) -> Optional[AIProvider]:
    """
    Like get_provider, but returns None when no provider can be built.

    Classification still works without a provider: every message goes
    through the heuristic classifier.
    """
    try:
        provider = get_provider(config)
    except (ValueError, ImportError) as e:
        logger.warning(f"AI classification disabled, using heuristics only: {e}")
        return None

    logger.info(f"Using AI provider {provider.provider_name} ({provider.model_name})")
    return provider


def get_available_providers() -> Dict[str, bool]:
    """
    Report which providers are usable (SDK importable and API key set).

    Example:
        >>> get_available_providers()
        {'claude': True, 'openai': False}
    """
    available = {}
    for name, (_, package, env_var) in PROVIDERS.items():
        try:
            importlib.import_module(package)
        except ImportError:
            available[name] = False
        else:
            available[name] = bool(os.environ.get(env_var))
    return available
