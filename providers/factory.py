"""Factory for creating LLM providers."""

import os
from typing import Dict, Optional, Tuple, Type

from errors import ConfigurationError

from .base import LLMProvider
from .gemini_provider import GeminiProvider
from .litellm_provider import LiteLLMProvider, MODEL_ALIASES, _to_litellm_model
from .openai_provider import OpenAIProvider


# Direct SDK providers used in simple mode
PROVIDERS: Dict[str, Type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "gpt": OpenAIProvider,
    "gemini": GeminiProvider,
    "google": GeminiProvider,
}

# Providers reachable through LiteLLM in chain mode
CHAIN_PROVIDERS: Tuple[str, ...] = tuple(MODEL_ALIASES.keys())

# Standard SDK environment variables, consulted when settings hold no key
STANDARD_KEY_VARS: Dict[str, Tuple[str, ...]] = {
    "openai": ("OPENAI_API_KEY",),
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "anthropic": ("ANTHROPIC_API_KEY",),
}

ALIASES = {"gpt": "openai", "google": "gemini", "claude": "anthropic"}


def canonical_provider(provider_name: str) -> str:
    key = provider_name.lower()
    return ALIASES.get(key, key)


def resolve_api_key(config, provider_name: str) -> str:
    """Credential for a provider: settings first, then the SDK's own env var."""
    key = canonical_provider(provider_name)
    api_key = config.api_key_for(key)
    if api_key:
        return api_key
    for var in STANDARD_KEY_VARS.get(key, ()):
        value = os.environ.get(var, "").strip()
        if value:
            return value
    return ""


def remediation_for(provider_name: str) -> str:
    key = canonical_provider(provider_name)
    return (
        f"Set AUTO_DOCKER_{key.upper()}_API_KEY in your environment or .env file, "
        f"or run with --provider to choose a configured provider."
    )


def get_provider(
    provider_name: str,
    api_key: Optional[str] = None,
    mode: str = "simple",
    model: Optional[str] = None,
) -> LLMProvider:
    """Get an LLM provider instance.

    Args:
        provider_name: openai, gemini or anthropic (aliases gpt, google, claude)
        api_key: Credential for the provider
        mode: "simple" for direct SDK clients, "chain" for LiteLLM
        model: Model name; in chain mode it is mapped to a LiteLLM model string

    Returns:
        LLMProvider instance

    Raises:
        ConfigurationError: Unknown provider, or a provider not offered in this mode

    Examples:
        get_provider("openai")
        get_provider("gemini", mode="chain", model="gemini-2.5-pro")
    """
    key = canonical_provider(provider_name)
    if mode == "chain":
        if key not in CHAIN_PROVIDERS:
            raise ConfigurationError(
                f"Unknown provider: {provider_name}. Available: {list(CHAIN_PROVIDERS)}",
                remediation="Choose one of: " + ", ".join(CHAIN_PROVIDERS),
            )
        return LiteLLMProvider(_to_litellm_model(key, model), api_key=api_key)

    if key not in PROVIDERS:
        if key in CHAIN_PROVIDERS:
            raise ConfigurationError(
                f"Provider '{key}' is only available in chain mode",
                remediation="Re-run with --mode chain, or choose openai or gemini.",
            )
        raise ConfigurationError(
            f"Unknown provider: {provider_name}. Available: openai, gemini",
            remediation="Choose openai or gemini, or use --mode chain for anthropic.",
        )
    return PROVIDERS[key](api_key=api_key)


def list_providers(config) -> Dict[str, bool]:
    """List all providers and whether a credential is configured.

    Returns:
        Dict mapping provider name to availability status
    """
    return {name: bool(resolve_api_key(config, name)) for name in CHAIN_PROVIDERS}
