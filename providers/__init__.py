"""LLM Provider abstraction and model invokers."""

from .base import LLMProvider, LLMResponse
from .factory import get_provider, list_providers, resolve_api_key
from .invoker import ModelInvoker, SimpleInvoker, ChainInvoker, create_invoker

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "get_provider",
    "list_providers",
    "resolve_api_key",
    "ModelInvoker",
    "SimpleInvoker",
    "ChainInvoker",
    "create_invoker",
]
