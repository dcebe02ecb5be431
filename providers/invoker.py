"""Model invokers: one configured provider behind a uniform invoke(prompt) call.

SimpleInvoker makes exactly one call. ChainInvoker expects a JSON object in
the response and retries with a growing delay until one is found or the
attempt budget runs out.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from errors import AutoDockerError, ConfigurationError, ProviderError
from parsing import extract_json_object
from prompts import SYSTEM_PROMPT

from .base import LLMProvider
from .factory import canonical_provider, get_provider, remediation_for, resolve_api_key

logger = logging.getLogger(__name__)


class ModelInvoker(ABC):
    """Submits a prompt to the active provider and returns raw text."""

    def __init__(
        self,
        provider: LLMProvider,
        model: Optional[str] = None,
        max_tokens: int = 4000,
        temperature: float = 0.3,
        system_prompt: str = SYSTEM_PROMPT,
        provider_label: Optional[str] = None,
    ):
        self.provider = provider
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.system_prompt = system_prompt
        self.provider_label = provider_label or provider.name

    @abstractmethod
    def invoke(self, prompt: str) -> str:
        """Run the prompt and return the raw response text.

        Raises:
            ProviderError: If the provider call fails
        """
        pass

    def _call(self, prompt: str) -> str:
        response = self.provider.complete(
            system_prompt=self.system_prompt,
            user_message=prompt,
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        logger.debug(
            "%s/%s: %d input tokens, %d output tokens",
            self.provider_label, response.model, response.input_tokens, response.output_tokens,
        )
        return response.content or ""


class SimpleInvoker(ModelInvoker):
    """Single direct call; the first failure propagates."""

    def invoke(self, prompt: str) -> str:
        try:
            return self._call(prompt)
        except AutoDockerError:
            raise
        except Exception as e:
            raise ProviderError(
                f"{self.provider_label} request failed: {e}",
                provider=self.provider_label,
                attempts=1,
            ) from e


class ChainInvoker(ModelInvoker):
    """Structured-chain call with bounded retry.

    A response without a decodable JSON object counts as a failed attempt.
    Attempt N is followed by a delay of N * retry_delay seconds.
    """

    def __init__(
        self,
        provider: LLMProvider,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        **kwargs,
    ):
        kwargs.setdefault("max_tokens", 8192)
        kwargs.setdefault("temperature", 0.1)
        super().__init__(provider, **kwargs)
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.sleep = sleep

    def invoke(self, prompt: str) -> str:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                content = self._call(prompt)
                extract_json_object(content)
                return content
            except Exception as e:
                last_error = e
                logger.warning("Generation attempt %d/%d failed: %s", attempt, self.max_attempts, e)
                if attempt < self.max_attempts:
                    self.sleep(attempt * self.retry_delay)

        raise ProviderError(
            f"{self.provider_label} generation failed after {self.max_attempts} attempts: {last_error}",
            provider=self.provider_label,
            attempts=self.max_attempts,
        ) from last_error


def create_invoker(config, provider: Optional[LLMProvider] = None) -> ModelInvoker:
    """Build the invoker for the configured provider and generation mode.

    Args:
        config: Settings instance
        provider: Pre-built provider (skips credential lookup)

    Returns:
        SimpleInvoker or ChainInvoker

    Raises:
        ConfigurationError: Missing credential or unsupported provider/mode combination
    """
    name = canonical_provider(config.api_provider)
    chain = config.generation_mode == "chain"

    if provider is None:
        api_key = resolve_api_key(config, name)
        # Validates the provider/mode combination before the credential
        provider = get_provider(name, api_key=api_key or None, mode=config.generation_mode, model=config.model)
        if not api_key:
            raise ConfigurationError(
                f"No API key configured for {name}",
                remediation=remediation_for(name),
            )

    common = dict(
        # LiteLLM providers carry the resolved model string already
        model=None if chain else (config.model or None),
        max_tokens=config.effective_max_tokens,
        temperature=config.effective_temperature,
        provider_label=name,
    )
    if chain:
        return ChainInvoker(
            provider,
            max_attempts=config.chain_max_attempts,
            retry_delay=config.chain_retry_delay_seconds,
            **common,
        )
    return SimpleInvoker(provider, **common)
