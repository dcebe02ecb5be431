"""LiteLLM-backed provider used by structured-chain generation."""

from typing import Optional

from .base import LLMProvider, LLMResponse


# Map provider + optional model -> LiteLLM model string
MODEL_ALIASES = {
    "openai": {
        None: "gpt-4o-mini",
        "gpt-4o": "gpt-4o",
        "gpt-4o-mini": "gpt-4o-mini",
        "gpt-4-turbo": "gpt-4-turbo",
        "gpt-4": "gpt-4",
        "gpt-3.5-turbo": "gpt-3.5-turbo",
    },
    "gemini": {
        None: "gemini/gemini-2.0-flash",
        "gemini-pro": "gemini/gemini-2.5-pro",
        "gemini-2.0-flash": "gemini/gemini-2.0-flash",
        "gemini-2.5-flash": "gemini/gemini-2.5-flash",
        "gemini-2.5-pro": "gemini/gemini-2.5-pro",
    },
    "anthropic": {
        None: "anthropic/claude-sonnet-4-20250514",
        "claude-sonnet": "anthropic/claude-sonnet-4-20250514",
        "claude-opus": "anthropic/claude-opus-4-20250514",
        "claude-haiku": "anthropic/claude-3-5-haiku-20241022",
    },
}


def _to_litellm_model(provider_name: str, model: Optional[str]) -> str:
    """Map provider + model to LiteLLM model string."""
    key = provider_name.lower()
    if key not in MODEL_ALIASES:
        raise ValueError(f"Unknown provider: {provider_name}. Available: {list(MODEL_ALIASES.keys())}")
    aliases = MODEL_ALIASES[key]
    if not model:
        return aliases[None]
    if "/" in model:
        return model

    model_lower = model.lower()
    # Prefer longest alias match first (e.g. gpt-4o-mini before gpt-4o)
    for alias in sorted((a for a in aliases if a), key=len, reverse=True):
        if model_lower == alias:
            return aliases[alias]
    if key == "openai":
        return model  # OpenAI works without prefix
    return f"{key}/{model}"


class LiteLLMProvider(LLMProvider):
    """Single provider that delegates to litellm.completion()."""

    def __init__(self, default_model: str, api_key: Optional[str] = None):
        """Initialize with the LiteLLM model string to use by default.

        Args:
            default_model: LiteLLM model string (e.g. gpt-4o-mini, gemini/gemini-2.0-flash).
            api_key: Credential passed per call; LiteLLM falls back to its env vars if None.
        """
        self._default_model = default_model
        self.api_key = api_key

    @property
    def name(self) -> str:
        return "litellm"

    @property
    def default_model(self) -> str:
        return self._default_model

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        model: Optional[str] = None,
        max_tokens: int = 8192,
        temperature: float = 0.1,
    ) -> LLMResponse:
        import litellm

        resolved_model = model or self._default_model
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ]
        kwargs = {
            "model": resolved_model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        response = litellm.completion(**kwargs)

        content = response.choices[0].message.content or ""
        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "prompt_tokens", 0) or 0
        output_tokens = getattr(usage, "completion_tokens", 0) or 0
        model_id = getattr(response, "model", None) or resolved_model

        return LLMResponse(
            content=content,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model=model_id,
            provider=self.name,
        )

    def is_available(self) -> bool:
        return bool(self._default_model)
