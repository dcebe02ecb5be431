"""Tests for SimpleInvoker, ChainInvoker and create_invoker."""

import pytest
from unittest.mock import MagicMock

from config import Settings
from errors import ConfigurationError, ProviderError
from providers import ChainInvoker, SimpleInvoker, create_invoker
from providers.base import LLMResponse
from providers.litellm_provider import LiteLLMProvider


def response(content: str) -> LLMResponse:
    return LLMResponse(content=content, input_tokens=1, output_tokens=1, model="m", provider="fake")


def fake_provider(*results):
    """Provider whose complete() returns or raises each result in turn."""
    provider = MagicMock()
    provider.name = "fake"
    provider.complete.side_effect = [
        r if isinstance(r, Exception) else response(r) for r in results
    ]
    return provider


@pytest.fixture
def clean_env(monkeypatch):
    for var in ("OPENAI_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(var, raising=False)


class TestSimpleInvoker:
    """Test the single-call invoker."""

    def test_returns_raw_text(self):
        provider = fake_provider("```dockerfile\nFROM x\n```")
        invoker = SimpleInvoker(provider, max_tokens=4000, temperature=0.3)
        assert invoker.invoke("prompt") == "```dockerfile\nFROM x\n```"
        call_kw = provider.complete.call_args[1]
        assert call_kw["user_message"] == "prompt"
        assert call_kw["temperature"] == 0.3
        assert call_kw["max_tokens"] == 4000
        assert "DevOps" in call_kw["system_prompt"]

    def test_failure_propagates_as_provider_error(self):
        invoker = SimpleInvoker(fake_provider(RuntimeError("401 unauthorized")))
        with pytest.raises(ProviderError) as exc:
            invoker.invoke("prompt")
        assert exc.value.attempts == 1
        assert "401" in str(exc.value)
        assert isinstance(exc.value.__cause__, RuntimeError)

    def test_single_call_only(self):
        provider = fake_provider(RuntimeError("boom"), "never reached")
        with pytest.raises(ProviderError):
            SimpleInvoker(provider).invoke("prompt")
        assert provider.complete.call_count == 1


class TestChainInvoker:
    """Test bounded retry with growing delay."""

    def test_success_first_attempt(self):
        sleeps = []
        provider = fake_provider('{"dockerfile": "FROM x"}')
        invoker = ChainInvoker(provider, sleep=sleeps.append)
        assert invoker.invoke("prompt") == '{"dockerfile": "FROM x"}'
        assert sleeps == []

    def test_defaults_for_chain_mode(self):
        invoker = ChainInvoker(fake_provider())
        assert invoker.max_tokens == 8192
        assert invoker.temperature == 0.1
        assert invoker.max_attempts == 3

    def test_retries_until_json_found(self):
        sleeps = []
        provider = fake_provider(RuntimeError("rate limited"), "no json here", '{"notes": "ok"}')
        invoker = ChainInvoker(provider, sleep=sleeps.append)
        assert invoker.invoke("prompt") == '{"notes": "ok"}'
        assert provider.complete.call_count == 3
        assert sleeps == [1.0, 2.0]

    def test_exhaustion_raises_one_aggregated_error(self):
        sleeps = []
        provider = fake_provider(RuntimeError("e1"), RuntimeError("e2"), RuntimeError("e3"), '{"late": 1}')
        invoker = ChainInvoker(provider, max_attempts=3, retry_delay=1.0, sleep=sleeps.append)
        with pytest.raises(ProviderError) as exc:
            invoker.invoke("prompt")
        assert provider.complete.call_count == 3
        assert sleeps == [1.0, 2.0]
        assert exc.value.attempts == 3
        assert "e3" in str(exc.value)
        assert isinstance(exc.value.__cause__, RuntimeError)

    def test_retry_delay_scales(self):
        sleeps = []
        provider = fake_provider("x", "y", "z")
        with pytest.raises(ProviderError):
            ChainInvoker(provider, retry_delay=0.5, sleep=sleeps.append).invoke("prompt")
        assert sleeps == [0.5, 1.0]


class TestCreateInvoker:
    """Test invoker construction from settings."""

    def test_missing_key(self, clean_env):
        config = Settings(api_provider="openai", openai_api_key="")
        with pytest.raises(ConfigurationError) as exc:
            create_invoker(config)
        assert "AUTO_DOCKER_OPENAI_API_KEY" in exc.value.remediation

    def test_anthropic_requires_chain_mode(self, clean_env):
        config = Settings(api_provider="anthropic", anthropic_api_key="k", generation_mode="simple")
        with pytest.raises(ConfigurationError, match="chain mode"):
            create_invoker(config)

    def test_simple_mode(self, clean_env):
        config = Settings(api_provider="openai", openai_api_key="sk-test", model="gpt-4o-mini")
        invoker = create_invoker(config)
        assert isinstance(invoker, SimpleInvoker)
        assert invoker.model == "gpt-4o-mini"
        assert invoker.temperature == 0.3
        assert invoker.max_tokens == 4000
        assert invoker.provider_label == "openai"

    def test_chain_mode(self, clean_env):
        config = Settings(
            api_provider="anthropic",
            anthropic_api_key="k",
            generation_mode="chain",
            chain_max_attempts=5,
        )
        invoker = create_invoker(config)
        assert isinstance(invoker, ChainInvoker)
        assert isinstance(invoker.provider, LiteLLMProvider)
        assert invoker.model is None
        assert invoker.max_attempts == 5
        assert invoker.temperature == 0.1
        assert invoker.max_tokens == 8192

    def test_explicit_sampling_overrides(self, clean_env):
        config = Settings(openai_api_key="k", temperature=0.7, max_tokens=1000)
        invoker = create_invoker(config)
        assert invoker.temperature == 0.7
        assert invoker.max_tokens == 1000

    def test_prebuilt_provider_skips_credentials(self, clean_env):
        config = Settings(openai_api_key="")
        invoker = create_invoker(config, provider=fake_provider())
        assert isinstance(invoker, SimpleInvoker)
