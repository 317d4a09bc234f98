import pytest

from app.config.settings import Settings
from app.llm.example_provider import ExampleProvider
from app.llm.factory import LLMProviderFactory
from app.llm.openai_provider import OpenAIProvider


class TestLLMProviderFactory:
    def test_none_disables_remote_calls(self) -> None:
        assert LLMProviderFactory.create(Settings(llm_provider="none")) is None

    def test_creates_example_provider(self) -> None:
        provider = LLMProviderFactory.create(Settings(llm_provider="example"))
        assert isinstance(provider, ExampleProvider)

    def test_creates_openai_provider(self) -> None:
        provider = LLMProviderFactory.create(
            Settings(llm_provider="openai", llm_api_key="k", llm_model_name="gpt-4o-mini")
        )
        assert isinstance(provider, OpenAIProvider)
        assert provider.model == "gpt-4o-mini"

    def test_provider_name_is_case_insensitive(self) -> None:
        provider = LLMProviderFactory.create(Settings(llm_provider="OpenAI", llm_api_key="k"))
        assert isinstance(provider, OpenAIProvider)

    def test_openai_compatible_requires_base_url(self) -> None:
        with pytest.raises(ValueError, match="llm_base_url"):
            LLMProviderFactory.create(Settings(llm_provider="openai_compatible"))

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            LLMProviderFactory.create(Settings(llm_provider="carrier-pigeon"))

    def test_known_compatible_provider_gets_default_base_url(self) -> None:
        settings = Settings(llm_provider="groq")
        assert LLMProviderFactory._resolve_base_url("groq", settings) == (
            "https://api.groq.com/openai/v1"
        )

    def test_explicit_base_url_overrides_default(self) -> None:
        settings = Settings(llm_provider="ollama", llm_base_url="http://gpu:11434/v1")
        assert LLMProviderFactory._resolve_base_url("ollama", settings) == "http://gpu:11434/v1"


class TestTier3Provider:
    def test_disabled_without_model(self) -> None:
        assert LLMProviderFactory.create_tier3(Settings(llm_provider="openai")) is None

    def test_uses_tier3_model(self) -> None:
        provider = LLMProviderFactory.create_tier3(
            Settings(llm_provider="openai", llm_api_key="k", llm_tier3_model_name="gpt-4o")
        )
        assert isinstance(provider, OpenAIProvider)
        assert provider.model == "gpt-4o"
