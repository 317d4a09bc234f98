from typing import ClassVar

from app.config.settings import Settings
from app.llm.base import BaseLLMProvider
from app.llm.example_provider import ExampleProvider
from app.llm.openai_provider import OpenAIProvider


class LLMProviderFactory:
    """Creates the configured completion provider, or None when disabled."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseLLMProvider | None:
        """Create the Tier 2 provider from application settings."""
        return cls._build(settings, settings.llm_model_name)

    @classmethod
    def create_tier3(cls, settings: Settings) -> BaseLLMProvider | None:
        """Create the stronger Tier 3 provider; None unless a model is configured."""
        model = settings.llm_tier3_model_name.strip()
        if not model:
            return None
        return cls._build(settings, model)

    @classmethod
    def _build(cls, settings: Settings, model: str) -> BaseLLMProvider | None:
        provider = settings.llm_provider.lower()
        if provider == "none":
            return None
        if provider == "example":
            return ExampleProvider(model=model or "example")
        return OpenAIProvider(
            api_key=settings.llm_api_key,
            model=model,
            timeout_seconds=settings.llm_timeout_seconds or 30,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.llm_base_url.strip()
            if not url:
                raise ValueError(
                    "llm_base_url is required for llm_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return settings.llm_base_url.strip() or default_base_url
        supported = [
            "none",
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown LLM provider '{provider}'. Choose from: {supported}")
