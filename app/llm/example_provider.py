"""Example completion provider.

Use this module as a reference when implementing new provider adapters.
Implement BaseLLMProvider and register the provider in LLMProviderFactory.
"""

from app.llm.base import BaseLLMProvider
from app.llm.models import CompletionRequest, CompletionResponse


class ExampleProvider(BaseLLMProvider):
    """Offline provider that answers every prompt with a fixed string.

    No network calls. Useful for local development and tests. Token counts
    are approximated from text length (four characters per token).
    """

    DEFAULT_RESPONSE = "[]"

    def __init__(self, response: str = DEFAULT_RESPONSE, model: str = "example") -> None:
        self._response = response
        self._model = model
        self.requests: list[CompletionRequest] = []

    def is_available(self) -> bool:
        return True

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request)
        return CompletionResponse(
            content=self._response,
            input_tokens=len(request.prompt) // 4,
            output_tokens=len(self._response) // 4,
            model=request.model or self._model,
        )
