import httpx
import openai

from app.llm.base import BaseLLMProvider
from app.llm.exceptions import LLMNetworkError, LLMResponseError
from app.llm.models import CompletionRequest, CompletionResponse, FinishReason


class OpenAIProvider(BaseLLMProvider):
    """Completion provider built on the OpenAI-compatible chat API."""

    _FINISH_REASONS = {
        "stop": FinishReason.STOP,
        "length": FinishReason.LENGTH,
    }

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._client = openai.OpenAI(
            api_key=api_key or "unused",
            timeout=timeout_seconds,
            base_url=base_url,
        )

    @property
    def model(self) -> str:
        return self._model

    def is_available(self) -> bool:
        return bool(self._model)

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        model = request.model or self._model
        messages = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.prompt})

        kwargs: dict[str, object] = {}
        if request.json_schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": "transaction_result",
                    "strict": True,
                    "schema": request.json_schema,
                },
            }

        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
                messages=messages,
                **kwargs,
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise LLMNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise LLMNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise LLMResponseError("AI returned no choices")
        choice = response.choices[0]
        content = choice.message.content
        if content is None:
            raise LLMResponseError("AI returned empty response")

        usage = response.usage
        return CompletionResponse(
            content=content,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=response.model or model,
            finish_reason=self._FINISH_REASONS.get(choice.finish_reason, FinishReason.ERROR),
        )
