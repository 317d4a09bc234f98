from abc import ABC, abstractmethod

from app.llm.models import CompletionRequest, CompletionResponse


class BaseLLMProvider(ABC):
    """Contract for prompt -> completion services."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return True when the provider is configured and may be called."""

    @abstractmethod
    def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Run one completion.

        Raises:
            LLMNetworkError: on connection, timeout or API failures.
            LLMResponseError: when the answer has no content.
        """


class BaseCostTracker(ABC):
    """Contract for the shared AI spending ledger."""

    @abstractmethod
    def can_execute(self, estimated_cost_usd: float) -> bool:
        """Return True if a call of this estimated cost fits the budgets."""

    @abstractmethod
    def try_reserve(self, estimated_cost_usd: float) -> bool:
        """Atomically check the budgets and hold the estimate until recorded."""

    @abstractmethod
    def release(self, estimated_cost_usd: float) -> None:
        """Drop a reservation for a call that never completed."""

    @abstractmethod
    def record(
        self,
        input_tokens: int,
        output_tokens: int,
        model: str,
        reserved_usd: float = 0.0,
    ) -> float:
        """Record actual usage, settle any reservation, return the cost in USD."""
