from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class FinishReason(str, Enum):
    STOP = "STOP"
    LENGTH = "LENGTH"
    ERROR = "ERROR"


@dataclass(frozen=True)
class CompletionRequest:
    """A single prompt sent to a completion provider."""

    prompt: str
    model: str | None = None  # provider default when None
    max_tokens: int = 1024
    temperature: float = 0.1
    system_prompt: str = ""
    json_schema: dict[str, object] | None = None  # structured output, when supported


@dataclass(frozen=True)
class CompletionResponse:
    """Provider answer plus the token usage needed for cost accounting."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    finish_reason: FinishReason = FinishReason.STOP


@dataclass(frozen=True)
class UsageRecord:
    """One recorded completion call."""

    timestamp: datetime
    model: str
    input_tokens: int
    output_tokens: int
    cost_usd: float


@dataclass(frozen=True)
class UsageStats:
    """Snapshot of the cost ledger."""

    daily_spent_usd: float
    monthly_spent_usd: float
    daily_budget_usd: float
    monthly_budget_usd: float
    request_count: int
    total_input_tokens: int
    total_output_tokens: int
    by_model: dict[str, float] = field(default_factory=dict)

    @property
    def daily_remaining_usd(self) -> float:
        return max(0.0, self.daily_budget_usd - self.daily_spent_usd)

    @property
    def monthly_remaining_usd(self) -> float:
        return max(0.0, self.monthly_budget_usd - self.monthly_spent_usd)
