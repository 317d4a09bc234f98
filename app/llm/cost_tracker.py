"""Daily and monthly AI spending ledger shared by every remote call."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime
from typing import ClassVar

from app.llm.base import BaseCostTracker
from app.llm.models import UsageRecord, UsageStats
from app.logging.logger import Log


class AICostTracker(BaseCostTracker):
    """Budget guard for completion calls.

    All reads and writes go through one lock, and ``try_reserve`` holds the
    estimated cost until ``record`` or ``release`` settles it, so concurrent
    callers cannot pass the budget check together and overspend.
    """

    DEFAULT_DAILY_BUDGET_USD: ClassVar[float] = 0.10
    DEFAULT_MONTHLY_BUDGET_USD: ClassVar[float] = 2.00

    # USD per 1K tokens: (input, output)
    MODEL_PRICING: ClassVar[dict[str, tuple[float, float]]] = {
        "gpt-4o-mini": (0.00015, 0.0006),
        "gpt-4o": (0.005, 0.015),
        "gpt-4-turbo": (0.01, 0.03),
        "claude-3-5-haiku-latest": (0.0008, 0.004),
        "claude-sonnet-4-20250514": (0.003, 0.015),
        "claude-opus-4-20250514": (0.015, 0.075),
    }
    DEFAULT_PRICING: ClassVar[tuple[float, float]] = (0.001, 0.005)

    _MAX_HISTORY: ClassVar[int] = 1000

    def __init__(
        self,
        daily_budget_usd: float = DEFAULT_DAILY_BUDGET_USD,
        monthly_budget_usd: float = DEFAULT_MONTHLY_BUDGET_USD,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._daily_budget = daily_budget_usd
        self._monthly_budget = monthly_budget_usd
        self._clock = clock
        self._lock = threading.Lock()
        self._daily_spent = 0.0
        self._monthly_spent = 0.0
        self._reserved = 0.0
        self._history: list[UsageRecord] = []
        now = clock()
        self._day = now.date()
        self._month = (now.year, now.month)

    @classmethod
    def calculate_cost(cls, input_tokens: int, output_tokens: int, model: str) -> float:
        input_price, output_price = cls.MODEL_PRICING.get(model, cls.DEFAULT_PRICING)
        return input_tokens / 1000 * input_price + output_tokens / 1000 * output_price

    def can_execute(self, estimated_cost_usd: float) -> bool:
        with self._lock:
            self._roll_over()
            return self._fits(estimated_cost_usd)

    def try_reserve(self, estimated_cost_usd: float) -> bool:
        with self._lock:
            self._roll_over()
            if not self._fits(estimated_cost_usd):
                Log.warning(
                    f"AI budget exhausted: daily {self._daily_spent:.4f}/"
                    f"{self._daily_budget:.2f} USD, monthly {self._monthly_spent:.4f}/"
                    f"{self._monthly_budget:.2f} USD"
                )
                return False
            self._reserved += estimated_cost_usd
            return True

    def release(self, estimated_cost_usd: float) -> None:
        with self._lock:
            self._reserved = max(0.0, self._reserved - estimated_cost_usd)

    def record(
        self,
        input_tokens: int,
        output_tokens: int,
        model: str,
        reserved_usd: float = 0.0,
    ) -> float:
        cost = self.calculate_cost(input_tokens, output_tokens, model)
        with self._lock:
            self._roll_over()
            self._reserved = max(0.0, self._reserved - reserved_usd)
            self._daily_spent += cost
            self._monthly_spent += cost
            self._history.append(
                UsageRecord(
                    timestamp=self._clock(),
                    model=model,
                    input_tokens=input_tokens,
                    output_tokens=output_tokens,
                    cost_usd=cost,
                )
            )
            del self._history[: -self._MAX_HISTORY]
        Log.debug(
            f"AI usage recorded: {model} in={input_tokens} out={output_tokens} "
            f"cost={cost:.6f} USD"
        )
        return cost

    @property
    def usage_history(self) -> list[UsageRecord]:
        with self._lock:
            return list(self._history)

    def get_usage_stats(self) -> UsageStats:
        with self._lock:
            self._roll_over()
            by_model: dict[str, float] = {}
            for item in self._history:
                by_model[item.model] = by_model.get(item.model, 0.0) + item.cost_usd
            return UsageStats(
                daily_spent_usd=self._daily_spent,
                monthly_spent_usd=self._monthly_spent,
                daily_budget_usd=self._daily_budget,
                monthly_budget_usd=self._monthly_budget,
                request_count=len(self._history),
                total_input_tokens=sum(r.input_tokens for r in self._history),
                total_output_tokens=sum(r.output_tokens for r in self._history),
                by_model=by_model,
            )

    def reset(self) -> None:
        with self._lock:
            self._daily_spent = 0.0
            self._monthly_spent = 0.0
            self._reserved = 0.0
            self._history.clear()

    # Callers must hold the lock.

    def _fits(self, estimated_cost_usd: float) -> bool:
        pending = self._reserved + estimated_cost_usd
        return (
            self._daily_spent + pending <= self._daily_budget
            and self._monthly_spent + pending <= self._monthly_budget
        )

    def _roll_over(self) -> None:
        now = self._clock()
        if (now.year, now.month) != self._month:
            self._month = (now.year, now.month)
            self._monthly_spent = 0.0
        if now.date() != self._day:
            self._day = now.date()
            self._daily_spent = 0.0
