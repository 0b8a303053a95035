"""
Token usage tracker for language-model calls.

Keeps an in-process record of every call, including prompt-cache counters,
and logs each one as it arrives.
"""

import logging
import time
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Pricing per 1M tokens
PRICING = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60, "cache_read": 0.075},
    "gpt-4o": {"input": 2.50, "output": 10.00, "cache_read": 1.25},
    "gpt-4.1-mini": {"input": 0.40, "output": 1.60, "cache_read": 0.10},
}


@dataclass
class APICall:
    timestamp: float
    model: str
    purpose: str  # "chat"
    input_tokens: int
    output_tokens: int
    cache_read_tokens: int
    cache_creation_tokens: int
    cost_usd: float


class TokenTracker:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._session_calls: list[APICall] = []
        return cls._instance

    def log(
        self,
        model: str,
        purpose: str,
        input_tokens: int,
        output_tokens: int = 0,
        cache_read_tokens: int = 0,
        cache_creation_tokens: int = 0,
    ) -> APICall:
        pricing = PRICING.get(model, {"input": 0.0, "output": 0.0, "cache_read": 0.0})
        uncached = max(input_tokens - cache_read_tokens, 0)
        cost = (
            uncached * pricing["input"]
            + cache_read_tokens * pricing["cache_read"]
            + output_tokens * pricing["output"]
        ) / 1_000_000

        call = APICall(
            timestamp=time.time(),
            model=model,
            purpose=purpose,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cache_read_tokens=cache_read_tokens,
            cache_creation_tokens=cache_creation_tokens,
            cost_usd=cost,
        )
        self._session_calls.append(call)

        logger.info(
            "model=%s purpose=%s input_tokens=%d output_tokens=%d cache_read_tokens=%d "
            "cache_creation_tokens=%d cost=$%.6f",
            model, purpose, input_tokens, output_tokens, cache_read_tokens,
            cache_creation_tokens, cost,
        )
        return call

    @property
    def calls(self) -> list[APICall]:
        return list(self._session_calls)

    def summary(self) -> dict:
        by_purpose: dict[str, dict] = {}
        for call in self._session_calls:
            if call.purpose not in by_purpose:
                by_purpose[call.purpose] = {
                    "count": 0, "input_tokens": 0, "output_tokens": 0,
                    "cache_read_tokens": 0, "cost_usd": 0.0,
                }
            s = by_purpose[call.purpose]
            s["count"] += 1
            s["input_tokens"] += call.input_tokens
            s["output_tokens"] += call.output_tokens
            s["cache_read_tokens"] += call.cache_read_tokens
            s["cost_usd"] += call.cost_usd

        total_cost = sum(s["cost_usd"] for s in by_purpose.values())
        total_calls = sum(s["count"] for s in by_purpose.values())
        return {"by_purpose": by_purpose, "total_calls": total_calls, "total_cost_usd": total_cost}

    def reset(self):
        self._session_calls.clear()


# Module-level convenience
tracker = TokenTracker()
