import logging
import random
import time
from collections import defaultdict
from typing import Any, Dict, Optional

from .exceptions.chaos_exception import ChaosException

logger = logging.getLogger(__name__)


class ChaosConfig:

    """
    Random failure and delay injection for history engine calls.

    Args:
        enabled (bool): Whether any chaos is injected. Defaults to False.
        failure_rate (float): Probability that maybe_fail raises. Defaults to 0.1.
        delay_chance (float): Probability that maybe_delay sleeps. Defaults to 0.2.
        max_delay (float): Upper bound of an injected delay in seconds. Defaults to 2.0.
        seed (int): Seed for the random source, for reproducible runs.
    """
    def __init__(
            self,
            enabled: bool = False,
            failure_rate: float = 0.1,
            delay_chance: float = 0.2,
            max_delay: float = 2.0,
            seed: Optional[int] = None,
    ):
        for name, rate in (("failure_rate", failure_rate), ("delay_chance", delay_chance)):
            if not 0.0 <= rate <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1: {rate}")
        if max_delay < 0:
            raise ValueError(f"max_delay must be non-negative: {max_delay}")

        self.enabled = enabled
        self.failure_rate = failure_rate
        self.delay_chance = delay_chance
        self.max_delay = max_delay
        self.random = random.Random(seed)

        self.total_operations = 0
        self.total_delay_time = 0.0
        self.failures_by_context = defaultdict(int)
        self.delays_by_context = defaultdict(int)

    def maybe_fail(self, context: str) -> None:
        """Raise ChaosException for ``context`` with probability failure_rate."""
        self.total_operations += 1
        if self.enabled and self.random.random() < self.failure_rate:
            self.failures_by_context[context] += 1
            logger.warning("[CHAOS] Injected failure in %s", context)
            raise ChaosException(f"Chaos failure occurred during {context}.", context)

    def maybe_delay(self, context: str) -> None:
        """Sleep up to max_delay seconds with probability delay_chance."""
        if self.enabled and self.random.random() < self.delay_chance:
            delay = self.random.uniform(0, self.max_delay)
            self.delays_by_context[context] += 1
            self.total_delay_time += delay
            logger.info("[CHAOS] Injected delay of %.2f seconds in %s", delay, context)
            time.sleep(delay)

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "total_operations": self.total_operations,
            "failures_injected": sum(self.failures_by_context.values()),
            "delays_injected": sum(self.delays_by_context.values()),
            "total_delay_time": round(self.total_delay_time, 2),
            "failures_by_context": dict(self.failures_by_context),
            "delays_by_context": dict(self.delays_by_context),
        }

    def print_metrics(self) -> None:
        metrics = self.get_metrics()

        print("\n=== Chaos Metrics ===")
        for key, value in metrics.items():
            if isinstance(value, dict):
                breakdown = ", ".join(f"{context}={count}" for context, count in sorted(value.items()))
                value = breakdown or "none"
            print(f"{key.replace('_', ' ').capitalize()}: {value}")
        print("=====================\n")
