"""Randomized per-row refresh delays.

Delays are exponential draws (Poisson inter-arrival times) around a target
mean, clamped to [0.1x, 10x] of that mean so a UI countdown is never instant
and never absurdly long.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional, Protocol


DEFAULT_BATCH_SIZE = 10
MIN_FACTOR = 0.1
MAX_FACTOR = 10.0

_system_rng = random.SystemRandom()


class UniformSource(Protocol):
    def random(self) -> float: ...


def next_delay(target_mean_ms: float, rng: Optional[UniformSource] = None) -> int:
    """
    Return one delay in milliseconds drawn from an exponential distribution
    with mean `target_mean_ms`, clamped and truncated to an int.
    """
    if target_mean_ms < 0:
        raise ValueError(f"target_mean_ms must be >= 0, got {target_mean_ms}")
    if target_mean_ms == 0:
        return 0

    lower = MIN_FACTOR * target_mean_ms
    upper = MAX_FACTOR * target_mean_ms

    u = (rng or _system_rng).random()
    if u <= 0.0:
        # -ln(0) is +inf; pin to the upper bound
        return int(upper)

    raw = -math.log(u) * target_mean_ms
    return int(min(max(raw, lower), upper))


def generate_batch(
    target_mean_ms: float,
    count: int = DEFAULT_BATCH_SIZE,
    rng: Optional[UniformSource] = None,
) -> List[int]:
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    return [next_delay(target_mean_ms, rng) for _ in range(count)]
