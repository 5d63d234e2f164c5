from __future__ import annotations

import math
import random

import pytest

from coinops.services.refresh_scheduler import DEFAULT_BATCH_SIZE, generate_batch, next_delay


class _FixedSource:
    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.mark.parametrize("mean", [1.0, 10.0, 1000.0, 100000.0])
def test_delays_stay_within_clamp_bounds(mean):
    rng = random.Random(42)
    lower, upper = int(0.1 * mean), int(10 * mean)
    for _ in range(2000):
        d = next_delay(mean, rng)
        assert lower <= d <= upper


def test_zero_mean_always_zero():
    rng = random.Random(42)
    assert all(next_delay(0, rng) == 0 for _ in range(100))


def test_returns_int():
    assert isinstance(next_delay(1000.0, random.Random(1)), int)


def test_sample_mean_close_to_target():
    rng = random.Random(42)
    n = 10_000
    mean = sum(next_delay(1000, rng) for _ in range(n)) / n
    assert abs(mean - 1000) <= 200


def test_variance_is_meaningful():
    rng = random.Random(42)
    draws = [next_delay(1000, rng) for _ in range(10_000)]
    mu = sum(draws) / len(draws)
    std = math.sqrt(sum((d - mu) ** 2 for d in draws) / len(draws))
    assert std > 100


def test_u_zero_maps_to_upper_bound():
    assert next_delay(1000, _FixedSource(0.0)) == 10_000


def test_clamps_tiny_draws_to_lower_bound():
    # u close to 1 -> -ln(u) ~ 0
    assert next_delay(1000, _FixedSource(0.999999)) == 100


def test_inverse_cdf_in_range_is_truncated():
    # -ln(0.5) * 1000 = 693.14...
    assert next_delay(1000, _FixedSource(0.5)) == 693


def test_negative_mean_rejected():
    with pytest.raises(ValueError):
        next_delay(-1)


def test_seeded_sources_are_reproducible_and_differ_by_seed():
    a = generate_batch(1000, rng=random.Random(1))
    b = generate_batch(1000, rng=random.Random(1))
    c = generate_batch(1000, rng=random.Random(2))
    assert a == b
    assert a != c


def test_batch_has_ten_bounded_values_by_default():
    batch = generate_batch(5000, rng=random.Random(7))
    assert len(batch) == DEFAULT_BATCH_SIZE == 10
    assert all(500 <= d <= 50_000 for d in batch)


def test_batch_count_and_validation():
    assert generate_batch(1000, count=0) == []
    assert len(generate_batch(1000, count=3)) == 3
    with pytest.raises(ValueError):
        generate_batch(1000, count=-1)


def test_default_source_works_without_rng():
    d = next_delay(1000)
    assert 100 <= d <= 10_000
