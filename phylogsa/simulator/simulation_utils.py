"""
Utilities shared by the branching-process simulators.
"""
from typing import Generator, Optional, Sequence

import numpy as np

from phylogsa.mixins import InvalidConfigurationError


def get_random_generator(
    rng: Optional[np.random.Generator] = None,
    random_seed: Optional[int] = None,
) -> np.random.Generator:
    """Returns the random source a simulator or sampler should draw from.

    Args:
        rng: An existing generator. Takes precedence over `random_seed`.
        random_seed: A seed for a fresh generator.
    """
    if rng is not None:
        return rng
    return np.random.default_rng(random_seed)


def draw_uniform(rng: np.random.Generator) -> float:
    """Draws a uniform value strictly inside (0, 1)."""
    u = rng.random()
    while u == 0:
        u = rng.random()
    return u


def draw_waiting_time(rate: float, rng: np.random.Generator) -> float:
    """Draws an exponential waiting time for a total event rate.

    Args:
        rate: The summed rate of the competing events.
        rng: Random source.

    Returns:
        The waiting time, or infinity if the rate is not positive.
    """
    if rate <= 0:
        return np.inf
    return -np.log(draw_uniform(rng)) / rate


def choose_weighted(weights: np.ndarray, rng: np.random.Generator) -> int:
    """Picks an index with probability proportional to its weight.

    Falls back to a uniform choice when all weights are zero.
    """
    weights = np.asarray(weights, dtype=float)
    total = weights.sum()
    if total <= 0:
        return int(rng.integers(len(weights)))
    cumulative = np.cumsum(weights) / total
    index = int(np.searchsorted(cumulative, rng.random(), side="right"))
    return min(index, len(weights) - 1)


def node_name_generator(start: int = 0) -> Generator[str, None, None]:
    """Generates unique node names for the tree."""
    i = start
    while True:
        yield str(i)
        i += 1


def validate_rate_schedule(
    birth_rates: Sequence[float],
    death_rates: Sequence[float],
    rate_times: Sequence[float],
) -> None:
    """Checks a schedule of rate pairs and the times they come into effect.

    Raises:
        InvalidConfigurationError if the sequences differ in length, are
            empty, if the first time is not 0, if the times are not strictly
            increasing or if any rate is negative.
    """
    if not (len(birth_rates) == len(death_rates) == len(rate_times)):
        raise InvalidConfigurationError(
            "birth_rates, death_rates and rate_times must have the same length"
        )
    if len(rate_times) == 0:
        raise InvalidConfigurationError("The rate schedule is empty")
    if rate_times[0] != 0:
        raise InvalidConfigurationError("The first rate time must be 0")
    if np.any(np.diff(rate_times) <= 0):
        raise InvalidConfigurationError(
            "rate_times must be in strictly increasing order"
        )
    if min(birth_rates) < 0 or min(death_rates) < 0:
        raise InvalidConfigurationError("Rates must be non-negative")
