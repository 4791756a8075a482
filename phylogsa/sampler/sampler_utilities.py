"""
Helpers shared by the GSA samplers.
"""
from typing import Sequence, Tuple, Union

import numpy as np
import scipy.special

from phylogsa.mixins import InvalidConfigurationError
from phylogsa.simulator import simulation_utils


def stochastic_round(expected: float, rng: np.random.Generator) -> int:
    """Turns an expected number of samples into a random integer.

    One sample is accepted for every whole unit of `expected`, and one more
    with probability equal to the fractional remainder, so the mean of the
    returned count equals `expected`.

    Args:
        expected: Non-negative expected number of samples
        rng: Random source

    Returns:
        The number of samples to take.
    """
    accepted = 0
    while expected > 0:
        if expected > 1 or rng.random() < expected:
            accepted += 1
        expected -= 1
    return accepted


def sampling_probability_vector(
    sampling_probability: Union[float, Sequence[float]],
    tree_size: int,
    mstar: int,
) -> np.ndarray:
    """Normalized probabilities of observing `tree_size` species.

    Entry `i` weighs the moments at which the true number of species is
    `tree_size + i`. A scalar `p` is read as the probability of sampling each
    species, giving the binomial weights
    `C(n, tree_size) * p**tree_size * (1 - p)**(n - tree_size)` for `n` from
    `tree_size` to `mstar`. The vector is renormalized to sum to 1 so that
    sampling rates are comparable across algorithms.

    Raises:
        InvalidConfigurationError if a vector has the wrong length or the
            probabilities do not have a positive sum.
    """
    if mstar < tree_size:
        raise InvalidConfigurationError("mstar must be at least tree_size")

    if np.ndim(sampling_probability) == 0:
        p = float(sampling_probability)
        if not 0 < p <= 1:
            raise InvalidConfigurationError(
                "A scalar sampling_probability must lie in (0, 1]"
            )
        n = np.arange(tree_size, mstar + 1)
        vector = (
            scipy.special.comb(n, tree_size)
            * p ** tree_size
            * (1 - p) ** (n - tree_size)
        )
    else:
        vector = np.asarray(sampling_probability, dtype=float)
        if len(vector) != mstar - tree_size + 1:
            raise InvalidConfigurationError(
                "'sampling_probability' must be a scalar or a list with "
                "mstar - tree_size + 1 items"
            )
        if np.any(vector < 0):
            raise InvalidConfigurationError(
                "'sampling_probability' must be non-negative"
            )

    total = vector.sum()
    if not total > 0:
        raise InvalidConfigurationError(
            "'sampling_probability' must have a positive sum"
        )
    return vector / total


def size_intervals(
    times: np.ndarray, counts: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Splits a lineage-through-time curve into constant-count intervals.

    The last point of the curve closes the final interval and does not open
    one of its own.

    Returns:
        The start, duration and lineage count of each interval.
    """
    times = np.asarray(times, dtype=float)
    counts = np.asarray(counts)
    if len(times) < 2:
        return np.array([]), np.array([]), np.array([], dtype=int)
    return times[:-1], np.diff(times), counts[:-1]


def choose_time(
    starts: np.ndarray,
    durations: np.ndarray,
    weights: np.ndarray,
    rng: np.random.Generator,
) -> float:
    """Picks a random time inside a set of intervals.

    The interval is chosen with probability proportional to its weight and
    the time is uniform inside it.
    """
    index = simulation_utils.choose_weighted(weights, rng)
    return starts[index] + rng.random() * durations[index]
