"""
Entry points for sampling trees with the GSA algorithms.

The five `sample_*` functions run one sampler in the calling process. `sample`
is the coordinator: it validates a SampleRequest, splits the work over a pool
of worker processes when more than one thread is requested, relays progress
and cancellation between the caller and the workers, and merges their results
into exactly `sample_size` trees.
"""
import dataclasses
import math
import multiprocessing
import queue
from typing import Any, Callable, Dict, Optional, Sequence, Union

import numpy as np

from phylogsa.mixins import (
    ParallelSamplingError,
    SamplingCancelledError,
    logger,
)
from phylogsa.sampler.BirthDeathSampler import BirthDeathSampler
from phylogsa.sampler.BirthSampler import BirthSampler
from phylogsa.sampler.config import (
    Algorithm,
    AlgorithmConfig,
    ModelConfig,
    SampleRequest,
    SampleResult,
)
from phylogsa.sampler.ConstantRateBirthDeathSampler import (
    ConstantRateBirthDeathSampler,
)
from phylogsa.sampler.IncompleteSamplingBirthDeathSampler import (
    IncompleteSamplingBirthDeathSampler,
)
from phylogsa.sampler.MemorylessBirthSampler import MemorylessBirthSampler
from phylogsa.tools import tree_utilities

# Seconds between two checks of the workers, the progress queue and the
# caller's cancellation token.
POLL_INTERVAL = 0.1


def sample_b(
    sample_size: int,
    tree_size: int,
    model,
    rate: float,
    model_options: Optional[Dict[str, Any]] = None,
    root_edge: bool = False,
    cap_expected_samples: bool = False,
    counter: Optional[Callable[[int], None]] = None,
    cancellation=None,
    random_seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> SampleResult:
    """Samples trees from a pure-birth model.

    Args:
        sample_size: Minimum number of trees to sample
        tree_size: Number of species of every tree
        model: A Model, its name or a model function
        rate: Expected number of samples per unit of time at `tree_size`
        model_options: Rate parameters passed to the model
        root_edge: Whether the trees carry a root edge
        cap_expected_samples: Whether the expected yield of a trajectory is
            capped at the number of trees still needed
        counter: Called with 1 every time a tree is accepted
        cancellation: An object with an `is_set` method
        random_seed: A seed for reproducibility, ignored if `rng` is given
        rng: A numpy random Generator to draw from

    Returns:
        A SampleResult with at least `sample_size` trees.
    """
    sampler = BirthSampler(
        rate=rate,
        cap_expected_samples=cap_expected_samples,
        model=model,
        model_options=model_options,
        root_edge=root_edge,
        random_seed=random_seed,
        rng=rng,
    )
    return sampler.sample_trees(sample_size, tree_size, counter, cancellation)


def sample_bd(
    sample_size: int,
    tree_size: int,
    model,
    rate: float,
    nstar: int,
    model_options: Optional[Dict[str, Any]] = None,
    root_edge: bool = False,
    cap_expected_samples: bool = False,
    counter: Optional[Callable[[int], None]] = None,
    cancellation=None,
    random_seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> SampleResult:
    """Samples trees from a birth-death model.

    Trajectories are simulated up to `nstar` species and sampled during every
    interval in which they hold exactly `tree_size` species. See `sample_b`
    for the other arguments.
    """
    sampler = BirthDeathSampler(
        rate=rate,
        nstar=nstar,
        cap_expected_samples=cap_expected_samples,
        model=model,
        model_options=model_options,
        root_edge=root_edge,
        random_seed=random_seed,
        rng=rng,
    )
    return sampler.sample_trees(sample_size, tree_size, counter, cancellation)


def sample_incomplete_sampling_bd(
    sample_size: int,
    tree_size: int,
    model,
    rate: float,
    nstar: int,
    mstar: int,
    sampling_probability: Union[float, Sequence[float]],
    model_options: Optional[Dict[str, Any]] = None,
    root_edge: bool = False,
    cap_expected_samples: bool = True,
    counter: Optional[Callable[[int], None]] = None,
    cancellation=None,
    random_seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> SampleResult:
    """Samples incompletely sampled trees from a birth-death model.

    Every interval with at least `tree_size` species is weighted by the
    probability of observing `tree_size` of them, and every snapshot is
    reduced to `tree_size` extant species chosen uniformly at random. See
    `sample_b` for the other arguments.

    Args:
        mstar: Size above which trees are never sampled
        sampling_probability: Probability of sampling each species, or one
            weight per true size from `tree_size` to `mstar`
    """
    sampler = IncompleteSamplingBirthDeathSampler(
        rate=rate,
        nstar=nstar,
        mstar=mstar,
        sampling_probability=sampling_probability,
        cap_expected_samples=cap_expected_samples,
        model=model,
        model_options=model_options,
        root_edge=root_edge,
        random_seed=random_seed,
        rng=rng,
    )
    return sampler.sample_trees(sample_size, tree_size, counter, cancellation)


def sample_memoryless_b(
    sample_size: int,
    tree_size: int,
    model,
    pendant_dist: Callable[..., float],
    model_options: Optional[Dict[str, Any]] = None,
    root_edge: bool = False,
    counter: Optional[Callable[[int], None]] = None,
    cancellation=None,
    random_seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> SampleResult:
    """Samples trees from a pure-birth model with memoryless waiting times.

    Args:
        pendant_dist: Function drawing the pendant length added to every tip,
            for instance `yule_pendant_distribution`
    """
    sampler = MemorylessBirthSampler(
        pendant_dist=pendant_dist,
        model=model,
        model_options=model_options,
        root_edge=root_edge,
        random_seed=random_seed,
        rng=rng,
    )
    return sampler.sample_trees(sample_size, tree_size, counter, cancellation)


def sample_constant_rate_bd(
    sample_size: int,
    tree_size: int,
    birth_rate: float,
    death_rate: float,
    root_edge: bool = False,
    counter: Optional[Callable[[int], None]] = None,
    cancellation=None,
    random_seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> SampleResult:
    """Samples constant-rate birth-death trees directly, without a model."""
    sampler = ConstantRateBirthDeathSampler(
        birth_rate=birth_rate,
        death_rate=death_rate,
        root_edge=root_edge,
        random_seed=random_seed,
        rng=rng,
    )
    return sampler.sample_trees(sample_size, tree_size, counter, cancellation)


def run_request(
    request: SampleRequest,
    sample_size: int,
    rng: np.random.Generator,
    counter: Optional[Callable[[int], None]] = None,
    cancellation=None,
) -> SampleResult:
    """Runs the sampler of a request in the calling process."""
    algorithm = request.algorithm
    options = request.algorithm_options
    common = dict(
        sample_size=sample_size,
        tree_size=request.tree_size,
        root_edge=request.model.root_edge,
        counter=counter,
        cancellation=cancellation,
        rng=rng,
    )

    if algorithm == Algorithm.CONSTANT_RATE_BD:
        return sample_constant_rate_bd(
            birth_rate=request.model.options["birth_rate"],
            death_rate=request.model.options["death_rate"],
            **common,
        )

    common["model"] = request.model.model
    common["model_options"] = request.model.options
    if algorithm == Algorithm.MEMORYLESS_B:
        return sample_memoryless_b(pendant_dist=options.pendant_dist, **common)

    common["cap_expected_samples"] = options.caps_expected_samples(algorithm)
    if algorithm == Algorithm.B:
        return sample_b(rate=options.rate, **common)
    if algorithm == Algorithm.BD:
        return sample_bd(rate=options.rate, nstar=options.nstar, **common)
    return sample_incomplete_sampling_bd(
        rate=options.rate,
        nstar=options.nstar,
        mstar=options.mstar,
        sampling_probability=options.sampling_probability,
        **common,
    )


def _sample_worker(
    request: SampleRequest,
    sample_size: int,
    seed: np.random.SeedSequence,
    cancellation,
    progress,
) -> SampleResult:
    """Runs one share of a request inside a worker process."""
    counter = None
    if progress is not None:
        counter = progress.put
    return run_request(
        request,
        sample_size,
        np.random.default_rng(seed),
        counter=counter,
        cancellation=cancellation,
    )


def _clamp_progress(
    callback: Optional[Callable[[int], None]], limit: int
) -> Optional[Callable[[int], None]]:
    """Wraps a progress callback so that it reports at most `limit` in total.

    Samplers keep every tree of their last trajectory, which may overshoot
    the number of trees finally returned.
    """
    if callback is None:
        return None
    reported = 0

    def counter(increment: int) -> None:
        nonlocal reported
        increment = min(increment, limit - reported)
        if increment > 0:
            reported += increment
            callback(increment)

    return counter


def _relay_progress(progress, callback: Optional[Callable[[int], None]]):
    if progress is None:
        return
    while True:
        try:
            increment = progress.get_nowait()
        except queue.Empty:
            return
        callback(increment)


def _sample_parallel(request: SampleRequest, cancellation=None) -> SampleResult:
    """Splits a request over `request.threads` worker processes."""
    threads = request.threads
    share = math.ceil(request.sample_size / threads)
    seeds = np.random.SeedSequence(request.random_seed).spawn(threads)
    # callbacks are not sent to the workers, progress goes through a queue
    worker_request = dataclasses.replace(request, progress_callback=None)

    logger.info(
        f"Dispatching {threads} workers with {share} trees each."
    )

    callback = _clamp_progress(request.progress_callback, request.sample_size)
    results, errors = [], []
    cancelled = False
    with multiprocessing.Manager() as manager:
        stop = manager.Event()
        if cancellation is not None and cancellation.is_set():
            stop.set()
        progress = None
        if request.progress_callback is not None:
            progress = manager.Queue()

        with multiprocessing.Pool(processes=threads) as pool:
            pending = [
                pool.apply_async(
                    _sample_worker,
                    (worker_request, share, seed, stop, progress),
                )
                for seed in seeds
            ]

            # any finished and failed job stops the others
            running = list(pending)
            while running:
                if cancellation is not None and cancellation.is_set():
                    stop.set()
                if any(job.ready() and not job.successful() for job in pending):
                    stop.set()
                _relay_progress(progress, callback)
                running[0].wait(POLL_INTERVAL)
                running = [job for job in running if not job.ready()]
            _relay_progress(progress, callback)

            for job in pending:
                try:
                    results.append(job.get())
                except SamplingCancelledError:
                    cancelled = True
                except Exception as error:
                    errors.append(error)

    if errors:
        raise ParallelSamplingError(
            f"{len(errors)} of {threads} sampling workers failed: {errors[0]}",
            errors=errors,
        )
    if cancelled:
        raise SamplingCancelledError("Sampling cancelled.")

    merged = SampleResult()
    for result in results:
        merged.extend(result)
    return merged


def _request_from_arguments(**kwargs) -> SampleRequest:
    """Builds a SampleRequest from flat keyword arguments.

    `model`, `model_options` and `root_edge` form the ModelConfig. Algorithm
    options may be given as `algorithm_options` or as separate arguments.
    """
    model = ModelConfig(
        model=kwargs.pop("model", None),
        options=dict(kwargs.pop("model_options", None) or {}),
        root_edge=kwargs.pop("root_edge", False),
    )
    algorithm_options = kwargs.pop("algorithm_options", None)
    if algorithm_options is None:
        fields = [field.name for field in dataclasses.fields(AlgorithmConfig)]
        algorithm_options = AlgorithmConfig(
            **{name: kwargs.pop(name) for name in fields if name in kwargs}
        )
    return SampleRequest(
        model=model, algorithm_options=algorithm_options, **kwargs
    )


def sample(
    request: Optional[SampleRequest] = None, cancellation=None, **kwargs
) -> SampleResult:
    """Samples trees as described by a request.

    Either pass a SampleRequest or the arguments to build one, for instance

        sample(tree_size=10, algorithm="b", model="constant_rate_birth",
               model_options={"birth_rate": 1.0}, rate=0.5, sample_size=100)

    With more than one thread, the model, the pendant distribution and the
    model options must be picklable.

    Args:
        request: A SampleRequest
        cancellation: An object with an `is_set` method, such as a
            threading.Event. Sampling stops at the next trajectory boundary
            once it is set.
        **kwargs: Arguments of SampleRequest, used if `request` is None

    Returns:
        A SampleResult with exactly `sample_size` trees and the expected
        yield of every usable trajectory.

    Raises:
        InvalidConfigurationError if the request is invalid.
        SamplingCancelledError if sampling was cancelled.
        ParallelSamplingError if a worker process failed.
    """
    if request is None:
        request = _request_from_arguments(**kwargs)
    elif kwargs:
        raise TypeError("Pass either a SampleRequest or its arguments.")

    logger.info(
        f"Sampling {request.sample_size} trees of {request.tree_size} "
        f"species with the {request.algorithm.value} algorithm."
    )

    if request.threads == 1:
        result = run_request(
            request,
            request.sample_size,
            np.random.default_rng(request.random_seed),
            counter=_clamp_progress(
                request.progress_callback, request.sample_size
            ),
            cancellation=cancellation,
        )
    else:
        result = _sample_parallel(request, cancellation)

    result.trees = result.trees[: request.sample_size]
    if request.remove_extinct:
        for tree in result.trees:
            tree_utilities.remove_extinct_species(tree)
    if request.output_format == "newick":
        result.trees = result.to_newick()

    logger.info(
        f"Sampled {len(result.trees)} trees from "
        f"{len(result.expected_samples)} weighted trajectories."
    )
    return result
