"""
Tests for the sampling coordinator phylogsa.sampler.sample.
"""
import threading
import time

import networkx as nx
import pytest

from phylogsa.data import PhyloTree
from phylogsa.mixins import (
    ModelAssumptionError,
    ParallelSamplingError,
    SamplingCancelledError,
)
from phylogsa.sampler import SampleRequest, sample
from phylogsa.simulator import models


def second_worker_fails(tree_size, rng, root_edge=False, **kwargs):
    """Fails in the second worker and slowly yields nothing in the first."""
    if rng.bit_generator.seed_seq.spawn_key == (1,):
        raise RuntimeError("second worker failed")
    time.sleep(0.2)
    return models.constant_rate_birth(
        tree_size=tree_size, rng=rng, root_edge=root_edge, **kwargs
    )


def yule_request(**kwargs):
    arguments = dict(
        tree_size=10,
        algorithm="b",
        model={"model": "constant_rate_birth", "options": {"birth_rate": 1.0}},
        algorithm_options={"rate": 0.5},
        sample_size=5,
        random_seed=1,
    )
    arguments.update(kwargs)
    return SampleRequest(**arguments)


@pytest.mark.parametrize("threads", [1, 2, 4])
def test_sample_size_is_exact(threads):
    result = sample(yule_request(threads=threads))
    assert len(result.trees) == 5
    for tree in result.trees:
        assert tree.n_leaves == 10
        assert tree.is_ultrametric()


def test_sample_from_arguments():
    result = sample(
        tree_size=6,
        algorithm="bd",
        model="constant_rate_birth_death",
        model_options={"birth_rate": 1.0, "death_rate": 0.4},
        rate=0.5,
        nstar=15,
        sample_size=4,
        random_seed=2,
    )
    assert len(result.trees) == 4
    for tree in result.trees:
        assert len(tree.get_extant_leaves()) == 6


def test_request_and_arguments_are_exclusive():
    with pytest.raises(TypeError):
        sample(yule_request(), sample_size=3)


def test_sample_is_reproducible():
    first = sample(yule_request(output_format="newick"))
    second = sample(yule_request(output_format="newick"))
    assert first.trees == second.trees
    assert first.expected_samples == second.expected_samples


def test_parallel_sample_is_reproducible():
    first = sample(yule_request(threads=2, output_format="newick"))
    second = sample(yule_request(threads=2, output_format="newick"))
    assert first.trees == second.trees


def test_newick_output():
    result = sample(yule_request(output_format="newick"))
    assert all(isinstance(tree, str) for tree in result.trees)
    assert all(tree.endswith(";") for tree in result.trees)


def test_remove_extinct():
    result = sample(
        tree_size=5,
        algorithm="bd",
        model="constant_rate_birth_death",
        model_options={"birth_rate": 1.0, "death_rate": 0.8},
        rate=1.0,
        nstar=12,
        sample_size=5,
        remove_extinct=True,
        random_seed=3,
    )
    for tree in result.trees:
        assert tree.is_ultrametric()
        assert tree.n_leaves == 5


def test_constant_rate_bd():
    result = sample(
        tree_size=6,
        algorithm="constant_rate_bd",
        model_options={"birth_rate": 1.0, "death_rate": 1.0},
        sample_size=10,
        threads=2,
        random_seed=4,
    )
    assert len(result.trees) == 10
    assert all(tree.n_leaves == 6 for tree in result.trees)
    assert result.expected_samples == []


def test_memoryless_b():
    from phylogsa.sampler import yule_pendant_distribution

    result = sample(
        tree_size=4,
        algorithm="memoryless_b",
        model="constant_rate_birth",
        pendant_dist=yule_pendant_distribution,
        sample_size=6,
        threads=2,
        random_seed=5,
    )
    assert len(result.trees) == 6
    assert len(result.expected_samples) >= 6


@pytest.mark.parametrize("threads", [1, 2])
def test_progress_callback(threads):
    increments = []
    result = sample(
        yule_request(threads=threads, progress_callback=increments.append)
    )
    assert set(increments) == {1}
    assert sum(increments) == len(result.trees)


@pytest.mark.parametrize("threads", [1, 2])
def test_progress_stops_at_sample_size(threads):
    # a high rate takes several trees from the last trajectory
    increments = []
    result = sample(
        yule_request(
            threads=threads,
            algorithm_options={"rate": 50.0},
            progress_callback=increments.append,
        )
    )
    assert len(result.trees) == 5
    assert sum(increments) == 5


@pytest.mark.parametrize("threads", [1, 2])
def test_cancellation(threads):
    cancellation = threading.Event()
    cancellation.set()
    with pytest.raises(SamplingCancelledError):
        sample(yule_request(threads=threads), cancellation=cancellation)


def test_worker_failure():
    graph = nx.DiGraph()
    graph.add_edge("0", "1", length=1.0)
    graph.add_edge("0", "2", length=0.5)
    request = SampleRequest(
        tree_size=2,
        algorithm="b",
        model={
            "model": "external_model",
            "options": {"trees": [PhyloTree(tree=graph)]},
        },
        algorithm_options={"rate": 1.0},
        sample_size=4,
        threads=2,
    )

    with pytest.raises(ParallelSamplingError) as error:
        sample(request)
    assert len(error.value.errors) >= 1
    assert all(isinstance(e, ModelAssumptionError) for e in error.value.errors)


def test_failing_worker_stops_running_workers():
    request = SampleRequest(
        tree_size=3,
        algorithm="b",
        model={"model": second_worker_fails, "options": {"birth_rate": 1.0}},
        algorithm_options={"rate": 1e-9},
        sample_size=4,
        threads=2,
        random_seed=7,
    )

    start = time.time()
    with pytest.raises(ParallelSamplingError) as error:
        sample(request)
    assert time.time() - start < 30
    assert len(error.value.errors) == 1
    assert isinstance(error.value.errors[0], RuntimeError)


def test_single_thread_failure_is_raised_directly():
    graph = nx.DiGraph()
    graph.add_edge("0", "1", length=1.0)
    graph.add_edge("0", "2", length=0.5)
    with pytest.raises(ModelAssumptionError):
        sample(
            tree_size=2,
            algorithm="b",
            model="external_model",
            model_options={"trees": [PhyloTree(tree=graph)]},
            rate=1.0,
        )


@pytest.mark.slow
@pytest.mark.parametrize("cap_expected_samples", [True, False])
def test_incomplete_sampling_yield(cap_expected_samples):
    """Without a cap, the expected yields account for the trees drawn."""
    result = sample(
        tree_size=4,
        algorithm="incomplete_sampling_bd",
        model="constant_rate_birth_death",
        model_options={"birth_rate": 1.0, "death_rate": 0.5},
        rate=2.0,
        nstar=12,
        mstar=8,
        sampling_probability=0.5,
        cap_expected_samples=cap_expected_samples,
        sample_size=300,
        threads=1,
        random_seed=6,
    )
    assert len(result.trees) == 300
    if not cap_expected_samples:
        # the untrimmed count is known only through the diagnostics
        assert sum(result.expected_samples) == pytest.approx(300, rel=0.15)


if __name__ == "__main__":
    pytest.main([__file__])
