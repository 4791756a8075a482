"""
Tests for the GSA sampler classes and the sample_* functions.
"""
import threading

import networkx as nx
import numpy as np
import pytest

from phylogsa.data import PhyloTree
from phylogsa.mixins import (
    InvalidConfigurationError,
    ModelAssumptionError,
    SamplerWarning,
    SamplingCancelledError,
)
from phylogsa.sampler import (
    BirthSampler,
    ConstantRateBirthDeathSampler,
    IncompleteSamplingBirthDeathSampler,
    sample_b,
    sample_bd,
    sample_constant_rate_bd,
    sample_incomplete_sampling_bd,
    sample_memoryless_b,
    yule_pendant_distribution,
)


def is_binary(tree: PhyloTree) -> bool:
    return all(len(tree.children(node)) in (0, 2) for node in tree.nodes)


@pytest.fixture
def non_ultrametric_tree():
    graph = nx.DiGraph()
    graph.add_edge("0", "1", length=1.0)
    graph.add_edge("0", "2", length=2.0)
    graph.add_edge("1", "3", length=1.0)
    graph.add_edge("1", "4", length=0.5)
    return PhyloTree(tree=graph)


def test_sample_b():
    result = sample_b(
        sample_size=10,
        tree_size=5,
        model="constant_rate_birth",
        model_options={"birth_rate": 1.0},
        rate=1.0,
        random_seed=1,
    )

    assert len(result) >= 10
    assert all(expected > 0 for expected in result.expected_samples)
    for tree in result.trees:
        assert tree.n_leaves == 5
        assert tree.is_ultrametric()
        assert is_binary(tree)
        assert tree.root_length == 0.0


def test_sample_b_single_species_with_root_edge():
    result = sample_b(
        sample_size=5,
        tree_size=1,
        model="constant_rate_birth",
        rate=2.0,
        root_edge=True,
        random_seed=3,
    )
    for tree in result.trees:
        assert tree.nodes == [tree.root]
        assert tree.root_length > 0


def test_sample_b_single_species_requires_root_edge():
    with pytest.raises(InvalidConfigurationError):
        sample_b(
            sample_size=1,
            tree_size=1,
            model="constant_rate_birth",
            model_options={"birth_rate": 1.0},
            rate=1.0,
            random_seed=0,
        )

    sampler = BirthSampler(rate=1.0, model="constant_rate_birth")
    with pytest.raises(InvalidConfigurationError):
        sampler.sample_trees(sample_size=1, tree_size=1)


def test_sample_b_rejects_extinction(non_ultrametric_tree):
    with pytest.raises(ModelAssumptionError):
        sample_b(
            sample_size=1,
            tree_size=2,
            model="external_model",
            model_options={"trees": [non_ultrametric_tree]},
            rate=1.0,
        )


def test_sample_bd():
    result = sample_bd(
        sample_size=10,
        tree_size=5,
        model="constant_rate_birth_death",
        model_options={"birth_rate": 1.0, "death_rate": 0.5},
        rate=0.5,
        nstar=15,
        random_seed=4,
    )

    assert len(result) >= 10
    for tree in result.trees:
        assert len(tree.get_extant_leaves()) == 5
        assert is_binary(tree)


def test_sample_incomplete_sampling_bd():
    result = sample_incomplete_sampling_bd(
        sample_size=10,
        tree_size=5,
        model="constant_rate_birth_death",
        model_options={"birth_rate": 1.0, "death_rate": 0.3},
        rate=1.0,
        nstar=20,
        mstar=12,
        sampling_probability=0.5,
        random_seed=5,
    )

    assert len(result) == 10
    for tree in result.trees:
        assert len(tree.get_extant_leaves()) == 5
        assert is_binary(tree)


def test_incomplete_sampling_caps_expected_samples():
    sampler = IncompleteSamplingBirthDeathSampler(
        rate=1000.0,
        nstar=15,
        mstar=10,
        sampling_probability=[1, 1, 1, 1, 1, 1],
        model="constant_rate_birth",
        random_seed=6,
    )
    with pytest.warns(SamplerWarning):
        result = sampler.sample_trees(sample_size=3, tree_size=5)

    # capped yields never overshoot the request
    assert len(result) == 3
    assert max(result.expected_samples) > 3


def test_incomplete_sampling_weights():
    sampler = IncompleteSamplingBirthDeathSampler(
        rate=1.0,
        nstar=10,
        mstar=6,
        sampling_probability=[0.0, 1.0],
        model="constant_rate_birth",
        random_seed=0,
    )
    trajectory = sampler.simulate_trajectory(10)
    starts, durations, weights = sampler.weighted_intervals(trajectory, 5)

    # only the interval with 6 species carries weight
    assert np.count_nonzero(weights) == 1
    assert weights.sum() == pytest.approx(
        durations[np.flatnonzero(weights)[0]]
    )


def test_birth_sampler_warns_for_large_rate():
    sampler = BirthSampler(
        rate=1e6,
        cap_expected_samples=True,
        model="constant_rate_birth",
        rng=np.random.default_rng(0),
    )
    with pytest.warns(SamplerWarning):
        result = sampler.sample_trees(sample_size=1, tree_size=3)
    assert len(result) == 1


def test_sample_memoryless_b():
    result = sample_memoryless_b(
        sample_size=10,
        tree_size=5,
        model="constant_rate_birth",
        model_options={"birth_rate": 1.0},
        pendant_dist=yule_pendant_distribution,
        random_seed=7,
    )

    assert len(result) == 10
    assert result.expected_samples == [1.0] * 10
    for tree in result.trees:
        assert tree.n_leaves == 5
        assert tree.is_ultrametric()
        last_speciation = max(tree.get_time(n) for n in tree.internal_nodes)
        assert tree.get_max_depth_of_tree() > last_speciation


def test_sample_memoryless_b_custom_pendant():
    def fixed_pendant(tree_size, rng, **kwargs):
        return 0.25

    result = sample_memoryless_b(
        sample_size=3,
        tree_size=4,
        model="constant_rate_birth",
        pendant_dist=fixed_pendant,
        random_seed=8,
    )
    for tree in result.trees:
        last_speciation = max(tree.get_time(n) for n in tree.internal_nodes)
        assert tree.get_max_depth_of_tree() == pytest.approx(
            last_speciation + 0.25
        )


def test_yule_pendant_distribution():
    rng = np.random.default_rng(9)
    draws = [
        yule_pendant_distribution(tree_size=4, rng=rng, birth_rate=2.0)
        for _ in range(20000)
    ]
    assert np.mean(draws) == pytest.approx(1 / 8, rel=0.05)


@pytest.mark.parametrize(
    "birth_rate, death_rate", [(1.0, 1.0), (2.0, 0.5), (1.0, 0.0)]
)
def test_sample_constant_rate_bd(birth_rate, death_rate):
    result = sample_constant_rate_bd(
        sample_size=10,
        tree_size=6,
        birth_rate=birth_rate,
        death_rate=death_rate,
        random_seed=10,
    )

    assert len(result) == 10
    assert result.expected_samples == []
    for tree in result.trees:
        assert tree.n_leaves == 6
        assert tree.is_ultrametric()
        assert is_binary(tree)
        assert tree.root_length == 0.0


def test_sample_constant_rate_bd_root_edge():
    sampler = ConstantRateBirthDeathSampler(
        birth_rate=1.0, death_rate=0.5, root_edge=True, random_seed=11
    )
    for _ in range(20):
        tree = sampler.build_tree(5)
        assert tree.root_length > 0
        assert tree.n_leaves == 5


def test_constant_rate_bd_single_species():
    sampler = ConstantRateBirthDeathSampler(birth_rate=1.0, death_rate=0.5)
    tree = sampler.build_tree(1)
    assert tree.n_leaves == 1


@pytest.mark.parametrize(
    "birth_rate, death_rate", [(0.0, 0.0), (1.0, 2.0), (1.0, -0.1)]
)
def test_constant_rate_bd_invalid_rates(birth_rate, death_rate):
    with pytest.raises(InvalidConfigurationError):
        ConstantRateBirthDeathSampler(
            birth_rate=birth_rate, death_rate=death_rate
        )


def test_cancelled_before_start():
    cancellation = threading.Event()
    cancellation.set()
    with pytest.raises(SamplingCancelledError):
        sample_b(
            sample_size=5,
            tree_size=5,
            model="constant_rate_birth",
            rate=1.0,
            cancellation=cancellation,
        )


def test_counter_is_called_for_every_tree():
    calls = []
    result = sample_bd(
        sample_size=5,
        tree_size=4,
        model="constant_rate_birth_death",
        model_options={"birth_rate": 1.0, "death_rate": 0.2},
        rate=1.0,
        nstar=10,
        counter=calls.append,
        random_seed=12,
    )
    assert sum(calls) == len(result)


@pytest.mark.slow
def test_birth_sampler_expected_yield():
    """The interval at n species of a Yule tree is Exp(n * birth_rate)."""
    sampler = BirthSampler(
        rate=1.0, model="constant_rate_birth", random_seed=13
    )
    result = sampler.sample_trees(sample_size=500, tree_size=5)
    assert np.mean(result.expected_samples) == pytest.approx(0.2, abs=0.02)


if __name__ == "__main__":
    pytest.main([__file__])
