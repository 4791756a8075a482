"""
Tests for the request validation in phylogsa.sampler.config.
"""
import pytest

from phylogsa.data import PhyloTree
from phylogsa.mixins import (
    InvalidConfigurationError,
    NoTerminationConditionError,
)
from phylogsa.sampler import (
    Algorithm,
    AlgorithmConfig,
    ModelConfig,
    SampleRequest,
    SampleResult,
)
from phylogsa.simulator import models


def make_request(**kwargs):
    arguments = dict(
        tree_size=5,
        algorithm="bd",
        model=ModelConfig(
            model="constant_rate_birth_death",
            options={"birth_rate": 1.0, "death_rate": 0.5},
        ),
        algorithm_options=AlgorithmConfig(rate=1.0, nstar=10),
    )
    arguments.update(kwargs)
    return SampleRequest(**arguments)


def test_valid_request():
    request = make_request()
    assert request.algorithm == Algorithm.BD
    assert request.model.resolve() is models.constant_rate_birth_death
    assert request.threads == 1
    assert request.output_format == "tree"


def test_dicts_are_converted():
    request = make_request(
        model={"model": "constant_rate_birth"},
        algorithm="b",
        algorithm_options={"rate": 2.0},
    )
    assert isinstance(request.model, ModelConfig)
    assert isinstance(request.algorithm_options, AlgorithmConfig)
    assert request.algorithm_options.rate == 2.0


def test_missing_tree_size():
    with pytest.raises(NoTerminationConditionError):
        make_request(tree_size=None)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"tree_size": 0},
        {"tree_size": 2.5},
        {"sample_size": 0},
        {"threads": 0},
        {"output_format": "nexus"},
        {"algorithm": "gsa"},
        {"model": ModelConfig(model="unknown_model")},
        {"model": ModelConfig()},
        {"algorithm_options": AlgorithmConfig(rate=1.0)},
        {"algorithm_options": AlgorithmConfig(rate=1.0, nstar=5)},
        {"algorithm_options": AlgorithmConfig(rate=-1.0, nstar=10)},
        {
            "model": ModelConfig(
                model="constant_rate_birth", options={"tree_size": 3}
            )
        },
    ],
)
def test_invalid_requests(kwargs):
    with pytest.raises(InvalidConfigurationError):
        make_request(**kwargs)


def test_incomplete_sampling_options():
    request = make_request(
        algorithm="incomplete_sampling_bd",
        algorithm_options=AlgorithmConfig(
            rate=1.0, nstar=12, mstar=8, sampling_probability=[0.2] * 4
        ),
    )
    assert request.algorithm_options.caps_expected_samples(request.algorithm)

    with pytest.raises(InvalidConfigurationError):
        make_request(
            algorithm="incomplete_sampling_bd",
            algorithm_options=AlgorithmConfig(
                rate=1.0, nstar=12, mstar=8, sampling_probability=[0.2] * 3
            ),
        )


def test_cap_defaults():
    options = AlgorithmConfig(rate=1.0)
    assert options.caps_expected_samples(Algorithm.INCOMPLETE_SAMPLING_BD)
    assert not options.caps_expected_samples(Algorithm.BD)
    assert not options.caps_expected_samples(Algorithm.B)

    options = AlgorithmConfig(rate=1.0, cap_expected_samples=True)
    assert options.caps_expected_samples(Algorithm.B)


def test_memoryless_requires_pendant_distribution():
    with pytest.raises(InvalidConfigurationError):
        make_request(algorithm="memoryless_b")

    with pytest.raises(InvalidConfigurationError):
        make_request(
            algorithm="memoryless_b",
            algorithm_options=AlgorithmConfig(pendant_dist=0.5),
        )


def test_pure_birth_single_species():
    with pytest.raises(InvalidConfigurationError):
        make_request(tree_size=1, algorithm="b")

    request = make_request(
        tree_size=1,
        algorithm="b",
        model=ModelConfig(model="constant_rate_birth", root_edge=True),
    )
    assert request.tree_size == 1


@pytest.mark.parametrize(
    "options",
    [
        {},
        {"birth_rate": 1.0},
        {"birth_rate": 1.0, "death_rate": 2.0},
        {"birth_rate": 0.0, "death_rate": 0.0},
    ],
)
def test_constant_rate_bd_rates(options):
    with pytest.raises(InvalidConfigurationError):
        make_request(
            algorithm="constant_rate_bd", model=ModelConfig(options=options)
        )


def test_constant_rate_bd_needs_no_model():
    request = make_request(
        algorithm="constant_rate_bd",
        model=ModelConfig(options={"birth_rate": 1.0, "death_rate": 1.0}),
        algorithm_options=AlgorithmConfig(),
    )
    assert request.model.model is None


def test_sample_result():
    tree = models.constant_rate_birth(tree_size=3, random_seed=0)
    result = SampleResult(trees=[tree], expected_samples=[0.5])
    result.extend(SampleResult(trees=["(a,b);"], expected_samples=[1.5]))

    assert len(result) == 2
    assert result.expected_samples == [0.5, 1.5]
    newicks = result.to_newick()
    assert newicks[0] == tree.get_newick()
    assert newicks[1] == "(a,b);"
    assert isinstance(result.trees[0], PhyloTree)


if __name__ == "__main__":
    pytest.main([__file__])
