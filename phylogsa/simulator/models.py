"""
Model functions: one call, one trajectory.

Each function builds the matching simulator and returns a single simulated
PhyloTree. They share the signature

    model(tree_size=None, tree_age=None, root_edge=False, rng=None,
          random_seed=None, **rate_options) -> PhyloTree

so that the GSA samplers can call any of them, or a user-supplied function
with the same signature, interchangeably.
"""
import enum
from typing import Callable, Optional, Sequence

import numpy as np

from phylogsa.data import PhyloTree
from phylogsa.mixins import InvalidConfigurationError
from phylogsa.simulator.BetaSplitSimulator import BetaSplitSimulator
from phylogsa.simulator.CladeShiftSimulator import CladeShiftSimulator
from phylogsa.simulator.ConstantRateBirthDeathSimulator import (
    ConstantRateBirthDeathSimulator,
)
from phylogsa.simulator.DiversityDependentSimulator import (
    DiversityDependentSimulator,
)
from phylogsa.simulator.EvolvingRateSimulator import EvolvingRateSimulator
from phylogsa.simulator.ExternalTreeSimulator import ExternalTreeSimulator
from phylogsa.simulator.TemporalShiftBirthDeathSimulator import (
    TemporalShiftBirthDeathSimulator,
)


def constant_rate_birth(
    birth_rate: float = 1.0,
    tree_size: Optional[int] = None,
    tree_age: Optional[float] = None,
    root_edge: bool = False,
    rng: Optional[np.random.Generator] = None,
    random_seed: Optional[int] = None,
) -> PhyloTree:
    """A constant-rate pure-birth (Yule) tree."""
    return ConstantRateBirthDeathSimulator(
        birth_rate=birth_rate,
        death_rate=0.0,
        tree_size=tree_size,
        tree_age=tree_age,
        root_edge=root_edge,
        rng=rng,
        random_seed=random_seed,
    ).simulate_tree()


def constant_rate_birth_death(
    birth_rate: float = 1.0,
    death_rate: float = 0.0,
    tree_size: Optional[int] = None,
    tree_age: Optional[float] = None,
    root_edge: bool = False,
    rng: Optional[np.random.Generator] = None,
    random_seed: Optional[int] = None,
) -> PhyloTree:
    """A constant-rate birth-death tree."""
    return ConstantRateBirthDeathSimulator(
        birth_rate=birth_rate,
        death_rate=death_rate,
        tree_size=tree_size,
        tree_age=tree_age,
        root_edge=root_edge,
        rng=rng,
        random_seed=random_seed,
    ).simulate_tree()


def diversity_dependent_speciation(
    carrying_capacity: Optional[float] = None,
    max_birth_rate: float = 1.0,
    death_rate: float = 0.0,
    tree_size: Optional[int] = None,
    tree_age: Optional[float] = None,
    root_edge: bool = False,
    rng: Optional[np.random.Generator] = None,
    random_seed: Optional[int] = None,
) -> PhyloTree:
    """A birth-death tree with diversity-dependent speciation."""
    return DiversityDependentSimulator(
        carrying_capacity=carrying_capacity,
        max_birth_rate=max_birth_rate,
        death_rate=death_rate,
        tree_size=tree_size,
        tree_age=tree_age,
        root_edge=root_edge,
        rng=rng,
        random_seed=random_seed,
    ).simulate_tree()


def temporal_shift_birth_death(
    birth_rates: Sequence[float] = (1.0,),
    death_rates: Sequence[float] = (0.0,),
    rate_times: Sequence[float] = (0.0,),
    tree_size: Optional[int] = None,
    tree_age: Optional[float] = None,
    root_edge: bool = False,
    rng: Optional[np.random.Generator] = None,
    random_seed: Optional[int] = None,
) -> PhyloTree:
    """A birth-death tree whose rates shift globally at given times."""
    return TemporalShiftBirthDeathSimulator(
        birth_rates=birth_rates,
        death_rates=death_rates,
        rate_times=rate_times,
        tree_size=tree_size,
        tree_age=tree_age,
        root_edge=root_edge,
        rng=rng,
        random_seed=random_seed,
    ).simulate_tree()


def evolving_speciation_rate(
    birth_rate: float = 1.0,
    evolving_std: float = 1.0,
    death_rate: float = 0.0,
    tree_size: Optional[int] = None,
    tree_age: Optional[float] = None,
    root_edge: bool = False,
    rng: Optional[np.random.Generator] = None,
    random_seed: Optional[int] = None,
) -> PhyloTree:
    """A tree whose speciation rates evolve from parent to daughters."""
    return EvolvingRateSimulator(
        birth_rate=birth_rate,
        evolving_std=evolving_std,
        death_rate=death_rate,
        tree_size=tree_size,
        tree_age=tree_age,
        root_edge=root_edge,
        rng=rng,
        random_seed=random_seed,
    ).simulate_tree()


def clade_shifts(
    birth_rates: Sequence[float] = (1.0,),
    death_rates: Sequence[float] = (0.0,),
    rate_times: Sequence[float] = (0.0,),
    tree_size: Optional[int] = None,
    tree_age: Optional[float] = None,
    root_edge: bool = False,
    rng: Optional[np.random.Generator] = None,
    random_seed: Optional[int] = None,
) -> PhyloTree:
    """A birth-death tree with punctuated clade-specific rate shifts."""
    return CladeShiftSimulator(
        birth_rates=birth_rates,
        death_rates=death_rates,
        rate_times=rate_times,
        tree_size=tree_size,
        tree_age=tree_age,
        root_edge=root_edge,
        rng=rng,
        random_seed=random_seed,
    ).simulate_tree()


def beta_binomial(
    birth_rate: float = 1.0,
    model_param: float = 0.0,
    death_rate: float = 0.0,
    tree_size: Optional[int] = None,
    tree_age: Optional[float] = None,
    root_edge: bool = False,
    rng: Optional[np.random.Generator] = None,
    random_seed: Optional[int] = None,
) -> PhyloTree:
    """A tree whose speciation rates are split between daughters."""
    return BetaSplitSimulator(
        birth_rate=birth_rate,
        model_param=model_param,
        death_rate=death_rate,
        tree_size=tree_size,
        tree_age=tree_age,
        root_edge=root_edge,
        rng=rng,
        random_seed=random_seed,
    ).simulate_tree()


def external_model(
    trees: Sequence[str] = (),
    tree_size: Optional[int] = None,
    tree_age: Optional[float] = None,
    root_edge: bool = False,
    rng: Optional[np.random.Generator] = None,
    random_seed: Optional[int] = None,
) -> PhyloTree:
    """One of a given list of newick trees, chosen uniformly at random."""
    return ExternalTreeSimulator(
        trees, rng=rng, random_seed=random_seed
    ).simulate_tree()


class Model(enum.Enum):
    """The built-in models, addressable by name."""

    CONSTANT_RATE_BIRTH = "constant_rate_birth"
    CONSTANT_RATE_BIRTH_DEATH = "constant_rate_birth_death"
    DIVERSITY_DEPENDENT_SPECIATION = "diversity_dependent_speciation"
    TEMPORAL_SHIFT_BIRTH_DEATH = "temporal_shift_birth_death"
    EVOLVING_SPECIATION_RATE = "evolving_speciation_rate"
    CLADE_SHIFTS = "clade_shifts"
    BETA_BINOMIAL = "beta_binomial"
    EXTERNAL_MODEL = "external_model"

    @property
    def function(self) -> Callable[..., PhyloTree]:
        return MODEL_FUNCTIONS[self]

    @classmethod
    def resolve(cls, model) -> Callable[..., PhyloTree]:
        """Returns the model function for a Model, its name or a callable.

        Raises:
            InvalidConfigurationError if the model is not recognized.
        """
        if isinstance(model, cls):
            return model.function
        if isinstance(model, str):
            try:
                return cls(model).function
            except ValueError:
                raise InvalidConfigurationError(
                    f"Model {model} not recognized. Options are: "
                    f"{[m.value for m in cls]}"
                )
        if callable(model):
            return model
        raise InvalidConfigurationError(f"Model {model} not recognized.")


MODEL_FUNCTIONS = {
    Model.CONSTANT_RATE_BIRTH: constant_rate_birth,
    Model.CONSTANT_RATE_BIRTH_DEATH: constant_rate_birth_death,
    Model.DIVERSITY_DEPENDENT_SPECIATION: diversity_dependent_speciation,
    Model.TEMPORAL_SHIFT_BIRTH_DEATH: temporal_shift_birth_death,
    Model.EVOLVING_SPECIATION_RATE: evolving_speciation_rate,
    Model.CLADE_SHIFTS: clade_shifts,
    Model.BETA_BINOMIAL: beta_binomial,
    Model.EXTERNAL_MODEL: external_model,
}
