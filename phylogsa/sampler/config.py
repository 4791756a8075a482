"""
Configuration records for sampling requests and the container for their
results.

A SampleRequest is validated when it is constructed, so that a malformed
request fails before any simulation runs. Algorithms and models are resolved
once, from enum members or their string names, into the objects the samplers
call.
"""
import dataclasses
import enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from phylogsa.data import PhyloTree
from phylogsa.mixins import (
    InvalidConfigurationError,
    NoTerminationConditionError,
)
from phylogsa.sampler import sampler_utilities
from phylogsa.simulator import Model


class Algorithm(enum.Enum):
    """The GSA sampling algorithms."""

    B = "b"
    BD = "bd"
    INCOMPLETE_SAMPLING_BD = "incomplete_sampling_bd"
    MEMORYLESS_B = "memoryless_b"
    CONSTANT_RATE_BD = "constant_rate_bd"

    @classmethod
    def resolve(cls, algorithm: Union["Algorithm", str]) -> "Algorithm":
        """Returns the Algorithm for a member or its name.

        Raises:
            InvalidConfigurationError if the algorithm is not recognized.
        """
        if isinstance(algorithm, cls):
            return algorithm
        try:
            return cls(algorithm)
        except ValueError:
            raise InvalidConfigurationError(
                f"Algorithm {algorithm} not recognized. Options are: "
                f"{[a.value for a in cls]}"
            )


REQUIRED_ALGORITHM_OPTIONS = {
    Algorithm.B: ("rate",),
    Algorithm.BD: ("rate", "nstar"),
    Algorithm.INCOMPLETE_SAMPLING_BD: (
        "rate",
        "nstar",
        "mstar",
        "sampling_probability",
    ),
    Algorithm.MEMORYLESS_B: ("pendant_dist",),
    Algorithm.CONSTANT_RATE_BD: (),
}


@dataclasses.dataclass(frozen=True)
class ModelConfig:
    """
    The model a sampler draws trajectories from.

    Attributes:
        model: A Model, its name, or any callable with the signature of the
            functions in `phylogsa.simulator.models`. Not used by the
            constant-rate birth-death algorithm.
        options: Keyword arguments (rate parameters) passed to the model.
        root_edge: Whether the root lineage waits before its first split.
    """

    model: Union[Model, str, Callable[..., PhyloTree], None] = None
    options: Dict[str, Any] = dataclasses.field(default_factory=dict)
    root_edge: bool = False

    def resolve(self) -> Callable[..., PhyloTree]:
        """Returns the model function.

        Raises:
            InvalidConfigurationError if no model is set or it is unknown.
        """
        if self.model is None:
            raise InvalidConfigurationError("Please specify a model")
        return Model.resolve(self.model)


@dataclasses.dataclass(frozen=True)
class AlgorithmConfig:
    """
    Options of a sampling algorithm.

    Attributes:
        rate: Sampling intensity, the expected number of samples per unit of
            time spent at the target size.
        nstar: Size to simulate to, large enough that returning to the
            target size is negligible.
        mstar: Size above which trees contribute negligibly to the sample.
        sampling_probability: Probability of sampling each species, or the
            vector of probabilities of observing the target size for each
            true size from the target size to `mstar`.
        pendant_dist: Function drawing the pendant length added to every tip
            by the memoryless algorithm. Called with the model options, the
            target `tree_size` and the random generator `rng`.
        cap_expected_samples: Whether the expected yield of a trajectory is
            capped at the number of samples still needed. Defaults to True
            for the incomplete-sampling algorithm and False otherwise.
    """

    rate: Optional[float] = None
    nstar: Optional[int] = None
    mstar: Optional[int] = None
    sampling_probability: Union[float, Sequence[float], None] = None
    pendant_dist: Optional[Callable[..., float]] = None
    cap_expected_samples: Optional[bool] = None

    def caps_expected_samples(self, algorithm: Algorithm) -> bool:
        if self.cap_expected_samples is not None:
            return self.cap_expected_samples
        return algorithm == Algorithm.INCOMPLETE_SAMPLING_BD

    def validate(self, algorithm: Algorithm, tree_size: int) -> None:
        """Checks the options required by `algorithm`.

        Raises:
            InvalidConfigurationError if an option is missing or invalid.
        """
        missing = [
            option
            for option in REQUIRED_ALGORITHM_OPTIONS[algorithm]
            if getattr(self, option) is None
        ]
        if missing:
            raise InvalidConfigurationError(
                f"Algorithm {algorithm.value} requires the options: "
                f"{', '.join(missing)}"
            )

        if self.rate is not None and self.rate <= 0:
            raise InvalidConfigurationError("rate must be positive")
        if self.nstar is not None and algorithm in (
            Algorithm.BD,
            Algorithm.INCOMPLETE_SAMPLING_BD,
        ):
            if self.nstar <= tree_size:
                raise InvalidConfigurationError(
                    "nstar must be greater than tree_size"
                )
        if algorithm == Algorithm.INCOMPLETE_SAMPLING_BD:
            sampler_utilities.sampling_probability_vector(
                self.sampling_probability, tree_size, self.mstar
            )
        if self.pendant_dist is not None and not callable(self.pendant_dist):
            raise InvalidConfigurationError("pendant_dist must be callable")


@dataclasses.dataclass
class SampleResult:
    """
    Trees accepted by a sampler, with the expected yield of every
    trajectory that contributed to the sample.

    Attributes:
        trees: The accepted trees, or their newick strings if the request
            asked for newick output.
        expected_samples: The expected number of samples of each usable
            trajectory, useful to inspect the variance of the sampler.
    """

    trees: List[Union[PhyloTree, str]] = dataclasses.field(
        default_factory=list
    )
    expected_samples: List[float] = dataclasses.field(default_factory=list)

    def __len__(self) -> int:
        return len(self.trees)

    def extend(self, other: "SampleResult") -> None:
        """Appends the trees and diagnostics of another result."""
        self.trees.extend(other.trees)
        self.expected_samples.extend(other.expected_samples)

    def to_newick(self) -> List[str]:
        """The accepted trees as newick strings."""
        return [
            tree if isinstance(tree, str) else tree.get_newick()
            for tree in self.trees
        ]


OUTPUT_FORMATS = ("tree", "newick")


@dataclasses.dataclass
class SampleRequest:
    """
    A complete request for a sample of trees.

    Attributes:
        tree_size: Number of extant species of every sampled tree.
        algorithm: The sampling algorithm, an Algorithm or its name.
        model: The model configuration.
        algorithm_options: The algorithm configuration.
        sample_size: Number of trees to return.
        threads: Number of worker processes.
        progress_callback: Called with 1 every time a tree is accepted.
        random_seed: Seed of the random source, None for a random one.
        remove_extinct: Whether extinct tips are pruned from returned trees.
        output_format: "tree" for PhyloTree objects, "newick" for strings.

    Raises:
        InvalidConfigurationError (or its subclass NoTerminationConditionError)
            if any part of the request is invalid.
    """

    tree_size: Optional[int]
    algorithm: Union[Algorithm, str]
    model: ModelConfig = dataclasses.field(default_factory=ModelConfig)
    algorithm_options: AlgorithmConfig = dataclasses.field(
        default_factory=AlgorithmConfig
    )
    sample_size: int = 1
    threads: int = 1
    progress_callback: Optional[Callable[[int], None]] = None
    random_seed: Optional[int] = None
    remove_extinct: bool = False
    output_format: str = "tree"

    def __post_init__(self):
        if self.tree_size is None:
            raise NoTerminationConditionError(
                "Please specify the tree_size of the sampled trees"
            )
        if int(self.tree_size) != self.tree_size or self.tree_size < 1:
            raise InvalidConfigurationError(
                "tree_size must be a positive integer"
            )
        self.tree_size = int(self.tree_size)

        if int(self.sample_size) != self.sample_size or self.sample_size < 1:
            raise InvalidConfigurationError(
                "sample_size must be a positive integer"
            )
        if int(self.threads) != self.threads or self.threads < 1:
            raise InvalidConfigurationError("threads must be at least 1")
        if self.output_format not in OUTPUT_FORMATS:
            raise InvalidConfigurationError(
                f"output_format must be one of {OUTPUT_FORMATS}"
            )

        self.algorithm = Algorithm.resolve(self.algorithm)
        if isinstance(self.model, dict):
            self.model = ModelConfig(**self.model)
        if isinstance(self.algorithm_options, dict):
            self.algorithm_options = AlgorithmConfig(**self.algorithm_options)

        for key in ("tree_size", "tree_age", "rng", "random_seed"):
            if key in self.model.options:
                raise InvalidConfigurationError(
                    f"{key} is set by the sampler and cannot be a model option"
                )

        if self.algorithm == Algorithm.CONSTANT_RATE_BD:
            birth_rate = self.model.options.get("birth_rate")
            death_rate = self.model.options.get("death_rate")
            if birth_rate is None or death_rate is None:
                raise InvalidConfigurationError(
                    "The constant_rate_bd algorithm requires the birth_rate "
                    "and death_rate model options"
                )
            if birth_rate <= 0 or not 0 <= death_rate <= birth_rate:
                raise InvalidConfigurationError(
                    "constant_rate_bd requires 0 <= death_rate <= birth_rate "
                    "and a positive birth_rate"
                )
        else:
            self.model.resolve()
            if (
                self.algorithm == Algorithm.B
                and self.tree_size < 2
                and not self.model.root_edge
            ):
                raise InvalidConfigurationError(
                    "Pure-birth trees of a single species have no length "
                    "unless root_edge is set"
                )

        self.algorithm_options.validate(self.algorithm, self.tree_size)
