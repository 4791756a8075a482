"""Top level for sampler."""

from .BirthDeathSampler import BirthDeathSampler
from .BirthSampler import BirthSampler
from .ConstantRateBirthDeathSampler import ConstantRateBirthDeathSampler
from .GSASampler import DurationSampler, GSASampler
from .IncompleteSamplingBirthDeathSampler import (
    IncompleteSamplingBirthDeathSampler,
)
from .MemorylessBirthSampler import (
    MemorylessBirthSampler,
    yule_pendant_distribution,
)
from .config import (
    Algorithm,
    AlgorithmConfig,
    ModelConfig,
    SampleRequest,
    SampleResult,
)
from .sampling import (
    sample,
    sample_b,
    sample_bd,
    sample_constant_rate_bd,
    sample_incomplete_sampling_bd,
    sample_memoryless_b,
)
