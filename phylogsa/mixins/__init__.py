"""Top level for mixins."""

from .errors import (
    InvalidConfigurationError,
    ModelAssumptionError,
    NoTerminationConditionError,
    ParallelSamplingError,
    PhyloTreeError,
    SamplingCancelledError,
    UnspecifiedConfigParameterError,
)
from .logging import logger
from .warnings import SamplerWarning
