"""Exceptions raised across phylogsa."""


class PhyloTreeError(Exception):
    """An Exception class for the PhyloTree class."""

    pass


class InvalidConfigurationError(Exception):
    """Raised when a model, algorithm or sampling request is malformed.

    These are detected before any simulation runs and are never retried.
    """

    pass


class NoTerminationConditionError(InvalidConfigurationError):
    """Raised when neither a tree size nor a tree age is specified."""

    pass


class ModelAssumptionError(Exception):
    """Raised when a trajectory violates the assumptions of a sampler.

    The pure-birth samplers require ultrametric trajectories; a model that
    produces extinct tips cannot be used with them.
    """

    pass


class SamplingCancelledError(Exception):
    """Raised when a sampling run is stopped by its cancellation token."""

    pass


class ParallelSamplingError(Exception):
    """Raised when one or more sampling workers fail.

    Args:
        message: Summary of the failure.
        errors: The exceptions raised by the failing workers.
    """

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = list(errors) if errors is not None else []


class UnspecifiedConfigParameterError(Exception):
    """Raised when a required configuration parameter is missing."""

    pass
