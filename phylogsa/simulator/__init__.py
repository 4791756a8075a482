"""Top level for simulator."""

from .BetaSplitSimulator import BetaSplitSimulator
from .BranchingProcessSimulator import BranchingProcessSimulator
from .CladeShiftSimulator import CladeShiftSimulator
from .ConstantRateBirthDeathSimulator import ConstantRateBirthDeathSimulator
from .DiversityDependentSimulator import DiversityDependentSimulator
from .EvolvingRateSimulator import EvolvingRateSimulator
from .ExternalTreeSimulator import ExternalTreeSimulator
from .TemporalShiftBirthDeathSimulator import TemporalShiftBirthDeathSimulator
from .TreeSimulator import TreeSimulator
from .models import (
    Model,
    beta_binomial,
    clade_shifts,
    constant_rate_birth,
    constant_rate_birth_death,
    diversity_dependent_speciation,
    evolving_speciation_rate,
    external_model,
    temporal_shift_birth_death,
)


__all__ = [
    "BetaSplitSimulator",
    "BranchingProcessSimulator",
    "CladeShiftSimulator",
    "ConstantRateBirthDeathSimulator",
    "DiversityDependentSimulator",
    "EvolvingRateSimulator",
    "ExternalTreeSimulator",
    "Model",
    "TemporalShiftBirthDeathSimulator",
    "TreeSimulator",
    "beta_binomial",
    "clade_shifts",
    "constant_rate_birth",
    "constant_rate_birth_death",
    "diversity_dependent_speciation",
    "evolving_speciation_rate",
    "external_model",
    "temporal_shift_birth_death",
]
