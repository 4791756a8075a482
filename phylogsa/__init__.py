# -*- coding: utf-8 -*-

"""Top-level for phylogsa development."""

import importlib.metadata

from . import data
from . import mixins
from . import sampler
from . import simulator as sim
from . import tools as tl
from .data import PhyloTree
from .sampler import (
    SampleRequest,
    SampleResult,
    sample,
    sample_b,
    sample_bd,
    sample_constant_rate_bd,
    sample_incomplete_sampling_bd,
    sample_memoryless_b,
)

package_name = "phylogsa"
__version__ = importlib.metadata.version(package_name)
