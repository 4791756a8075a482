"""
Stores constants for the sampler module
"""

DEFAULT_SAMPLING_PARAMETERS = {
    "general": {
        "sample_size": 1,
        "threads": 1,
        "random_seed": None,
        "remove_extinct": False,
        "show_progress": True,
        "output_file": "trees.nwk",
    },
    "model": {"model": "constant_rate_birth", "root_edge": False},
    "algorithm": {"algorithm": "b"},
}

# Parameters that must appear in the [general] section of a config.
MINIMUM_GENERAL_PARAMETERS = ["name", "output_directory", "tree_size"]

# Keys of the [model] section that configure the model rather than being
# passed to it.
MODEL_CONFIG_KEYS = ("model", "root_edge")
