"""
A file that stores general functionality for setting up a sampling run from a
configuration file. This file supports the command line interface entrypoint
in phylogsa/sample_trees.py.
"""
import os

import ast
import configparser
import logging
from typing import Any, Callable, Dict, Optional

from phylogsa.mixins import (
    InvalidConfigurationError,
    UnspecifiedConfigParameterError,
)
from phylogsa.sampler import constants
from phylogsa.sampler.config import AlgorithmConfig, ModelConfig, SampleRequest
from phylogsa.sampler.MemorylessBirthSampler import yule_pendant_distribution

PENDANT_DISTRIBUTIONS = {"yule": yule_pendant_distribution}


def setup(output_directory_location: str) -> None:
    """Setup environment for a sampling run

    Args:
        output_directory_location: Where to look for, or start a new, output
            directory
    """

    if not os.path.isdir(output_directory_location):
        os.makedirs(output_directory_location)

    logging.basicConfig(
        filename=os.path.join(output_directory_location, "sample.log"),
        level=logging.INFO,
    )


def parse_config(config_string: str) -> Dict[str, Dict[str, Any]]:
    """Parse config for a sampling run.

    Values are read as Python literals, so strings must be quoted.

    Args:
        config_string: Configuration file rendered as a string.

    Returns:
        A dictionary mapping parameters for each section of the config.

    Raises:
        UnspecifiedConfigParameterError
    """
    config = configparser.ConfigParser()

    # load in defaults, written as literals like the user's values
    config.read_dict(
        {
            section: {k: repr(v) for k, v in defaults.items()}
            for section, defaults in constants.DEFAULT_SAMPLING_PARAMETERS.items()
        }
    )

    config.read_string(config_string)

    parameters = {}
    for key in config.sections():
        parameters[key] = {
            k: ast.literal_eval(v) for k, v in config[key].items()
        }

    # ensure that minimum items are present in config
    for param in constants.MINIMUM_GENERAL_PARAMETERS:
        if param not in parameters["general"]:
            raise UnspecifiedConfigParameterError(
                "Please specify the following items for sampling: "
                f"{', '.join(constants.MINIMUM_GENERAL_PARAMETERS)}"
            )

    return parameters


def build_request(
    parameters: Dict[str, Dict[str, Any]],
    progress_callback: Optional[Callable[[int], None]] = None,
) -> SampleRequest:
    """Creates a SampleRequest from parsed config parameters.

    Every key of the [model] section other than `model` and `root_edge` is
    passed to the model. `pendant_dist` is given by name, see
    PENDANT_DISTRIBUTIONS.

    Raises:
        InvalidConfigurationError if the request is invalid.
    """
    general = parameters["general"]
    model_section = dict(parameters["model"])
    algorithm_section = dict(parameters["algorithm"])

    model = ModelConfig(
        **{key: model_section.pop(key) for key in constants.MODEL_CONFIG_KEYS},
        options=model_section,
    )

    algorithm = algorithm_section.pop("algorithm")
    pendant_dist = algorithm_section.get("pendant_dist")
    if pendant_dist is not None:
        if pendant_dist not in PENDANT_DISTRIBUTIONS:
            raise InvalidConfigurationError(
                f"Pendant distribution {pendant_dist} not recognized. "
                f"Options are: {list(PENDANT_DISTRIBUTIONS)}"
            )
        algorithm_section["pendant_dist"] = PENDANT_DISTRIBUTIONS[pendant_dist]
    try:
        algorithm_options = AlgorithmConfig(**algorithm_section)
    except TypeError as error:
        raise InvalidConfigurationError(
            f"Unknown option in the [algorithm] section: {error}"
        )

    return SampleRequest(
        tree_size=general["tree_size"],
        algorithm=algorithm,
        model=model,
        algorithm_options=algorithm_options,
        sample_size=general["sample_size"],
        threads=general["threads"],
        progress_callback=progress_callback,
        random_seed=general["random_seed"],
        remove_extinct=general["remove_extinct"],
        output_format="newick",
    )
