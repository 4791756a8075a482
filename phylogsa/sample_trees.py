"""
Main logic behind phylogsa-sample.

This file stores the main entry point for phylogsa-sample. It reads a config
file describing a model and a GSA algorithm, samples the requested number of
trees with phylogsa.sampler.sample and writes them, one newick string per
line, to the output file inside the output directory.
"""
import os

import argparse
import logging

from tqdm.auto import tqdm

from phylogsa.sampler import sample, setup_utilities


def main():

    # --------------- Create Argument Parser & Read in Arguments -------------- #
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "config", type=str, help="Specify a config file for sampling."
    )

    args = parser.parse_args()

    config_filepath = args.config

    with open(config_filepath, "r") as f:
        sampling_parameters = setup_utilities.parse_config(f.read())

    general = sampling_parameters["general"]
    output_directory = general["output_directory"]
    output_filepath = os.path.join(output_directory, general["output_file"])

    # set up output directory
    setup_utilities.setup(output_directory)

    # ---------------------- Sample Trees ---------------------- #
    with tqdm(
        total=general["sample_size"],
        desc=general["name"],
        disable=not general["show_progress"],
    ) as progress_bar:
        request = setup_utilities.build_request(
            sampling_parameters, progress_callback=progress_bar.update
        )
        result = sample(request)

    with open(output_filepath, "w") as f:
        for newick in result.trees:
            f.write(newick + "\n")

    logging.info(f"Wrote {len(result.trees)} trees to {output_filepath}")


if __name__ == "__main__":
    main()
