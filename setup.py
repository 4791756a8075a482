from setuptools import find_packages, setup

setup(
    name="phylogsa",
    version="0.1.0",
    description="Sampling phylogenetic trees of a fixed size with the "
    "generalized sampling algorithm (GSA)",
    packages=find_packages(include=["phylogsa", "phylogsa.*"]),
    python_requires=">=3.8",
    install_requires=[
        "ete3>=3.1.1",
        "networkx>=2.5",
        "numpy>=1.25",
        "scipy>=1.2.0",
        "tqdm>=4",
    ],
    extras_require={"test": ["pytest>=6.0"]},
    entry_points={
        "console_scripts": ["phylogsa-sample=phylogsa.sample_trees:main"]
    },
)
