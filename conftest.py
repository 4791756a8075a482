import pytest


def pytest_addoption(parser):
    """Adds --runslow, which enables the statistical sampling tests."""
    parser.addoption(
        "--runslow",
        action="store_true",
        default=False,
        help="run statistical tests that draw many trajectories",
    )


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: statistical test drawing many trajectories"
    )


def pytest_collection_modifyitems(config, items):
    """Skips tests marked slow when --runslow is not given."""
    if config.getoption("--runslow"):
        return

    skip_slow = pytest.mark.skip(reason="statistical test, use --runslow")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)
