"""Package-wide logger."""
import logging

logger = logging.getLogger("phylogsa")
logger.addHandler(logging.NullHandler())
