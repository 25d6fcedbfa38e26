"""
Logging for ipfspy.

Loggers are plain stdlib loggers below the 'ipfspy' namespace:

    ipfspy.client           high-level client
    ipfspy.api              HTTP transport (requests, failures)
    ipfspy.add              add runs (start/finish, results)
    ipfspy.add.sources      content readers
    ipfspy.add.normalise    input classification
    ipfspy.add.multipart    body encoding
"""
import logging
from typing import Tuple, Union

ROOT_LOGGER = 'ipfspy'

LOGGER_NAMES: Tuple[str, ...] = (
    ROOT_LOGGER,
    'ipfspy.client',
    'ipfspy.api',
    'ipfspy.add',
    'ipfspy.add.sources',
    'ipfspy.add.normalise',
    'ipfspy.add.multipart',
)


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    The logger propagates to the root logger so logging.basicConfig() is
    enough to see its output. While the root logger has no handlers the
    level is WARNING, which keeps library logs quiet by default.

    Args:
        name: Dotted name, e.g. 'ipfspy.add'
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    if not logging.getLogger().handlers:
        logger.setLevel(logging.WARNING)

    return logger


def set_level(level: Union[int, str]) -> None:
    """Set the level of every ipfspy logger."""
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = True
