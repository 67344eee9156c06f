"""
roiclust clusters sparse pairwise distances between regions of interest observed
across discrete time points. Clustering is single-linkage and constrained, so that
regions observed at the same time point are kept apart and distant regions are
never merged.
"""

from __future__ import annotations

from ._version import __version__

__all__ = ["__version__", "clustering", "config", "core", "exceptions", "log"]

import logging

from . import clustering, config, core, exceptions

logging.getLogger(__name__).addHandler(logging.NullHandler())


def log(level: int = logging.DEBUG, handler: logging.Handler | None = None) -> None:
    """
    Helper for quickly adding a StreamHandler to the logger. Useful for debugging.

    Parameters
    ----------
    level : int, default logging.DEBUG(10)
        Set the logging level for the logger.
    handler : logging.Handler, optional
        Sets the logging handler for the logger if provided, otherwise logger will be
        provided with a StreamHandler.
    """
    logger = logging.getLogger(__name__)
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s.%(filename)s:%(lineno)s - %(funcName)10s() | %(message)s"
            )
        )
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.debug(f"Added logging handler {handler} to logger: {__name__}")
