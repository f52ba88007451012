"""Logging helpers for the road network package.

All modules obtain their logger through :func:`get_logger` so that
messages share one format.  The level of every logger created here
can be changed at once with :func:`set_level`, which is what the
``rebuild.log_level`` configuration setting drives.
"""

import logging
from typing import Optional, Union

_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s: %(message)s'
_DATEFMT = '%Y-%m-%d %H:%M:%S'
_ROOT = 'roadnet'


def get_logger(name: str, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Return a logger below the package root logger.

    Parameters
    ----------
    name : str
        Dotted module name, usually ``__name__``.  Names outside the
        package root are nested below it.
    level : int or str, optional
        Level applied to the returned logger.

    Returns
    -------
    logging.Logger
        Logger whose records are emitted by the root handler.
    """
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    short = name.split('.')[-1] if name != _ROOT else ''
    logger = root.getChild(short) if short else root
    if level is not None:
        logger.setLevel(level)
    return logger


def set_level(level: Union[int, str]) -> None:
    """Set the level of the package root logger."""
    get_logger(_ROOT).setLevel(level)
