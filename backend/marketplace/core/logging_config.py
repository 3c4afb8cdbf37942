"""
Logging configuration.

Every module logs through ``logging.getLogger(__name__)``; this module only
attaches a console handler to the root logger, once.
"""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with a console handler.

    Calling it again (tests, repeated create_app) only updates the level.

    Args:
        level: Logging level name, case insensitive
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if root.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    # SQL echo is controlled by the engine, not by the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
