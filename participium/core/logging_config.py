"""
Logging setup shared by the services and the seeding script.
"""

import logging

from participium.core.settings import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(config: Settings) -> None:
    """
    Install a single stream handler on the root logger.

    DEBUG overrides LOG_LEVEL. Calling this more than once replaces the
    handler instead of stacking duplicates.
    """
    level_name = "DEBUG" if config.DEBUG else (config.LOG_LEVEL or "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_participium", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._participium = True
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger(__name__).debug(f"Logging configured for {config.APP_NAME} at {level_name}")
