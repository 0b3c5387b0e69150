import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVEL_ENV = "APP_LOG_LEVEL"


def configure_logging(level: str | int | None = None) -> None:
    """
    Configure root logging once for the process.

    Called by the process entry points (app lifespan, CLI); library modules
    only ever use logging.getLogger(__name__). A second call is a no-op
    because logging.basicConfig leaves configured handlers alone.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
