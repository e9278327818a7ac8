import logging
import sys

from kotoba.application.config import EngineConfig

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """
    Attach a stderr handler to the `kotoba` logger.

    The library never calls this on import; embedding applications opt in.
    `level` defaults to EngineConfig.log_level (KOTOBA_LOG_LEVEL or the TOML
    file). Calling it again only updates the level.
    """
    if level is None:
        level = EngineConfig().log_level

    logger = logging.getLogger("kotoba")
    logger.setLevel(level)

    if not any(getattr(h, "_kotoba", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._kotoba = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
