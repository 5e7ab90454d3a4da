import logging

from .log_service import get_log_service


def configure_logging(level: int = logging.INFO, *, name: str = "FastTrace") -> logging.Logger:
    """Create or fetch the application logger and attach the shared LogService.

    The service sits on the root logger so module loggers under ``backend`` and
    ``frontend`` reach it through propagation.
    """

    logger = logging.getLogger(name)
    logger.setLevel(level)

    get_log_service().ensure_installed()
    root = logging.getLogger()
    if root.level == logging.NOTSET or root.level > level:
        root.setLevel(level)
    return logger


__all__ = ["configure_logging"]
