import sys
import typing

from loguru import logger

from .config import Settings, get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logging(settings: typing.Optional[Settings] = None) -> int:
    """
    Enables the log records of restbridge, which are disabled on import,
    and adds a stderr sink that only lets them through.

    :return: The sink identifier, to be passed to ``logger.remove()`` if needed.
    """
    if settings is None:
        settings = get_settings()
    logger.enable("restbridge")
    return logger.add(
        sys.stderr,
        level=settings.log_level,
        format=LOG_FORMAT,
        filter="restbridge",
    )
