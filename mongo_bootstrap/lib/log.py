import sys

from loguru import logger

from ..config import config


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with one at the configured level"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or config.log_level).upper(),
        backtrace=config.debug,
        diagnose=config.debug,
    )
