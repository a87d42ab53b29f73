import sys

from loguru import logger


def configure_logging(level: str = "INFO", debug: bool = False) -> None:
    """
    Replace loguru's default sink with a single stderr sink.

    Args:
        level: Minimum level to emit (e.g. "INFO", "DEBUG")
        debug: Include full diagnostics in exception traces
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        backtrace=debug,
        diagnose=debug,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    )
