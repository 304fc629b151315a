"""
Logging Setup
Console and rotating file sinks for loguru
"""

import sys
from loguru import logger


def configure_logging(level: str = "INFO", log_file: str = "data/logs/contract_setup.log"):
    """
    Configure loguru sinks

    Args:
        level: Console log level
        log_file: Path of the DEBUG file sink (None disables it)
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level
    )
    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
            level="DEBUG"
        )
