"""
Centralized logging configuration using loguru.
Provides async-safe console logging with structured output.
"""
import sys
from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"

def setup_logger(level: str = "DEBUG", sink=sys.stdout):
    """
    Configure loguru for async console logging.
    Removes existing handlers and adds a new one with custom format.
    """
    logger.remove()

    logger.add(
        sink,
        format=LOG_FORMAT,
        level=level.upper(),
        colorize=True,
        backtrace=True,
        diagnose=False
    )

    return logger

# Initialize logger on module import
logger = setup_logger()
