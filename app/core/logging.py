"""
Structured logging configuration using loguru.

Standard-library loggers (uvicorn, sqlalchemy, aio_pika) are routed into
loguru so the whole service writes through one set of sinks.
"""
import logging
import sys
from loguru import logger
from app.core.config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


# Remove default handler
logger.remove()

logger.add(
    sys.stdout,
    format=LOG_FORMAT,
    level="DEBUG" if settings.ENVIRONMENT == "development" else "INFO",
    colorize=True,
)

if settings.ENVIRONMENT == "production":
    logger.add(
        "logs/app.log",
        rotation="500 MB",
        retention="10 days",
        compression="zip",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="INFO",
    )

logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO, force=True)

__all__ = ["logger"]
