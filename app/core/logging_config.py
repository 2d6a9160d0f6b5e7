import os
import sys
from loguru import logger
from app.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[request_id]} | {name}:{function}:{line} - {message}"


def setup_logging(level: str = None, log_file: str = None):
    """
    Route loguru output to stdout and, when configured, a rotating log file.

    Records emitted outside a request carry "-" as their request id; the
    request middleware binds the real one.
    """
    level = level or settings.LOG_LEVEL
    log_file = settings.LOG_FILE if log_file is None else log_file

    logger.remove()
    logger.configure(extra={"request_id": "-"})

    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        logger.add(
            log_file,
            rotation="10 MB",
            retention="10 days",
            level="DEBUG",
            compression="zip",
            format=FILE_FORMAT
        )

    logger.info(f"Logging initialized | level={level} | file={log_file or 'disabled'}")
