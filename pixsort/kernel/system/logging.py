import logging
import sys


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Sets up the global logging configuration for the application.
    """
    logger = logging.getLogger("pixsort")
    logger.setLevel(level)

    # Prevent duplicate handlers if called multiple times
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Helper to get a sub-logger for a specific module.
    """
    if name:
        if name == "pixsort" or name.startswith("pixsort."):
            return logging.getLogger(name)
        return logging.getLogger(f"pixsort.{name}")
    return logging.getLogger("pixsort")
