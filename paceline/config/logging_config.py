"""
Logging setup for the PaceLine engine and CLI.

Engine modules log through children of the ``paceline`` logger; only the
command line entry point calls setup_logging.
"""

import functools
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "paceline"
LOG_DIR = Path("logs")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _file_handler(formatter: logging.Formatter) -> logging.Handler:
    LOG_DIR.mkdir(exist_ok=True)
    log_file = LOG_DIR / f"paceline_{datetime.now().strftime('%Y%m%d')}.log"
    handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_level: str = "INFO", log_to_file: bool = False) -> logging.Logger:
    """
    Configure the paceline logger with a stdout handler and, optionally,
    a dated file under logs/ that always records DEBUG.

    Calling it again replaces the existing handlers.
    """
    level = getattr(logging, log_level.upper())
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        try:
            file_handler = _file_handler(formatter)
            logger.addHandler(file_handler)
            logger.info(f"Logging to file: {file_handler.baseFilename}")
        except OSError as e:
            logger.warning(f"Could not setup file logging: {e}")

    logger.debug(f"Log level set to: {log_level}")
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child logger under the paceline namespace (module __name__ values are used as-is)."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def log_function_entry(logger: logging.Logger, func_name: str, **kwargs):
    params = ", ".join(f"{k}={v}" for k, v in kwargs.items())
    logger.debug(f"Entering {func_name}({params})")


def log_function_exit(logger: logging.Logger, func_name: str, result=None):
    if result is None:
        logger.debug(f"Exiting {func_name}()")
    elif isinstance(result, (list, tuple)):
        logger.debug(f"Exiting {func_name}() -> {len(result)} {type(result).__name__} items")
    else:
        logger.debug(f"Exiting {func_name}() -> {type(result).__name__}")


def log_error(logger: logging.Logger, error: Exception, context: Optional[str] = None):
    """Log an exception with its traceback, prefixed by where it happened."""
    message = f"{type(error).__name__}: {error}"
    logger.error(f"{context} - {message}" if context else message, exc_info=True)


def log_performance(logger: logging.Logger, operation: str, duration: float, details: Optional[str] = None):
    suffix = f" ({details})" if details else ""
    logger.debug(f"Performance: {operation} took {duration:.3f}s{suffix}")


def log_execution_time(logger: Optional[logging.Logger] = None):
    """
    Decorator that logs how long the wrapped call took.

    Failures are timed and logged through log_error before being re-raised.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            nonlocal logger
            if logger is None:
                logger = get_logger(func.__module__)

            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                log_performance(logger, func.__name__, time.perf_counter() - start_time, "failed")
                log_error(logger, e, f"Error in {func.__name__}")
                raise
            log_performance(logger, func.__name__, time.perf_counter() - start_time)
            return result

        return wrapper
    return decorator
