"""
Logging Configuration
Opt-in console/file output for the 'nodeview' logger namespace.

The package logs silently by default. Scripts call setup_logging() to see
routing fallbacks, grid coarsening and rule failures; host applications that
configure logging themselves never need to.
"""
import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'

_logger = logging.getLogger("nodeview")
_logger.addHandler(logging.NullHandler())  # Default: no output

# Handlers owned by setup_logging; host handlers are never touched
_installed_handlers: list[logging.Handler] = []


def _remove_installed_handlers() -> None:
    for handler in _installed_handlers:
        _logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Send 'nodeview' records to the console and optionally a file.

    Calling it again replaces the handlers added by the previous call;
    handlers installed by the host application stay in place.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path; records are appended to it.
        stream: Console stream, stdout by default.

    Returns:
        The 'nodeview' logger.
    """
    _logger.setLevel(level)
    _remove_installed_handlers()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        _logger.addHandler(handler)
        _installed_handlers.append(handler)

    _logger.debug("Logging initialized at %s", logging.getLevelName(level))
    return _logger


def disable_logging() -> None:
    """Remove the handlers added by setup_logging() and restore the default level."""
    _remove_installed_handlers()
    _logger.setLevel(logging.NOTSET)
