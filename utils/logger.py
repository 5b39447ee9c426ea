"""
Logging configuration utility.
"""

import logging
import sys
from typing import Any, Dict, List

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Loggers of libraries that are too chatty at DEBUG level.
QUIET_LOGGERS = ('urllib3', 'charset_normalizer')


def _build_handlers(log_settings: Dict[str, Any]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_settings.get('file'):
        handlers.append(logging.FileHandler(str(log_settings['file']), encoding='utf-8'))
    return handlers


def setup_logging(settings: Dict[str, Any] = None, verbose: bool = False) -> logging.Logger:
    """
    Configure the root logger from the 'logging' settings section.

    The section may set ``level``, ``format`` and ``file``; console output
    always goes to stdout, next to the round reports. ``verbose`` forces
    DEBUG regardless of the configured level.

    Args:
        settings: Application settings (only 'logging' is read)
        verbose: Enable debug output

    Returns:
        Configured root logger
    """
    log_settings = (settings or {}).get('logging') or {}
    level = 'DEBUG' if verbose else log_settings.get('level') or 'INFO'
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    formatter = logging.Formatter(log_settings.get('format') or DEFAULT_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    for handler in _build_handlers(log_settings):
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # Library noise stays at WARNING even in verbose mode.
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    return root_logger
