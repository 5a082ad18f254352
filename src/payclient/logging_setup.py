"""
Logging setup for applications using the client
"""

import logging
from typing import Dict, Any, Optional


LOGGER_NAME = 'payclient'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(logging_config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Configure the package logger from the [logging] configuration section

    Only the `payclient` logger is touched, never the root logger. Calling this
    more than once does not add duplicate handlers.

    Args:
        logging_config: Mapping with optional 'level' and 'log_file_name' keys

    Returns:
        Configured logger instance
    """
    logging_config = logging_config or {}
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging_config.get('level', 'INFO').upper())

    formatter = logging.Formatter(LOG_FORMAT)

    if not any(getattr(handler, '_payclient', False) for handler in logger.handlers):
        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler._payclient = True
        logger.addHandler(console_handler)

        # File handler
        log_file_name = logging_config.get('log_file_name')
        if log_file_name:
            file_handler = logging.FileHandler(log_file_name)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            file_handler._payclient = True
            logger.addHandler(file_handler)

    return logger
