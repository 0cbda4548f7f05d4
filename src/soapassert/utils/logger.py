# soapassert/utils/logger.py
"""
Logging configuration for the soapassert package.

Provides centralized logging setup to ensure consistent log formatting
and output across all modules in the package.
"""

import logging
from pathlib import Path
from sys import stdout

from .config_loader import SoapAssertConfig

LOG_FORMAT: str = '%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s'
LOG_DATE_FORMAT: str = '%Y-%m-%d %H:%M:%S'


def setup_logger(
    logging_level: int = logging.INFO,
    log_file_path: Path | None = None,
) -> logging.Logger:
    """
    Set up logging for the soapassert package.

    This function configures the package-level logger so that all modules
    inherit the same log level and handler configuration.

    The function is idempotent - calling it multiple times will update
    the existing configuration rather than adding duplicate handlers.

    Args:
        logging_level: The logging level to use (e.g., logging.DEBUG,
                      logging.INFO). Defaults to INFO. DEBUG also logs the
                      full request and response envelopes.
        log_file_path: Optional path to a log file. If None, logs are
                      written to stdout.

    Returns:
        The package-level logger.

    Example:
        >>> setup_logger(logging_level=logging.DEBUG)
        >>> setup_logger(log_file_path=Path('soap_tests.log'))
    """
    package_logger: logging.Logger = logging.getLogger('soapassert')
    package_logger.setLevel(logging_level)

    log_format: logging.Formatter = logging.Formatter(
        fmt=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )

    # Only add a handler if one doesn't already exist
    if not package_logger.handlers:
        handler: logging.Handler
        if log_file_path is not None:
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(
                filename=str(log_file_path),
                mode='a',
                encoding='utf-8',
            )
        else:
            handler = logging.StreamHandler(stdout)

        handler.setFormatter(log_format)
        handler.setLevel(logging_level)
        package_logger.addHandler(handler)

    else:
        # Handler already exists - update its level to match new configuration
        for existing_handler in package_logger.handlers:
            existing_handler.setLevel(logging_level)

    return package_logger


def setup_logger_from_config(config: SoapAssertConfig) -> logging.Logger:
    """
    Apply the ``logging`` section of a configuration.

    Console output uses ``console_level``. If ``file_path`` is set, a file
    handler is added at ``file_level`` and the package logger level is
    lowered so the more verbose of the two destinations receives records.
    """
    console_level: int = config.logging.get_console_level_int()
    file_level: int | None = config.logging.get_file_level_int()

    package_logger: logging.Logger = setup_logger(logging_level=console_level)

    if config.logging.file_path is not None and file_level is not None:
        file_path: Path = config.logging.file_path
        attached: list[logging.FileHandler] = [
            handler
            for handler in package_logger.handlers
            if isinstance(handler, logging.FileHandler)
            and Path(handler.baseFilename) == file_path.resolve()
        ]
        for handler in attached:
            handler.setLevel(file_level)

        if not attached:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler: logging.FileHandler = logging.FileHandler(
                filename=str(file_path), mode='a', encoding='utf-8'
            )
            file_handler.setFormatter(
                logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
            )
            file_handler.setLevel(file_level)
            package_logger.addHandler(file_handler)
            package_logger.info('Logging to file: %s', file_path)

        package_logger.setLevel(min(console_level, file_level))

    return package_logger
