# gitdeck/utils/logging_config.py
"""gitdeck.utils.logging_config
==============================

Logging configuration for the gitdeck dashboard. A curses application cannot
print to the terminal it is drawing on, so the default stack writes to a
rotating log file and keeps the console handler opt-in.

Features:
    - Rotating file logging for general application events (gitdeck.log).
    - Optional console logging to stderr with configurable log level.
    - Optional separate error log file (error.log) for ERROR and CRITICAL events.
    - Optional key event tracing (keytrace.log) enabled via the GITDECK_KEYTRACE
      environment variable.
    - Fallback to the system temp directory when the log directory cannot be created.
    - Safe reconfiguration: clears existing handlers to avoid duplicate logs.
    - Never raises; setup errors are reported to stderr.

Globals:
    logger: Main application logger ("gitdeck").
    KEY_LOGGER: Logger for decoded key-press trace events ("gitdeck.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
logger = logging.getLogger("gitdeck")
KEY_LOGGER = logging.getLogger("gitdeck.keyevents")

LOG_FILENAME = "gitdeck.log"
ERROR_LOG_FILENAME = "error.log"
KEY_TRACE_FILENAME = "keytrace.log"
KEYTRACE_ENV = "GITDECK_KEYTRACE"


def _rotating_handler(
    filename: str, max_bytes: int, backups: int, formatter: logging.Formatter
) -> logging.handlers.RotatingFileHandler:
    log_dir = os.path.dirname(filename)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)
    handler = logging.handlers.RotatingFileHandler(
        filename, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    Up to four independent handlers are installed:

    1. File handler – rotating gitdeck.log capturing everything from
       the configured `file_level` (default DEBUG) upward.
    2. Console handler – optional `stderr` output whose threshold is
       `console_level` (default WARNING).
    3. Error-file handler – optional rotating error.log that stores
       only ERROR and CRITICAL events.
    4. Key-event handler – optional rotating keytrace.log enabled
       when the environment variable ``GITDECK_KEYTRACE`` is set to
       ``1/true/yes``; attached to the ``gitdeck.keyevents`` logger.

    Args:
        config (dict | None): Application configuration. Only the
            ``["logging"]`` sub-section is consulted; recognised keys are
            ``file_level``, ``console_level``, ``log_to_console`` and
            ``separate_error_log``.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    log_filename = LOG_FILENAME
    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = _rotating_handler(log_filename, 2 * 1024 * 1024, 5, file_formatter)
    except OSError as e_fh:
        log_filename = os.path.join(tempfile.gettempdir(), LOG_FILENAME)
        print(
            f"Error setting up file logger: {e_fh}. Logging to '{log_filename}'.",
            file=sys.stderr,
        )
        try:
            file_handler = _rotating_handler(log_filename, 2 * 1024 * 1024, 5, file_formatter)
        except OSError as e_tmp:
            print(f"File logging disabled: {e_tmp}", file=sys.stderr)
    if file_handler:
        file_handler.setLevel(log_file_level)

    # Console Handler
    console_handler = None
    if logging_config.get("log_to_console", False):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s")
        )
        console_handler.setLevel(getattr(logging, console_level_str, logging.WARNING))

    # Optional Separate Error Log File
    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        try:
            error_file_handler = _rotating_handler(
                ERROR_LOG_FILENAME, 1 * 1024 * 1024, 3, file_formatter
            )
            error_file_handler.setLevel(logging.ERROR)
        except OSError as e_efh:
            print(
                f"Error setting up separate error log '{ERROR_LOG_FILENAME}': {e_efh}.",
                file=sys.stderr,
            )

    root_logger = logging.getLogger()
    root_logger.handlers = []  # Clear existing root handlers to avoid duplicates

    for handler in (file_handler, console_handler, error_file_handler):
        if handler:
            root_logger.addHandler(handler)

    root_logger.setLevel(log_file_level)

    # Key Event Logger
    KEY_LOGGER.propagate = False
    KEY_LOGGER.setLevel(logging.DEBUG)
    KEY_LOGGER.handlers = []
    KEY_LOGGER.disabled = False

    if os.environ.get(KEYTRACE_ENV, "").lower() in {"1", "true", "yes"}:
        try:
            KEY_LOGGER.addHandler(
                _rotating_handler(
                    KEY_TRACE_FILENAME,
                    1 * 1024 * 1024,
                    3,
                    logging.Formatter("%(asctime)s - %(message)s"),
                )
            )
            logging.info("Key event tracing enabled, logging to '%s'.", KEY_TRACE_FILENAME)
        except OSError as e_keytrace:
            logging.error(f"Failed to set up key trace logging: {e_keytrace}", exc_info=True)
            KEY_LOGGER.disabled = True
    else:
        KEY_LOGGER.addHandler(logging.NullHandler())
        KEY_LOGGER.disabled = True
        logging.debug("Key event tracing is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(
            f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}."
        )
    if console_handler:
        logging.info(
            f"Console logging to stderr at level: {logging.getLevelName(console_handler.level)}."
        )
