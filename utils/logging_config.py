"""
Logging configuration for the MIDI catalog builder.

Console output goes to stdout and every run is appended to a rotating
history log next to the library.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    max_file_size: int = 1024 * 1024,  # 1MB
    backup_count: int = 3
) -> logging.Logger:
    """
    Set up logging for a catalog run.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        log_file: Path to the history log (optional)
        max_file_size: Maximum log file size in bytes before rotation
        backup_count: Number of rotated files to keep

    Returns:
        Configured application logger
    """
    # Clear any existing handlers
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    root_logger.setLevel(numeric_level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_file),
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8',
            errors='backslashreplace'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    app_logger = logging.getLogger('midi-catalog')
    app_logger.setLevel(numeric_level)

    app_logger.debug(f"Logging initialized - Level: {level}")
    if log_file:
        app_logger.info(f"Log file: {log_file}")

    return app_logger


def log_processing_progress(
    current: int,
    total: int,
    logger: logging.Logger,
    message_template: str = "Processing {current}/{total} - {filename}",
    **fields
):
    """
    Log per-file progress.

    Small batches log every file at INFO; large ones log every 5% at INFO
    and the rest at DEBUG.
    """
    if total == 0:
        return

    message = message_template.format(current=current, total=total, **fields)

    if total <= 100 or current % max(1, total // 20) == 0 or current == total:
        logger.info(message)
    else:
        logger.debug(message)
