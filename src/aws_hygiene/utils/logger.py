# utils/logger.py
import logging
import logging.handlers
import os
import sys
from pathlib import Path

from aws_hygiene.core.constants import LOG_BACKUP_COUNT, LOG_ROTATION_MAX_BYTES


def _file_logging_enabled() -> bool:
    return os.environ.get("LOG_TO_FILE", "true").lower() not in ("0", "false", "no")


def setup_logger(
    name: str,
    log_file: str = None,
    level: str = None,
    enable_rotation: bool = True,
    max_bytes: int = LOG_ROTATION_MAX_BYTES,
    backup_count: int = LOG_BACKUP_COUNT,
    log_dir: str = None,
) -> logging.Logger:
    """Setup logger with console output and an optional rotating log file"""
    logger = logging.getLogger(name)
    level = level or os.environ.get("LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Prevent duplicate handlers
    if not logger.handlers:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)
        stream_handler.setLevel(logging.DEBUG)
        logger.addHandler(stream_handler)

        if log_file and _file_logging_enabled():
            logs_dir = Path(log_dir or os.environ.get("LOG_PATH", "logs"))
            log_path = logs_dir / log_file

            try:
                logs_dir.mkdir(parents=True, exist_ok=True)
                if enable_rotation:
                    file_handler = logging.handlers.RotatingFileHandler(
                        log_path,
                        maxBytes=max_bytes,
                        backupCount=backup_count,
                        encoding="utf-8",
                    )
                else:
                    file_handler = logging.FileHandler(log_path, encoding="utf-8")

                file_handler.setFormatter(formatter)
                file_handler.setLevel(logging.DEBUG)  # All levels to file
                logger.addHandler(file_handler)

            except (OSError, PermissionError) as e:
                # Lambda and other read-only filesystems end up here
                logger.warning(
                    f"Failed to create log file {log_path}: {e}. Logging to console only."
                )

        # Prevent propagation to root logger to avoid duplicate messages
        logger.propagate = False

    return logger


def set_log_level(logger: logging.Logger, level: str) -> None:
    """Change the level of an already configured logger."""
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
