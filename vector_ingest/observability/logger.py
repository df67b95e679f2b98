"""
Logger configuration.

Provides the root handler setup shared by the CLI entrypoint and the Lambda handler.

Dependencies: logging (stdlib), vector_ingest.configs
System role: Centralized logging configuration
"""

import logging
import sys

from vector_ingest.configs import get_settings

_NOISY_LOGGERS = ("urllib3", "botocore", "boto3", "s3transfer")


def configure_logging(level: str | None = None) -> None:
    """
    Configure Python logging with ISO timestamp and structured format.

    Args:
        level: Log level name; falls back to the configured LOG_LEVEL
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    level_name = (level or get_settings().log_level).upper()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))
    root_logger.addHandler(handler)

    # AWS SDK chatter drowns out per-batch logs at INFO
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

