import logging
import sys

from ..config import get_settings


def setup_logging(level: str | int | None = None) -> None:
    """Configure logging to output to stdout with proper formatting.

    ``level`` defaults to the configured ``log_level`` setting.
    """
    if level is None:
        level = get_settings().log_level.upper()
    root_logger = logging.getLogger()
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Set lower log levels for some noisy libraries
    logging.getLogger("opentelemetry").setLevel(logging.WARNING)
