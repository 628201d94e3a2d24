"""
Logging setup for scripts and the entry point.

Library modules only create module-level loggers
(`logger = logging.getLogger(__name__)`); configuring handlers is left to
whoever runs the program, via `setup_logging`.
"""

import logging
import sys

_logging_configured = False


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once with a stream handler on stderr.

    Later calls are no-ops.

    Args:
        level: Logging level name ("DEBUG", "INFO", ...).
    """
    global _logging_configured
    if _logging_configured:
        return

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown logging level: {level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root_logger.addHandler(handler)

    # openpyxl and urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("openpyxl").setLevel(logging.WARNING)

    _logging_configured = True
