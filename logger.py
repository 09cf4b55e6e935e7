"""Logging configuration for Easy Budget.

Sets up logging to both file (with date-based naming) and console.
"""

import logging
from datetime import date
from config import Config


def setup_logging(config: Config) -> logging.Logger:
    """Set up application logging with file and console handlers.

    Args:
        config: Application configuration containing log settings.

    Returns:
        Configured logger instance.
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("easybudget")
    logger.setLevel(config.log_level)

    # Clear any existing handlers (in case this is called multiple times)
    logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_formatter = logging.Formatter("%(levelname)s - %(message)s")

    # File handler - logs to easybudget-{date}.log
    log_filename = f"easybudget-{date.today().isoformat()}.log"
    file_handler = logging.FileHandler(config.log_dir / log_filename)
    file_handler.setLevel(config.log_level)
    file_handler.setFormatter(detailed_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.log_level)
    console_handler.setFormatter(console_formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    # Module loggers (ingestion.*, services.*, web.*) propagate to root;
    # route them through the same handlers.
    for name in ("ingestion", "services", "web"):
        module_logger = logging.getLogger(name)
        module_logger.setLevel(config.log_level)
        module_logger.handlers.clear()
        module_logger.addHandler(file_handler)
        module_logger.addHandler(console_handler)
        module_logger.propagate = False

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger.

    Returns:
        The easybudget logger instance.
    """
    return logging.getLogger("easybudget")
