"""Logger configuration bootstrap.

The interactive screen owns the terminal, so console logging is opt-in;
everything always goes to a rotating file in the platform log directory.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from platformdirs import user_log_dir
from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "lazycmd"
DEFAULT_LOG_FILE = Path(user_log_dir(LOGGER_NAME, appauthor=False)) / "lazycmd.log"


def setup_logger(
    log_file: Path | None = DEFAULT_LOG_FILE,
    *,
    console: bool = False,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """Set up and configure the application logger.

    Calling it again replaces the handlers installed by an earlier call.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    if console:
        console_handler = RichHandler(console=Console(stderr=True), show_path=False)
        console_handler.setLevel(console_level)
        logger.addHandler(console_handler)

    if log_file is not None:
        resolved_log_file = Path(log_file).expanduser().resolve()
        try:
            os.makedirs(resolved_log_file.parent, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                resolved_log_file,
                maxBytes=1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
        except OSError:
            # An unwritable log directory must not keep the browser from starting.
            pass
        else:
            file_handler.setLevel(file_level)
            file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
            logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger


__all__ = ["DEFAULT_LOG_FILE", "LOGGER_NAME", "setup_logger"]
