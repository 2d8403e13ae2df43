"""
Logging setup — opt-in file logging for the ``patch_reconciler`` package.

Nothing here runs at import time; the host application decides whether
and where reconciliation logs go.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

_LOGGER_NAME = "patch_reconciler"


def setup_logger(log_dir: str = ".patch_reconciler/logs", level: int = logging.DEBUG) -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"reconcile_{timestamp}.log")

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger
