"""
Logging setup for the API process and the CLI scripts.

Records go to stderr and, when ``LOG_FILE`` is set, to a size-rotated
file.  The OpenAI and Stripe SDKs (and the ``httpx`` client under
``openai``) log request details at INFO, so they are held at WARNING
unless the application itself runs at a stricter level.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SDK_LOGGERS = ("openai", "stripe", "httpx", "httpcore")

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger once.

    Parameters
    ----------
    level : str
        Level name such as ``"DEBUG"`` or ``"info"``; unknown names
        fall back to INFO.
    logfile : Optional[str]
        File to append to.  Its directory is created if missing.
    """
    root = logging.getLogger()
    if root.handlers:
        # create_app() runs on every import of main, e.g. under pytest.
        return

    app_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(app_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    root.addHandler(stream)

    if logfile:
        path = Path(logfile).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        rotating.setFormatter(formatter)
        root.addHandler(rotating)

    sdk_level = max(app_level, logging.WARNING)
    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)
