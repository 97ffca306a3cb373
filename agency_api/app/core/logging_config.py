"""
Logging setup for the agency API.

``setup_logging`` attaches a console handler (and a file handler when
``LOG_FILE`` is set) to the root logger.  Module loggers created with
``logging.getLogger(__name__)`` propagate to it.  Calling the function
again is a no-op, so tests can build several apps in one process.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _make_handler(logfile: Optional[str]) -> logging.Handler:
    if logfile:
        path = Path(logfile).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, encoding="utf-8")
    return logging.StreamHandler()


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger once.

    ``level`` is a level name such as ``"DEBUG"``; unknown names fall
    back to INFO.  ``logfile``, when given, adds a UTF-8 file handler
    next to the console one.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    numeric_level = getattr(logging, level.upper(), None)
    root.setLevel(numeric_level if isinstance(numeric_level, int) else logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    targets = [None, logfile] if logfile else [None]
    for target in targets:
        handler = _make_handler(target)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # access log stays at INFO or above
    logging.getLogger("uvicorn.access").setLevel(max(root.level, logging.INFO))
