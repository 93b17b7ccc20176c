"""
Logging setup shared by the server and the conversation core.
"""

import logging
import sys

from chatclone.core.config import get_settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logger(name: str = "chatclone") -> logging.Logger:
    """
    Get a logger with a stream handler attached once.

    Child loggers (e.g. "chatclone.services.x") propagate to the root
    "chatclone" logger, so only that one carries a handler.
    """
    settings = get_settings()
    log = logging.getLogger(name)

    root = logging.getLogger("chatclone")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(settings.LOG_LEVEL.upper())

    return log


logger = setup_logger("chatclone")
