"""
Methods for setting up logging for tools.
-----------------------------------------
"""

import logging
import socket
import sys
from threading import RLock
from typing import Optional
from typing import TextIO


# Global that is set to True once logging initialization is run to prevent running > once.
__LAMBDALOGS_LOGGING_SETUP: bool = False

# A lock used to make sure initialization is performed only once
__LOCK = RLock()


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> logging.Logger:
    """Globally configure logging for all modules under lambdalogs.

    Status messages go to stderr (or the given stream), so they never mix with the log events
    printed to stdout when the output is redirected.

    Args:
        level: the logging level
        stream: the stream to write messages to, stderr by default

    Returns:
        the root logger of lambdalogs
    """
    global __LAMBDALOGS_LOGGING_SETUP

    logger = logging.getLogger("lambdalogs")
    with __LOCK:
        if not __LAMBDALOGS_LOGGING_SETUP:
            format = (
                f"%(asctime)s {socket.gethostname()} %(name)s:%(funcName)s:%(lineno)s "
                + "[%(levelname)s]: %(message)s"
            )
            handler = logging.StreamHandler(sys.stderr if stream is None else stream)
            handler.setLevel(level)
            handler.setFormatter(logging.Formatter(format))

            logger.setLevel(level)
            logger.addHandler(handler)
        else:
            logging.getLogger(__name__).debug("Logging already initialized.")

        __LAMBDALOGS_LOGGING_SETUP = True
    return logger
