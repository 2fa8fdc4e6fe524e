"""Main entry point for the lambda-logs tool."""

import logging
import sys
from typing import Dict
from typing import List

import defopt

from lambdalogs.core import LambdaLogsError
from lambdalogs.core.logging import setup_logging
from lambdalogs.logs.tools import lambda_logs

# Flag names of the original lambda-logs tool, mapped to the flags derived by defopt
FLAG_ALIASES: Dict[str, str] = {
    "--filter": "--filter-pattern",
    "--colorPattern": "--color-pattern",
    "--msgLength": "--msg-length",
}

# Flags that enable polling, and may be given without a delay
POLL_FLAGS: List[str] = ["--poll", "-p"]


def _normalize_argv(argv: List[str]) -> List[str]:
    """Renames aliased flags, and adds an empty delay to a `--poll` given without one.

    An empty delay is parsed as the default polling delay.
    """
    normalized: List[str] = []
    for i, arg in enumerate(argv):
        name, sep, value = arg.partition("=")
        if name in FLAG_ALIASES:
            arg = FLAG_ALIASES[name] + sep + value
        normalized.append(arg)
        if arg in POLL_FLAGS:
            is_last = i == len(argv) - 1
            if is_last or (argv[i + 1].startswith("-") and not argv[i + 1][1:].isdigit()):
                normalized.append("")
    return normalized


def main(argv: List[str] = sys.argv[1:]) -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    if len(argv) != 0 and all(arg not in argv for arg in ["-h", "--help"]):
        logger.info("Running command: lambda-logs " + " ".join(argv))
    try:
        defopt.run(lambda_logs, argv=_normalize_argv(argv))
        logger.info("Completed successfully.")
    except LambdaLogsError as e:
        logger.error(str(e))
        logger.info("Failed on command: " + " ".join(argv))
        sys.exit(1)
    except Exception as e:
        logger.info("Failed on command: " + " ".join(argv))
        raise e


if __name__ == "__main__":
    main()
