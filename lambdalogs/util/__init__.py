import re
import time
from typing import Callable
from typing import Dict
from typing import Optional

from lambdalogs.core import ConfigurationError

# The number of milliseconds per time unit accepted in time expressions
UNIT_TO_MS: Dict[str, int] = {
    "s": 1000,
    "m": 1000 * 60,
    "h": 1000 * 60 * 60,
    "d": 1000 * 60 * 60 * 24,
    "w": 1000 * 60 * 60 * 24 * 7,
}

# The default delay in milliseconds between two polling requests
DEFAULT_POLL_DELAY_MS: int = 5000

# The default look-back for the start of the first window, in milliseconds
DEFAULT_LOOK_BACK_MS: int = 15 * UNIT_TO_MS["m"]

_DURATION_REGEX = re.compile(r"^(\d+)\s*([smhdw])$")


def now_ms() -> int:
    """The current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def parse_duration_ms(expression: str) -> int:
    """Converts time expressions like '10s', '20m', '30h' or '4w' into milliseconds.

    Args:
        expression: an integer followed by one of the units `s`, `m`, `h`, `d` or `w`

    Returns:
        the number of milliseconds in the given expression

    Raises:
        ConfigurationError: if the expression is not of the form `<int><unit>`
    """
    match = _DURATION_REGEX.match(expression.strip())
    if match is None:
        raise ConfigurationError(
            f"Invalid time expression '{expression}', expected <int><unit> with unit one of: "
            + ", ".join(UNIT_TO_MS.keys())
        )
    return int(match.group(1)) * UNIT_TO_MS[match.group(2)]


def parse_time_ms(
    expression: Optional[str], default: int, clock: Callable[[], int] = now_ms
) -> int:
    """Resolves a time expression to a point in time.

    An expression consisting only of digits is an explicit timestamp in milliseconds since the
    epoch.  Otherwise it is a look-back expression (see `parse_duration_ms`) relative to now,
    so '15m' is fifteen minutes ago.

    Args:
        expression: the time expression, or None to use the default
        default: the time to return when no expression is given
        clock: returns the current time in milliseconds since the epoch

    Returns:
        the time in milliseconds since the epoch
    """
    if expression is None or expression.strip() == "":
        return default
    expression = expression.strip()
    if expression.isdigit():
        return int(expression)
    return clock() - parse_duration_ms(expression)


def parse_poll_delay_ms(expression: Optional[str]) -> Optional[int]:
    """Parses the polling delay.

    Returns None when polling is not requested.  A delay that cannot be parsed, or that is
    zero, falls back to `DEFAULT_POLL_DELAY_MS`.
    """
    if expression is None:
        return None
    try:
        delay = parse_duration_ms(expression)
    except ConfigurationError:
        return DEFAULT_POLL_DELAY_MS
    return delay if delay > 0 else DEFAULT_POLL_DELAY_MS
