"""
Rendering of log events to the terminal
---------------------------------------
"""

import logging
import re
from datetime import datetime
from typing import Optional
from typing import Pattern
from typing import Tuple

from rich.color import Color
from rich.color import ColorParseError
from rich.console import COLOR_SYSTEMS
from rich.console import Console
from rich.style import Style

from lambdalogs.core import ConfigurationError
from lambdalogs.core import PatternMismatchError
from lambdalogs.logs.api import LogEvent

# The color used for the prefix when no (or an unknown) color is given
DEFAULT_COLOR: str = "yellow"

# The default maximum number of characters of a message body to display
DEFAULT_MAX_MESSAGE_LENGTH: int = 350


def format_timestamp(timestamp: Optional[int]) -> str:
    """Formats a timestamp in milliseconds since the epoch as a local date and time."""
    if timestamp is None:
        return "-"
    local = datetime.fromtimestamp(timestamp / 1000).astimezone()
    return local.isoformat(sep=" ", timespec="milliseconds")


def resolve_color(name: Optional[str]) -> str:
    """Returns the given color name if the terminal knows it, otherwise `DEFAULT_COLOR`."""
    if not name:
        return DEFAULT_COLOR
    try:
        Color.parse(name)
    except ColorParseError:
        logging.getLogger(__name__).warning(
            f"Unknown color '{name}', using '{DEFAULT_COLOR}' instead"
        )
        return DEFAULT_COLOR
    return name


class LineRenderer:
    """Writes log events to standard output, one line per event.

    Each line starts with a colored prefix, followed by a single space and the message body.
    Without a color pattern the prefix is the local time of the event.  With a color pattern,
    the prefix is the message up to the end of the first match of the pattern, and the body is
    the rest of the message after the one separator character following the match.

    Attributes:
        color_pattern: the regular expression selecting the prefix, if any
        color: the name of the color of the prefix
        max_message_length: the maximum number of characters of the body to write, where zero,
            negative, or None means unlimited
        console: the console to write to
    """

    def __init__(
        self,
        color_pattern: Optional[str] = None,
        color: str = DEFAULT_COLOR,
        max_message_length: Optional[int] = DEFAULT_MAX_MESSAGE_LENGTH,
        console: Optional[Console] = None,
    ) -> None:
        self.color_pattern: Optional[Pattern[str]] = None
        if color_pattern:
            try:
                self.color_pattern = re.compile(color_pattern)
            except re.error as ex:
                raise ConfigurationError(f"Invalid color pattern '{color_pattern}': {ex}") from ex
        self.color: str = resolve_color(color)
        self.max_message_length: Optional[int] = max_message_length
        self.console: Console = Console() if console is None else console

    def split(self, event: LogEvent) -> Tuple[str, str]:
        """Splits the event into the prefix and the (possibly truncated) body.

        Raises:
            PatternMismatchError: if a color pattern is set and does not match the message
        """
        prefix: str
        body: str
        if self.color_pattern is None:
            prefix = format_timestamp(event.timestamp)
            body = event.message
        else:
            match = self.color_pattern.search(event.message)
            if match is None:
                raise PatternMismatchError(
                    pattern=self.color_pattern.pattern, message=event.message, event_id=event.id
                )
            end = match.end()
            prefix = event.message[:end]
            body = event.message[end + 1 :].lstrip(" ")

        if self.max_message_length is not None and self.max_message_length > 0:
            body = body[: self.max_message_length]

        return prefix, body

    def format(self, event: LogEvent) -> str:
        """Formats the event as a single line, without a trailing newline.

        Only the prefix is styled, for the color system of the console.  The body is kept as is,
        including tabs and carriage returns.
        """
        prefix, body = self.split(event)
        color_system = self.console.color_system
        styled = Style.parse(self.color).render(
            prefix, color_system=None if color_system is None else COLOR_SYSTEMS[color_system]
        )
        return styled + " " + body

    def render(self, event: LogEvent) -> None:
        """Writes the event to the console's file."""
        file = self.console.file
        file.write(self.format(event) + "\n")
        file.flush()
