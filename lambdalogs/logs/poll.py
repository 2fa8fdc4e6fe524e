"""
Polling of CloudWatch log events across log groups
--------------------------------------------------
"""

import enum
import logging
import time
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence

from lambdalogs.core import FetchError
from lambdalogs.core import PatternMismatchError
from lambdalogs.logs.api import LogEvent
from lambdalogs.logs.api import WINDOW_OVERLAP_MS
from lambdalogs.logs.api import SeenSet
from lambdalogs.logs.api import Window
from lambdalogs.logs.api import merge_events
from lambdalogs.logs.render import LineRenderer
from lambdalogs.util import now_ms

# Retrieves the events of each log group for a window
Fetcher = Callable[[Sequence[str], Window], Dict[str, List[LogEvent]]]


@enum.unique
class PollState(enum.Enum):
    """Whether the scheduler queries a single window or keeps polling for new events."""

    OneShot = "one-shot"
    Polling = "polling"


class PollScheduler:
    """Fetches, merges and renders the log events of a set of log groups.

    Each cycle fetches the events of every log group for one window, drops events rendered by a
    previous cycle, and renders the rest ordered by time.  Without a polling delay a single
    cycle is run.  With a polling delay, the next cycle starts after the delay and covers the
    time from shortly before the end of the previous window until now.

    Attributes:
        groups: the log group names
        fetcher: retrieves the events of each log group for a window
        renderer: writes a single event
        poll_delay_ms: the delay between cycles in milliseconds, or None to run a single cycle
        seen: the events rendered so far
        clock: returns the current time in milliseconds since the epoch
        sleep: sleeps for the given number of seconds
    """

    def __init__(
        self,
        groups: Sequence[str],
        fetcher: Fetcher,
        renderer: LineRenderer,
        poll_delay_ms: Optional[int] = None,
        seen: Optional[SeenSet] = None,
        clock: Callable[[], int] = now_ms,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.groups: List[str] = list(groups)
        self.fetcher: Fetcher = fetcher
        self.renderer: LineRenderer = renderer
        self.poll_delay_ms: Optional[int] = poll_delay_ms
        self.seen: SeenSet = SeenSet() if seen is None else seen
        self.clock: Callable[[], int] = clock
        self.sleep: Callable[[float], None] = sleep
        self.logger: logging.Logger = logging.getLogger(__name__) if logger is None else logger

    @property
    def state(self) -> PollState:
        return PollState.OneShot if self.poll_delay_ms is None else PollState.Polling

    def run_cycle(self, window: Window) -> int:
        """Fetches, merges and renders the events of a single window.

        Lines whose message does not match the color pattern are skipped with a warning.

        Returns:
            the number of lines rendered

        Raises:
            FetchError: if the events of any log group could not be retrieved
        """
        self.logger.debug(f"Retrieving events for window {window}")
        group_to_events = self.fetcher(self.groups, window)
        events = merge_events(group_to_events, self.seen)

        num_rendered: int = 0
        for event in events:
            try:
                self.renderer.render(event)
                num_rendered += 1
            except PatternMismatchError as ex:
                self.logger.warning(
                    f"Skipping event '{event.id}' from log group '{event.group}': {ex}"
                )
        return num_rendered

    def next_window(self, window: Window, succeeded: bool) -> Window:
        """The window of the cycle after the given one.

        After a failed cycle the next window starts where the failed one started, so that its
        events are retrieved again.
        """
        start = window.start
        if succeeded:
            start = window.end - WINDOW_OVERLAP_MS
        # an end time in the future may still be ahead of the clock
        now = max(self.clock(), start + 1)
        if succeeded:
            return window.advance(now=now)
        return Window(start=start, end=now)

    def run(self, window: Window, max_cycles: Optional[int] = None) -> None:
        """Runs the first cycle over the given window, then keeps polling if a delay is set.

        Polling continues until the process is interrupted, or `max_cycles` cycles were run.

        Args:
            window: the window of the first cycle
            max_cycles: the maximum number of cycles to run, or None for no limit

        Raises:
            FetchError: if the events could not be retrieved and polling is not enabled
        """
        if len(self.groups) == 0:
            self.logger.warning("No log groups found, no log events will be retrieved")

        num_cycles: int = 0
        while True:
            succeeded = True
            try:
                self.run_cycle(window)
            except FetchError as ex:
                if self.state == PollState.OneShot:
                    raise ex
                self.logger.error(f"Encountered an error while polling, will try again: {ex}")
                succeeded = False
            num_cycles += 1

            if self.state == PollState.OneShot:
                break
            if max_cycles is not None and num_cycles >= max_cycles:
                break

            assert self.poll_delay_ms is not None
            self.sleep(self.poll_delay_ms / 1000)
            window = self.next_window(window, succeeded=succeeded)
