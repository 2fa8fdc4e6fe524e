"""
Utility methods for retrieving and merging AWS CloudWatch log events
--------------------------------------------------------------------
"""

import logging
from concurrent.futures import Future
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import wait
from dataclasses import dataclass
from typing import Any
from typing import Dict
from typing import List
from typing import Mapping
from typing import Optional
from typing import Sequence

import mypy_boto3_logs as logs
from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError
from mypy_boto3_logs.type_defs import FilteredLogEventTypeDef  # noqa

from lambdalogs.core import ConfigurationError
from lambdalogs.core import FetchError

# The number of milliseconds each polling window reaches back before the end of the previous
# window.  Events may take a while to become available in CloudWatch, so they would be missed
# if the next window started exactly where the previous one ended.
WINDOW_OVERLAP_MS: int = 10000

# The maximum number of log groups queried at the same time
DEFAULT_MAX_WORKERS: int = 10


@dataclass(frozen=True)
class LogEvent:
    """A single log event returned by CloudWatch.

    Attributes:
        id: the identifier CloudWatch assigned to the event, unique across log groups
        timestamp: the time of the event in milliseconds since the epoch, if known
        message: the log message with trailing whitespace removed
        group: the name of the log group the event was retrieved from
    """

    id: str
    timestamp: Optional[int]
    message: str
    group: Optional[str] = None

    @classmethod
    def from_response(
        cls, event: FilteredLogEventTypeDef, group: Optional[str] = None
    ) -> "LogEvent":
        """Builds a log event from an event returned by `filter_log_events`."""
        timestamp: Any = event.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            timestamp = None
        return LogEvent(
            id=event["eventId"],
            timestamp=None if timestamp is None else int(timestamp),
            message=event.get("message", "").rstrip(),
            group=group,
        )


@dataclass(frozen=True)
class Window:
    """A half-open time interval `[start, end)` in milliseconds since the epoch.

    Attributes:
        start: the first millisecond in the window
        end: the first millisecond after the window
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ConfigurationError(
                f"Start time '{self.start}' must be before end time '{self.end}'"
            )

    def advance(self, now: int, overlap: int = WINDOW_OVERLAP_MS) -> "Window":
        """The window to poll after this one: from `overlap` milliseconds before the end of
        this window until `now`."""
        return Window(start=self.end - overlap, end=now)

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"


class SeenSet:
    """The log events already handed downstream, keyed by event identifier.

    Events are only ever added, so a log event is emitted at most once no matter how many
    overlapping windows return it.
    """

    def __init__(self) -> None:
        self._events: Dict[str, LogEvent] = {}

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    def __len__(self) -> int:
        return len(self._events)

    def add(self, event: LogEvent) -> None:
        """Records the given event as seen."""
        self._events[event.id] = event


def fetch_group_events(
    client: logs.Client, group: str, window: Window, filter_pattern: str
) -> List[LogEvent]:
    """Retrieves all events in a log group that match a filter pattern within a window.

    Args:
        client: the logs client
        group: the log group name
        window: the window of time to search
        filter_pattern: the CloudWatch filter pattern, passed through as is

    Returns:
        the matching events, in the order returned by CloudWatch

    Raises:
        FetchError: if any request to CloudWatch fails
    """
    # the end time of `filter_log_events` is inclusive
    kwargs: Dict[str, Any] = {
        "logGroupName": group,
        "startTime": window.start,
        "endTime": window.end - 1,
    }
    if filter_pattern:
        kwargs["filterPattern"] = filter_pattern

    events: List[LogEvent] = []
    try:
        paginator = client.get_paginator("filter_log_events")
        for page in paginator.paginate(**kwargs):
            events.extend(LogEvent.from_response(event, group=group) for event in page["events"])
    except (BotoCoreError, ClientError) as ex:
        raise FetchError(group=group, reason=str(ex)) from ex
    return events


def fetch_window(
    client: logs.Client,
    groups: Sequence[str],
    window: Window,
    filter_pattern: str,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> Dict[str, List[LogEvent]]:
    """Retrieves the matching events of every log group within a window.

    One query is issued per log group, all of them concurrently.  This returns only once every
    query has completed.

    Args:
        client: the logs client
        groups: the log group names
        window: the window of time to search
        filter_pattern: the CloudWatch filter pattern
        max_workers: the maximum number of log groups queried at the same time

    Returns:
        a mapping from log group name to the events of that group

    Raises:
        FetchError: if the query of any log group failed
    """
    if len(groups) == 0:
        return {}

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(groups)))) as executor:
        futures: Dict[str, Future] = {
            group: executor.submit(fetch_group_events, client, group, window, filter_pattern)
            for group in groups
        }
        wait(futures.values())

    # all queries have completed, so any failure is reported for the first failed group
    for group, future in futures.items():
        ex = future.exception()
        if ex is not None:
            raise ex

    return {group: future.result() for group, future in futures.items()}


def merge_events(
    group_to_events: Mapping[str, Sequence[LogEvent]], seen: SeenSet
) -> List[LogEvent]:
    """Merges the events of all log groups into a single list ordered by time.

    Events already in `seen` are dropped.  All other events are added to `seen`, so a
    subsequent call with the same events returns nothing.  Events are sorted by timestamp; the
    order of events with the same timestamp is undefined.  Events without a timestamp are placed
    after all events with one.

    Args:
        group_to_events: the events of each log group, for example from `fetch_window`
        seen: the events that were already merged

    Returns:
        the events not seen before, ordered by timestamp
    """
    timed: List[LogEvent] = []
    untimed: List[LogEvent] = []
    for events in group_to_events.values():
        for event in events:
            if event.id in seen:
                continue
            seen.add(event)
            if event.timestamp is None:
                untimed.append(event)
            else:
                timed.append(event)

    timed.sort(key=lambda event: event.timestamp)  # type: ignore
    if len(untimed) > 0:
        logging.getLogger(__name__).debug(f"Found {len(untimed):,d} events without a timestamp")
    return timed + untimed
