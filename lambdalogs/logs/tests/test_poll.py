"""Tests for :module:`~lambdalogs.logs.poll`"""

import io
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence

import pytest
from rich.console import Console

from lambdalogs.core import FetchError
from lambdalogs.logs import LineRenderer
from lambdalogs.logs import LogEvent
from lambdalogs.logs import PollScheduler
from lambdalogs.logs import PollState
from lambdalogs.logs import Window


class FakeFetcher:
    """Returns the given responses in order, one per cycle, recording the requested windows.

    A response that is an exception is raised instead of returned.
    """

    def __init__(self, *responses: object) -> None:
        self.responses: List[object] = list(responses)
        self.windows: List[Window] = []

    def __call__(self, groups: Sequence[str], window: Window) -> Dict[str, List[LogEvent]]:
        self.windows.append(window)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        assert isinstance(response, dict)
        return {group: response.get(group, []) for group in groups}


class FakeClock:
    """A clock that advances by the time slept."""

    def __init__(self, now: int) -> None:
        self.now: int = now
        self.sleeps: List[float] = []

    def __call__(self) -> int:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += int(seconds * 1000)


def event(
    event_id: str, timestamp: Optional[int], message: str, group: Optional[str] = None
) -> LogEvent:
    return LogEvent(id=event_id, timestamp=timestamp, message=message, group=group)


def scheduler(
    fetcher: FakeFetcher,
    clock: FakeClock,
    poll_delay_ms: Optional[int] = None,
    color_pattern: Optional[str] = None,
) -> PollScheduler:
    renderer = LineRenderer(
        color_pattern=color_pattern,
        max_message_length=None,
        console=Console(file=io.StringIO(), color_system=None, highlight=False),
    )
    return PollScheduler(
        groups=["A", "B"],
        fetcher=fetcher,
        renderer=renderer,
        poll_delay_ms=poll_delay_ms,
        clock=clock,
        sleep=clock.sleep,
    )


def output_lines(poll_scheduler: PollScheduler) -> List[str]:
    file = poll_scheduler.renderer.console.file
    assert isinstance(file, io.StringIO)
    return file.getvalue().splitlines()


def test_state() -> None:
    clock = FakeClock(now=0)
    assert scheduler(FakeFetcher(), clock).state == PollState.OneShot
    assert scheduler(FakeFetcher(), clock, poll_delay_ms=1000).state == PollState.Polling


def test_one_shot_runs_a_single_cycle() -> None:
    fetcher = FakeFetcher(
        {"A": [event("1", 100, "ERROR x")], "B": [event("2", 50, "ERROR y")]},
        {"A": [event("3", 200, "ERROR z")]},
    )
    clock = FakeClock(now=100_000)
    poll_scheduler = scheduler(fetcher, clock, color_pattern="ERROR")

    poll_scheduler.run(Window(start=0, end=10000))

    assert fetcher.windows == [Window(start=0, end=10000)]
    assert output_lines(poll_scheduler) == ["ERROR y", "ERROR x"]
    assert clock.sleeps == []


def test_one_shot_fetch_error_is_fatal() -> None:
    fetcher = FakeFetcher(FetchError(group="A", reason="boom"))
    poll_scheduler = scheduler(fetcher, FakeClock(now=100_000))
    with pytest.raises(FetchError):
        poll_scheduler.run(Window(start=0, end=10000))


def test_polling_advances_the_window_and_deduplicates() -> None:
    fetcher = FakeFetcher(
        {"A": [event("1", 100, "ERROR first")]},
        {"A": [event("1", 100, "ERROR first"), event("2", 9000, "ERROR second")]},
        {"B": [event("2", 9000, "ERROR second")]},
    )
    clock = FakeClock(now=20_000)
    poll_scheduler = scheduler(fetcher, clock, poll_delay_ms=5000, color_pattern="ERROR")

    poll_scheduler.run(Window(start=0, end=10000), max_cycles=3)

    assert fetcher.windows == [
        Window(start=0, end=10000),
        Window(start=0, end=25_000),
        Window(start=15_000, end=30_000),
    ]
    assert clock.sleeps == [5.0, 5.0]
    assert output_lines(poll_scheduler) == ["ERROR first", "ERROR second"]
    assert len(poll_scheduler.seen) == 2


def test_polling_continues_after_fetch_error() -> None:
    fetcher = FakeFetcher(
        {"A": [event("1", 100, "ERROR first")]},
        FetchError(group="B", reason="throttled"),
        {"B": [event("2", 12_000, "ERROR second")]},
    )
    clock = FakeClock(now=20_000)
    poll_scheduler = scheduler(fetcher, clock, poll_delay_ms=1000, color_pattern="ERROR")

    poll_scheduler.run(Window(start=0, end=10000), max_cycles=3)

    # the window after the failed cycle starts where the failed window started
    assert fetcher.windows == [
        Window(start=0, end=10000),
        Window(start=0, end=21_000),
        Window(start=0, end=22_000),
    ]
    assert output_lines(poll_scheduler) == ["ERROR first", "ERROR second"]


def test_pattern_mismatch_skips_only_that_line(caplog: Any) -> None:
    fetcher = FakeFetcher(
        {
            "A": [
                event("1", 100, "ERROR first"),
                event("2", 200, "no match here", group="/aws/lambda/fn"),
            ],
            "B": [event("3", 300, "ERROR third")],
        }
    )
    poll_scheduler = scheduler(fetcher, FakeClock(now=100_000), color_pattern="ERROR")

    assert poll_scheduler.run_cycle(Window(start=0, end=10000)) == 2
    assert output_lines(poll_scheduler) == ["ERROR first", "ERROR third"]
    # the skipped event is not retried in a later cycle
    assert "2" in poll_scheduler.seen
    assert "Skipping event '2' from log group '/aws/lambda/fn'" in caplog.text


def test_empty_cycle_renders_nothing() -> None:
    fetcher = FakeFetcher({})
    poll_scheduler = scheduler(fetcher, FakeClock(now=100_000))
    poll_scheduler.run(Window(start=0, end=10000))
    assert output_lines(poll_scheduler) == []


def test_next_window() -> None:
    clock = FakeClock(now=50_000)
    poll_scheduler = scheduler(FakeFetcher(), clock, poll_delay_ms=1000)
    window = Window(start=0, end=10000)
    assert poll_scheduler.next_window(window, succeeded=True) == Window(start=0, end=50_000)
    assert poll_scheduler.next_window(window, succeeded=False) == Window(start=0, end=50_000)

    # a window ending ahead of the clock still yields a valid window
    future = Window(start=40_000, end=80_000)
    assert poll_scheduler.next_window(future, succeeded=True) == Window(start=70_000, end=70_001)
