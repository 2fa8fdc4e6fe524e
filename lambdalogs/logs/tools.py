"""
Command-line tools for streaming the CloudWatch logs of Lambda functions
------------------------------------------------------------------------
"""

import functools
import logging
from typing import Optional

import boto3
import mypy_boto3_cloudformation as cloudformation
import mypy_boto3_logs as logs

from lambdalogs.logs import LineRenderer
from lambdalogs.logs import PollScheduler
from lambdalogs.logs import Window
from lambdalogs.logs import fetch_window
from lambdalogs.logs.render import DEFAULT_COLOR
from lambdalogs.logs.render import DEFAULT_MAX_MESSAGE_LENGTH
from lambdalogs.stack import resolve_log_groups
from lambdalogs.util import DEFAULT_LOOK_BACK_MS
from lambdalogs.util import now_ms
from lambdalogs.util import parse_poll_delay_ms
from lambdalogs.util import parse_time_ms

# The region used when none is given and none is configured for the AWS CLI
DEFAULT_REGION_NAME: str = "us-east-1"


def default_region_name() -> str:
    """The region configured for the AWS CLI, otherwise `DEFAULT_REGION_NAME`."""
    region_name: Optional[str] = boto3.session.Session().region_name
    return DEFAULT_REGION_NAME if region_name is None else region_name


def lambda_logs(
    *,
    stack: str,
    filter_pattern: str,
    region: Optional[str] = None,
    color_pattern: Optional[str] = None,
    color: str = DEFAULT_COLOR,
    start: Optional[str] = None,
    end: Optional[str] = None,
    msg_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
    poll: Optional[str] = None,
) -> None:
    """Prints the CloudWatch logs of all Lambda functions in a CloudFormation stack.

    Log events of all functions are merged and printed in order of time.  Times are given
    either as milliseconds since the epoch, or relative to now as an integer followed by one of
    the units `s`, `m`, `h`, `d` or `w` (ex. `15m` is fifteen minutes ago).

    Args:
        stack: the name of the CloudFormation stack
        filter_pattern: the CloudWatch filter pattern the log events must match
        region: the AWS region, otherwise the region configured for the AWS CLI
        color_pattern: a regular expression selecting the start of each message to print in
            color, otherwise the time of the event is printed in color
        color: the name of the color to use
        start: the time of the oldest log events to print (default: 15m)
        end: the time of the newest log events to print (default: now)
        msg_length: the maximum number of characters of each message to print, or zero for no
            limit
        poll: keep polling for new log events, waiting the given time between requests (ex.
            `5s`).  Without a time, polls every 5s.
    """
    logger = logging.getLogger(__name__)

    # validate all inputs before making any request
    now = now_ms()
    window = Window(
        start=parse_time_ms(start, default=now - DEFAULT_LOOK_BACK_MS, clock=lambda: now),
        end=parse_time_ms(end, default=now, clock=lambda: now),
    )
    poll_delay_ms = parse_poll_delay_ms(poll)
    renderer = LineRenderer(color_pattern=color_pattern, color=color, max_message_length=msg_length)

    region_name: str = default_region_name() if region is None else region

    cloudformation_client: cloudformation.Client = boto3.client(
        service_name="cloudformation", region_name=region_name  # type: ignore
    )
    logs_client: logs.Client = boto3.client(
        service_name="logs", region_name=region_name  # type: ignore
    )

    logger.info(f"Resolving log groups of stack '{stack}' in region '{region_name}'")
    groups = resolve_log_groups(
        cloudformation_client=cloudformation_client,
        logs_client=logs_client,
        stack=stack,
        logger=logger,
    )

    scheduler = PollScheduler(
        groups=groups,
        fetcher=functools.partial(fetch_window, logs_client, filter_pattern=filter_pattern),
        renderer=renderer,
        poll_delay_ms=poll_delay_ms,
    )
    if poll_delay_ms is not None:
        logger.info(f"Polling log groups every {poll_delay_ms:,d}ms, starting with {window}")

    try:
        scheduler.run(window)
    except KeyboardInterrupt:
        logger.info("Stopped polling.")
