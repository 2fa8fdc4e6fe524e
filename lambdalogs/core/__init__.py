from typing import Optional


class LambdaLogsError(Exception):
    """Base class for all errors reported to the user by the lambda-logs tool."""


class ConfigurationError(LambdaLogsError):
    """Raised when the command-line configuration is invalid, before any AWS call is made."""


class ResolutionError(LambdaLogsError):
    """Raised when the log groups of a stack cannot be resolved.

    Attributes:
        stack: the name of the CloudFormation stack
    """

    def __init__(self, stack: str, reason: str) -> None:
        super().__init__(f"Could not resolve the resources of stack '{stack}': {reason}")
        self.stack: str = stack


class FetchError(LambdaLogsError):
    """Raised when the log events of a log group could not be retrieved.

    Attributes:
        group: the name of the log group that failed
    """

    def __init__(self, group: str, reason: str) -> None:
        super().__init__(f"Could not retrieve log events from log group '{group}': {reason}")
        self.group: str = group


class PatternMismatchError(LambdaLogsError):
    """Raised when the color pattern does not match a log message.

    Attributes:
        pattern: the color pattern
        message: the log message that was not matched
    """

    def __init__(self, pattern: str, message: str, event_id: Optional[str] = None) -> None:
        super().__init__(f"Color pattern '{pattern}' did not match message: {message}")
        self.pattern: str = pattern
        self.message: str = message
        self.event_id: Optional[str] = event_id
