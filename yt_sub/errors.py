"""
Error types raised by yt-sub.

Every error a single channel or notifier can produce during a run derives
from ``YtSubError`` so the dispatcher can isolate failures.
"""


class YtSubError(Exception):
    """Base class for all yt-sub errors."""

    pass


class ParseError(YtSubError):
    """Raised when a feed document cannot be parsed into videos."""

    pass


class FetchError(YtSubError):
    """
    Raised when a channel feed could not be fetched.

    Attributes
    ----------
    timed_out : bool
        True if the fetch was aborted by its timeout.
    """

    def __init__(self, message: str, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out


class FormatError(YtSubError):
    """Raised when a video cannot be rendered for a notifier."""

    pass


class UnsupportedNotifierError(FormatError):
    """Raised for notifier kinds that are declared but not implemented yet."""

    pass


class DispatchError(YtSubError):
    """Raised when a notifier fails to deliver its messages."""

    pass
