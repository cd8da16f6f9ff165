"""
Notification text formatting.

Renders a video into the text convention of each notifier kind.
"""

from datetime import datetime
from enum import Enum

from yt_sub.errors import UnsupportedNotifierError
from yt_sub.video import Video


class NotifierKind(str, Enum):
    """Kinds of notification destinations."""

    LOG = "log"
    SLACK = "slack"
    TELEGRAM = "telegram"


def _plural(count: int, unit: str) -> str:
    if count == 1:
        return f"1 {unit} ago"
    return f"{count} {unit}s ago"


def format_time_ago(published_at: datetime, now: datetime) -> str:
    """
    Describe how long ago a video was published.

    Elapsed time is truncated to whole minutes. Durations under two hours
    are phrased in minutes unless they are exactly one hour.

    Parameters
    ----------
    published_at : datetime
        Publication time.
    now : datetime
        Current time.

    Returns
    -------
    str
        Phrase such as "just now", "5 minutes ago" or "3 hours ago".
    """
    minutes = int((now - published_at).total_seconds() // 60)

    if minutes < 1:
        return "just now"

    hours, remainder = divmod(minutes, 60)
    if hours >= 2 or (hours == 1 and remainder == 0):
        return _plural(hours, "hour")

    return _plural(minutes, "minute")


def _format_log(video: Video, now: datetime) -> str:
    parts = ["-"]

    if video.channel_handle:
        parts.append(video.channel_handle)

    parts.append(f"[{video.title}]({video.link})")

    time_ago = format_time_ago(video.published_at, now)
    if time_ago:
        parts.append(f"- {time_ago}")

    return " ".join(parts)


def _format_slack(video: Video) -> str:
    return f"*New video - {video.channel}* <{video.link}|{video.title}>"


def notification_text(video: Video, kind: NotifierKind, now: datetime) -> str:
    """
    Render a video for a notifier kind.

    Parameters
    ----------
    video : Video
        The video to render.
    kind : NotifierKind
        Kind of the destination notifier.
    now : datetime
        Current time, used for the relative publication time.

    Returns
    -------
    str
        Rendered notification text.

    Raises
    ------
    UnsupportedNotifierError
        If the notifier kind has no rendering yet.
    """
    if kind is NotifierKind.LOG:
        return _format_log(video, now)
    if kind is NotifierKind.SLACK:
        return _format_slack(video)
    if kind is NotifierKind.TELEGRAM:
        raise UnsupportedNotifierError("Telegram notifications are not implemented yet")
    raise UnsupportedNotifierError(f"Unknown notifier kind: {kind!r}")
