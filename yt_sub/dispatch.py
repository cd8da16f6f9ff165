"""
Run orchestration.

Collects fresh videos from all channels, orders them and dispatches the
rendered notifications to every notifier. A failing channel or notifier
is logged and skipped; it never aborts the run.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from yt_sub.config import ChannelConfig
from yt_sub.errors import FetchError
from yt_sub.filters import filter_fresh, sort_newest_first
from yt_sub.formatting import notification_text
from yt_sub.notifier import Notifier
from yt_sub.video import Video

logger = logging.getLogger(__name__)

ChannelFetch = Callable[[ChannelConfig], Awaitable[list[Video]]]


@dataclass
class RunReport:
    """
    Outcome of a run.

    Attributes
    ----------
    videos : list[Video]
        Fresh videos, newest first.
    channel_errors : dict[str, Exception]
        Errors keyed by channel ID.
    notifier_errors : list[tuple[str, Exception]]
        Errors with the name of the notifier that raised them.
    notified : list[str]
        Names of the notifiers that delivered successfully.
    """

    videos: list[Video] = field(default_factory=list)
    channel_errors: dict[str, Exception] = field(default_factory=dict)
    notifier_errors: list[tuple[str, Exception]] = field(default_factory=list)
    notified: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True if no fresh video was found."""
        return not self.videos


async def _fresh_from_channel(
    channel: ChannelConfig,
    watermark: datetime,
    fetch: ChannelFetch,
    timeout: float | None,
) -> list[Video]:
    try:
        videos = await asyncio.wait_for(fetch(channel), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise FetchError(
            f"Timed out after {timeout}s fetching channel '{channel.label}'",
            timed_out=True,
        ) from e
    return filter_fresh(videos, watermark)


async def collect_fresh_videos(
    channels: Sequence[ChannelConfig],
    watermark: datetime,
    fetch: ChannelFetch,
    timeout: float | None = None,
    errors: dict[str, Exception] | None = None,
) -> list[Video]:
    """
    Fetch all channels concurrently and gather their fresh videos.

    Parameters
    ----------
    channels : Sequence[ChannelConfig]
        Channels to check.
    watermark : datetime
        Videos published at or before this time are ignored.
    fetch : ChannelFetch
        Coroutine function returning all videos of a channel.
    timeout : float | None
        Timeout in seconds applied to each channel independently.
    errors : dict[str, Exception] | None
        If given, receives the error of every failed channel.

    Returns
    -------
    list[Video]
        Fresh videos in channel order, unsorted.
    """
    results = await asyncio.gather(
        *(_fresh_from_channel(c, watermark, fetch, timeout) for c in channels),
        return_exceptions=True,
    )

    fresh: list[Video] = []
    for channel, result in zip(channels, results):
        if isinstance(result, Exception):
            logger.error("Error: channel '%s': %s", channel.label, result)
            if errors is not None:
                errors[channel.channel_id] = result
            continue
        if isinstance(result, BaseException):
            raise result
        fresh.extend(result)

    return fresh


async def dispatch(
    videos: Sequence[Video],
    notifiers: Sequence[Notifier],
    now: datetime,
    batch: bool = False,
    report: RunReport | None = None,
) -> RunReport:
    """
    Render videos for each notifier and deliver them.

    Every notifier receives the full ordered batch or nothing.

    Parameters
    ----------
    videos : Sequence[Video]
        Videos to notify about, already ordered.
    notifiers : Sequence[Notifier]
        Destinations.
    now : datetime
        Current time, used for relative publication times.
    batch : bool
        Passed through to each notifier.
    report : RunReport | None
        Report to record outcomes in. A new one is created if omitted.

    Returns
    -------
    RunReport
        The report with notifier outcomes.
    """
    if report is None:
        report = RunReport(videos=list(videos))

    for notifier in notifiers:
        try:
            texts = [notification_text(v, notifier.kind, now) for v in videos]
            await notifier.notify(texts, batch)
        except Exception as e:
            logger.error("Error: notifier '%s': %s", notifier.name, e)
            report.notifier_errors.append((notifier.name, e))
            continue
        report.notified.append(notifier.name)

    return report


async def run(
    channels: Sequence[ChannelConfig],
    watermark: datetime,
    notifiers: Sequence[Notifier],
    fetch: ChannelFetch,
    now: datetime,
    batch: bool = False,
    timeout: float | None = None,
) -> RunReport:
    """
    Check channels for fresh videos and notify about them.

    Does not read or write any stored state; the caller persists a new
    watermark once the run has completed.

    Parameters
    ----------
    channels : Sequence[ChannelConfig]
        Channels to check.
    watermark : datetime
        Only videos published strictly after this time are notified.
    notifiers : Sequence[Notifier]
        Destinations.
    fetch : ChannelFetch
        Coroutine function returning all videos of a channel.
    now : datetime
        Current time.
    batch : bool
        Batch delivery flag passed to notifiers.
    timeout : float | None
        Per-channel fetch timeout in seconds.

    Returns
    -------
    RunReport
        What was found and what failed.
    """
    report = RunReport()

    videos = await collect_fresh_videos(
        channels, watermark, fetch, timeout=timeout, errors=report.channel_errors
    )

    if not videos:
        logger.info("No new videos found.")
        return report

    report.videos = sort_newest_first(videos)

    logger.info(
        "Found %d new video(s), notifying %d notifier(s)",
        len(report.videos),
        len(notifiers),
    )

    return await dispatch(report.videos, notifiers, now, batch=batch, report=report)
