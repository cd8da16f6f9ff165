"""
Freshness filtering and ordering of videos.

A video is fresh when it was published strictly after the run watermark.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta

from yt_sub.video import Video

logger = logging.getLogger(__name__)


def is_fresh(video: Video, watermark: datetime) -> bool:
    """
    Check whether a video was published after the watermark.

    Parameters
    ----------
    video : Video
        The video to check.
    watermark : datetime
        Boundary timestamp. Videos published exactly at it are not fresh.

    Returns
    -------
    bool
        True if the video is fresh.
    """
    return video.published_at > watermark


def filter_fresh(videos: Iterable[Video], watermark: datetime) -> list[Video]:
    """
    Keep only videos published strictly after the watermark.

    Input order is preserved.

    Parameters
    ----------
    videos : Iterable[Video]
        Videos to filter.
    watermark : datetime
        Boundary timestamp.

    Returns
    -------
    list[Video]
        Fresh videos.
    """
    videos = list(videos)
    fresh = [v for v in videos if is_fresh(v, watermark)]

    logger.debug(
        "%d/%d video(s) published after %s",
        len(fresh),
        len(videos),
        watermark.isoformat(),
    )

    return fresh


def sort_newest_first(videos: Iterable[Video]) -> list[Video]:
    """Sort videos by publication date, newest first. Ties keep input order."""
    return sorted(videos, key=lambda v: v.published_at, reverse=True)


def watermark_from_hours_offset(hours: int, now: datetime) -> datetime:
    """
    Build a watermark a number of hours before ``now``.

    Parameters
    ----------
    hours : int
        Offset in hours. Must not be negative.
    now : datetime
        Reference time.

    Returns
    -------
    datetime
        The watermark.
    """
    if hours < 0:
        raise ValueError("Hours offset cannot be negative")
    return now - timedelta(hours=hours)
