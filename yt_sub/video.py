"""
Video model and channel feed parsing.

Turns a channel's raw Atom feed document into ``Video`` objects
using feedparser.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import feedparser

from yt_sub.errors import ParseError

logger = logging.getLogger(__name__)

# Trailing "Z", numeric offset or RFC 822 zone name
_UTC_OFFSET_PATTERN = re.compile(r"(?:[zZ]|[+-]\d{2}:?\d{2}|[A-Za-z]{2,5})\s*$")


@dataclass(frozen=True)
class Video:
    """
    A video published on a subscribed channel.

    Attributes
    ----------
    channel : str
        Display name of the channel, taken from the feed.
    channel_handle : str | None
        Configured handle of the channel, if any.
    title : str
        Video title.
    link : str
        Video URL.
    published_at : datetime
        Publication time in UTC.
    """

    channel: str
    channel_handle: str | None
    title: str
    link: str
    published_at: datetime


def _channel_name(parsed: Any) -> str:
    """Return the feed-level display name of the channel."""
    feed = parsed.get("feed", {})
    name = feed.get("author") or feed.get("author_detail", {}).get("name")
    if not name:
        name = feed.get("title")
    if not name:
        raise ParseError("Feed has no channel name")
    return name


def _published_at(entry: Any) -> datetime:
    """Return the entry publication time as an aware UTC datetime."""
    published = entry.get("published_parsed")
    if published is None:
        raise ParseError(
            f"Entry '{entry.get('title', '')}' has no parseable publish date: "
            f"{entry.get('published')!r}"
        )
    raw = entry.get("published", "")
    if not _UTC_OFFSET_PATTERN.search(raw):
        raise ParseError(
            f"Entry '{entry.get('title', '')}' publish date has no UTC offset: {raw!r}"
        )
    # feedparser normalizes parsed dates to UTC
    return datetime(*published[:6], tzinfo=timezone.utc)


def parse_feed(content: str, channel_handle: str | None = None) -> list[Video]:
    """
    Parse a channel feed document into videos.

    Parsing is strict per document: a malformed document or a single
    entry missing its title, link or publish date fails the whole feed.

    Parameters
    ----------
    content : str
        Raw feed XML.
    channel_handle : str | None
        Handle attached to every produced video.

    Returns
    -------
    list[Video]
        Videos in feed order. Empty if the feed has no entries.

    Raises
    ------
    ParseError
        If the document is not a valid feed or an entry is incomplete.
    """
    # Some servers return content with leading newlines which breaks
    # XML declaration parsing
    parsed: Any = feedparser.parse(content.lstrip())

    if parsed.bozo and not isinstance(
        parsed.bozo_exception, feedparser.CharacterEncodingOverride
    ):
        raise ParseError(f"Malformed feed document: {parsed.bozo_exception}")

    if not parsed.version:
        raise ParseError("Document is not an RSS or Atom feed")

    channel = _channel_name(parsed)

    videos = []
    for entry in parsed.entries:
        title = entry.get("title")
        if not title:
            raise ParseError(f"Entry in feed '{channel}' has no title")

        link = entry.get("link")
        if not link:
            raise ParseError(f"Entry '{title}' in feed '{channel}' has no link")

        videos.append(
            Video(
                channel=channel,
                channel_handle=channel_handle,
                title=title,
                link=link,
                published_at=_published_at(entry),
            )
        )

    logger.debug("Parsed %d video(s) from '%s'", len(videos), channel)
    return videos
