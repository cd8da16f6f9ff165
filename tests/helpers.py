"""
Test helpers shared by several test modules.
"""

from datetime import datetime, timedelta, timezone

from yt_sub.formatting import NotifierKind
from yt_sub.video import Video

# Fixed clock used wherever relative times are rendered
NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_video(
    title: str = "Test Video Title",
    published_at: datetime = NOW - timedelta(hours=2),
    channel: str = "Test Channel",
    channel_handle: str | None = "@TestChannel",
    link: str = "https://www.youtube.com/watch?v=test123",
) -> Video:
    """Build a video with sensible defaults."""
    return Video(
        channel=channel,
        channel_handle=channel_handle,
        title=title,
        link=link,
        published_at=published_at,
    )


class RecordingNotifier:
    """Notifier double recording every delivery."""

    def __init__(
        self,
        kind: NotifierKind = NotifierKind.LOG,
        name: str = "recording",
        error: Exception | None = None,
    ):
        self.kind = kind
        self._name = name
        self.error = error
        self.calls: list[tuple[list[str], bool]] = []
        self.closed = False

    @property
    def name(self) -> str:
        return self._name

    async def notify(self, texts: list[str], batch: bool = False) -> None:
        self.calls.append((texts, batch))
        if self.error is not None:
            raise self.error

    async def close(self) -> None:
        self.closed = True
