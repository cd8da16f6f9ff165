"""
Main entry point for yt-sub.

Runs a single check of all subscribed channels and sends notifications.
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlparse

import coloredlogs

from yt_sub import dispatch
from yt_sub.config import load_config
from yt_sub.dispatch import RunReport
from yt_sub.filters import watermark_from_hours_offset
from yt_sub.notifier import Notifier, build_notifiers
from yt_sub.rss_parser import FeedFetcher
from yt_sub.storage import Storage

logger = logging.getLogger(__name__)


def redact_proxy_url(proxy_url: str) -> str:
    """
    Redact credentials from a proxy URL for safe logging.

    Parameters
    ----------
    proxy_url : str
        The proxy URL potentially containing credentials.

    Returns
    -------
    str
        The proxy URL with password redacted.
    """
    try:
        parsed = urlparse(proxy_url)
        if parsed.password:
            netloc = parsed.hostname or ""
            if parsed.port:
                netloc = f"{netloc}:{parsed.port}"
            if parsed.username:
                netloc = f"{parsed.username}:****@{netloc}"
            return f"{parsed.scheme}://{netloc}{parsed.path}"
        return proxy_url
    except ValueError:
        return "<proxy url>"


class SubscriptionRunner:
    """
    yt-sub application.

    Resolves the watermark, runs the check and persists the new
    watermark after the first run and after every run that found
    fresh videos. The stored value is the run start time, or the
    newest notified publish time when that is later.
    """

    def __init__(self, config_path: str | Path, cron: bool = False):
        """
        Initialize the runner.

        Parameters
        ----------
        config_path : str | Path
            Path to the YAML configuration file.
        cron : bool
            Deliver notifications in batch mode.
        """
        self.config = load_config(config_path)
        self.cron = cron
        self.storage: Storage | None = None
        self.fetcher: FeedFetcher | None = None
        self.notifiers: list[Notifier] = []

    def resolve_watermark(
        self,
        now: datetime,
        last_run_at: datetime | None,
        hours_offset: int | None = None,
    ) -> datetime:
        """
        Determine the watermark for this run.

        Parameters
        ----------
        now : datetime
            Run start time.
        last_run_at : datetime | None
            Stored time of the last run, if any.
        hours_offset : int | None
            If given, use ``now - hours_offset`` instead of the stored value.

        Returns
        -------
        datetime
            The watermark.
        """
        if hours_offset is not None:
            return watermark_from_hours_offset(hours_offset, now)
        if last_run_at is None:
            # First run: existing videos count as already notified
            logger.info("No previous run recorded, only newer videos will be notified")
            return now
        return last_run_at

    async def run(
        self, hours_offset: int | None = None, now: datetime | None = None
    ) -> RunReport:
        """
        Check all channels once and notify about fresh videos.

        Parameters
        ----------
        hours_offset : int | None
            Look back this many hours instead of using the last run time.
        now : datetime | None
            Run start time. Defaults to the current time.

        Returns
        -------
        RunReport
            Outcome of the run.
        """
        now = now or datetime.now(timezone.utc)
        defaults = self.config.defaults

        proxy_url = defaults.proxy
        if proxy_url:
            logger.info("Using proxy: %s", redact_proxy_url(proxy_url))

        try:
            self.storage = Storage(self.config.storage.database_path)
            await self.storage.initialize()

            self.fetcher = FeedFetcher(
                timeout=defaults.request_timeout,
                user_agent=defaults.user_agent,
                proxy_url=proxy_url,
            )
            self.notifiers = build_notifiers(
                self.config.notifiers,
                proxy_url=proxy_url,
                timeout=defaults.request_timeout,
            )

            last_run_at = await self.storage.get_last_run_at()
            watermark = self.resolve_watermark(now, last_run_at, hours_offset)
            logger.info("Checking for videos published after %s", watermark.isoformat())

            report = await dispatch.run(
                self.config.enabled_channels,
                watermark,
                self.notifiers,
                self.fetcher.fetch_channel,
                now,
                batch=self.cron,
                timeout=defaults.request_timeout,
            )

            if not report.is_empty:
                # Videos stamped after the run start must not be fresh again
                await self.storage.touch_last_run_at(
                    max(now, report.videos[0].published_at)
                )
            elif last_run_at is None:
                await self.storage.touch_last_run_at(now)

            return report
        finally:
            await self.close()

    async def close(self) -> None:
        """Release all resources."""
        for notifier in self.notifiers:
            await notifier.close()
        if self.fetcher:
            await self.fetcher.close()
        if self.storage:
            await self.storage.close()


def setup_logging(verbose: bool = False, cron: bool = False) -> None:
    """
    Configure application logging.

    Parameters
    ----------
    verbose : bool
        If True, set log level to DEBUG.
    cron : bool
        If True, emit plain uncolored lines suitable for cron mail.
    """
    level = logging.DEBUG if verbose else logging.INFO

    if cron:
        coloredlogs.install(
            level=level,
            fmt="[%(asctime)s] %(levelname)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            isatty=False,
            stream=sys.stdout,
        )
    else:
        coloredlogs.install(
            level=level,
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    # Reduce noise from third-party libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Notify about fresh videos from subscribed YouTube channels",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--cron",
        action="store_true",
        help="Produce cron-style logs and batch notifications",
    )
    parser.add_argument(
        "--hours-offset",
        type=int,
        default=None,
        help="Notify about videos from the last N hours instead of since the last run",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    if args.hours_offset is not None and args.hours_offset < 0:
        parser.error("--hours-offset cannot be negative")

    setup_logging(args.verbose, args.cron)

    config_path = Path(args.config)
    if not config_path.exists():
        logger.error("Configuration file not found: %s", config_path)
        sys.exit(1)

    try:
        runner = SubscriptionRunner(config_path, cron=args.cron)
    except Exception as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)

    try:
        asyncio.run(runner.run(hours_offset=args.hours_offset))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")


if __name__ == "__main__":
    main()
