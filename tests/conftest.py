"""
Shared fixtures for yt-sub tests.

Provides common test fixtures for use across all test modules.
"""

from collections.abc import AsyncGenerator
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from yt_sub.config import (
    AppConfig,
    ChannelConfig,
    SlackNotifierConfig,
)
from yt_sub.storage import Storage
from yt_sub.video import Video

from helpers import NOW, make_video


# Path to test fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def sample_config_path(fixtures_dir: Path) -> Path:
    """Return path to sample config file."""
    return fixtures_dir / "sample_config.yaml"


@pytest.fixture
def videos_feed_content(fixtures_dir: Path) -> str:
    """Return a channel feed with 15 videos, newest first."""
    return (fixtures_dir / "yt_videos_data.xml").read_text()


@pytest.fixture
def empty_feed_content(fixtures_dir: Path) -> str:
    """Return a channel feed without any video."""
    return (fixtures_dir / "empty_channel.xml").read_text()


@pytest.fixture
def now() -> datetime:
    """Return the fixed current time used by tests."""
    return NOW


@pytest.fixture
def sample_video() -> Video:
    """
    Create a sample video for testing.

    Returns
    -------
    Video
        A video published two hours before ``NOW``.
    """
    return make_video()


@pytest.fixture
def minimal_channel_config() -> ChannelConfig:
    """Create a minimal valid channel configuration."""
    return ChannelConfig(channel_id="UCtestchannel000000000001", handle="@TestChannel")


@pytest.fixture
def slack_config() -> SlackNotifierConfig:
    """Create a Slack notifier configuration."""
    return SlackNotifierConfig(webhook_url="https://hooks.slack.com/services/T0/B0/X")


@pytest.fixture
def minimal_config_dict() -> dict[str, Any]:
    """
    Create a minimal valid configuration dictionary.

    Returns
    -------
    dict
        Configuration dictionary that can be used to create AppConfig.
    """
    return {
        "channels": [
            {
                "channel_id": "UCtestchannel000000000001",
                "handle": "@TestChannel",
            }
        ],
    }


@pytest.fixture
def minimal_app_config(minimal_config_dict: dict[str, Any]) -> AppConfig:
    """Create a minimal valid app configuration."""
    return AppConfig.model_validate(minimal_config_dict)


@pytest_asyncio.fixture
async def in_memory_storage() -> AsyncGenerator[Storage, None]:
    """
    Create an in-memory SQLite storage for testing.

    Yields
    ------
    Storage
        An initialized in-memory storage instance.
    """
    storage = Storage(":memory:")
    await storage.initialize()
    yield storage
    await storage.close()

