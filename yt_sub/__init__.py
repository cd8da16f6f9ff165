"""
yt-sub - Notify about fresh videos from subscribed YouTube channels.

A batch job that checks channel feeds for videos published since the
last run and dispatches notifications to the configured notifiers.
"""

__version__ = "1.0.0"
