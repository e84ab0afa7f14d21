"""
Listener Monitor

Polls feed listener counts, runs every feed through its spike detector and
notifies about feeds whose listeners suddenly jump.

Usage:
    python -m src.monitor.run [options]
"""

from .config import DEFAULT_CONFIG, DEV_CONFIG, RELAXED_CONFIG, SENSITIVE_CONFIG
from .models import Feed, FeedAlert, MonitorConfig, SortOrder
from .monitor import ListenerMonitor
from .notifier import LogNotifier, Notifier
from .source import FeedSource, FeedSourceError, HttpFeedSource

__all__ = [
    "Feed",
    "FeedAlert",
    "FeedSource",
    "FeedSourceError",
    "HttpFeedSource",
    "ListenerMonitor",
    "LogNotifier",
    "MonitorConfig",
    "Notifier",
    "SortOrder",
    "DEFAULT_CONFIG",
    "SENSITIVE_CONFIG",
    "RELAXED_CONFIG",
    "DEV_CONFIG",
]

__version__ = "1.0.0"
