"""
Data models and configuration for the listener monitor.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from src.listeners.models import SpikeConfig

FEED_URL_TEMPLATE = "https://www.broadcastify.com/listen/feed/{feed_id}"


class SortOrder(Enum):
    """Order in which alerted feeds are handed to the notifier"""

    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass
class Feed:
    """One feed as reported by the feed source for a single cycle"""

    id: int
    name: str
    listeners: int
    location: str = ""
    alert: str | None = None

    @property
    def url(self) -> str:
        return FEED_URL_TEMPLATE.format(feed_id=self.id)

    @classmethod
    def from_dict(cls, data: dict) -> "Feed":
        """Create from a decoded JSON object

        Raises:
            KeyError: If `id` or `listeners` is missing
            ValueError, TypeError: If a field has the wrong type
        """
        alert = data.get("alert")
        return cls(
            id=int(data["id"]),
            name=str(data.get("name", "")),
            listeners=int(data["listeners"]),
            location=str(data.get("location") or ""),
            alert=str(alert) if alert else None,
        )


@dataclass
class FeedAlert:
    """A feed that spiked or carries an alert this cycle"""

    feed: Feed
    spiked: bool
    delta: int  # Listener change against the (unskewed) average

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization"""
        data = asdict(self)
        data["feed"]["url"] = self.feed.url
        return data


@dataclass
class MonitorConfig:
    """Configuration for the listener monitor"""

    # Feed source
    feed_url: str = "http://localhost:8080/feeds.json"
    request_timeout_seconds: float = 10.0

    # Polling behavior
    update_time_minutes: float = 6.0
    minimum_listeners: int = 15
    sort_order: SortOrder = SortOrder.DESCENDING

    # Persisted hourly baselines
    averages_path: str = "averages.csv"

    # Detection constants
    spike: SpikeConfig = field(default_factory=SpikeConfig)
