"""
Notification sinks for alerted feeds.
"""

from abc import ABC, abstractmethod

import structlog

from .models import FeedAlert

logger = structlog.get_logger(__name__)


class Notifier(ABC):
    """Receives the alerted feeds once per cycle"""

    @abstractmethod
    def notify(self, alerts: list[FeedAlert]) -> None:
        """Deliver the alerts, already in display order"""
        pass


class LogNotifier(Notifier):
    """Writes one structured log event per alerted feed"""

    def __init__(self):
        self.sent = 0

    def notify(self, alerts: list[FeedAlert]) -> None:
        total = len(alerts)

        for index, alert in enumerate(alerts, start=1):
            feed = alert.feed
            logger.warning(
                "Feed update",
                index=index,
                total=total,
                feed_id=feed.id,
                name=feed.name,
                location=feed.location,
                listeners=feed.listeners,
                delta=f"{alert.delta:+d}",
                spiked=alert.spiked,
                alert=feed.alert,
                url=feed.url,
            )

        self.sent += total
