"""
Feed sources supplying the latest listener counts each cycle.
"""

from abc import ABC, abstractmethod
from typing import Any

import requests
import structlog

from .models import Feed

logger = structlog.get_logger(__name__)


class FeedSourceError(RuntimeError):
    """Raised when the latest feeds cannot be retrieved"""


class FeedSource(ABC):
    """Abstract base class for feed sources"""

    @abstractmethod
    def get_latest(self) -> list[Feed]:
        """Return every feed with its current listener count

        Raises:
            FeedSourceError: If the feeds cannot be retrieved
        """
        pass

    def close(self) -> None:
        """Release any resources held by the source"""


class HttpFeedSource(FeedSource):
    """Pulls a JSON feed listing over HTTP

    Accepts either a bare list of feed objects or `{"feeds": [...]}`.
    Malformed entries are skipped and counted, transport errors raise.
    """

    def __init__(self, url: str, timeout_seconds: float = 10.0):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.session = requests.Session()
        self.stats = {"requests": 0, "feeds_parsed": 0, "parse_errors": 0}

    def get_latest(self) -> list[Feed]:
        self.stats["requests"] += 1

        try:
            response = self.session.get(self.url, timeout=self.timeout_seconds)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error("Failed to fetch feeds", url=self.url, error=str(e))
            raise FeedSourceError(f"Failed to fetch feeds from {self.url}: {e}") from e
        except ValueError as e:
            logger.error("Feed listing is not valid JSON", url=self.url, error=str(e))
            raise FeedSourceError(f"Invalid JSON from {self.url}") from e

        return self._parse_feeds(data)

    def close(self) -> None:
        self.session.close()

    def _parse_feeds(self, data: Any) -> list[Feed]:
        if isinstance(data, dict):
            data = data.get("feeds")
        if not isinstance(data, list):
            raise FeedSourceError("Feed listing must be a list of feeds")

        feeds = []
        for entry in data:
            try:
                feeds.append(Feed.from_dict(entry))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                self.stats["parse_errors"] += 1
                logger.warning("Skipping malformed feed entry", entry=entry, error=str(e))

        self.stats["feeds_parsed"] += len(feeds)
        logger.debug("Feeds fetched", count=len(feeds), url=self.url)
        return feeds
