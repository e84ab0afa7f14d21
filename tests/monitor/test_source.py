"""
Tests for HttpFeedSource.
"""

from unittest.mock import MagicMock

import pytest
import requests

from src.monitor.source import FeedSourceError, HttpFeedSource

URL = "http://feeds.test/feeds.json"


@pytest.fixture
def source():
    """Source with a mocked HTTP session."""
    source = HttpFeedSource(URL, timeout_seconds=2.5)
    source.session = MagicMock()
    return source


def respond_with(source, payload):
    response = MagicMock()
    response.json.return_value = payload
    source.session.get.return_value = response
    return response


class TestHttpFeedSource:
    """Tests for HttpFeedSource class."""

    def test_parses_feed_list(self, source):
        respond_with(
            source,
            [
                {"id": 1, "name": "County Fire", "listeners": 120, "location": "Springfield"},
                {"id": "2", "name": "Metro Police", "listeners": "45", "alert": "Pursuit"},
            ],
        )

        feeds = source.get_latest()

        source.session.get.assert_called_once_with(URL, timeout=2.5)
        assert [f.id for f in feeds] == [1, 2]
        assert feeds[0].listeners == 120
        assert feeds[0].alert is None
        assert feeds[1].listeners == 45
        assert feeds[1].alert == "Pursuit"

    def test_parses_wrapped_listing(self, source):
        respond_with(source, {"feeds": [{"id": 9, "name": "Air", "listeners": 60}]})

        feeds = source.get_latest()

        assert len(feeds) == 1
        assert feeds[0].name == "Air"

    def test_skips_malformed_entries(self, source):
        respond_with(
            source,
            [
                {"id": 1, "name": "Ok", "listeners": 10},
                {"name": "No id", "listeners": 10},
                {"id": 3, "listeners": "many"},
                "garbage",
            ],
        )

        feeds = source.get_latest()

        assert [f.id for f in feeds] == [1]
        assert source.stats["parse_errors"] == 3
        assert source.stats["feeds_parsed"] == 1

    def test_request_error_raises(self, source):
        source.session.get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(FeedSourceError, match="Failed to fetch feeds"):
            source.get_latest()

    def test_http_error_raises(self, source):
        response = respond_with(source, [])
        response.raise_for_status.side_effect = requests.HTTPError("503 Server Error")

        with pytest.raises(FeedSourceError):
            source.get_latest()

    def test_invalid_json_raises(self, source):
        response = respond_with(source, None)
        response.json.side_effect = ValueError("Expecting value")

        with pytest.raises(FeedSourceError, match="Invalid JSON"):
            source.get_latest()

    def test_non_list_payload_raises(self, source):
        respond_with(source, {"status": "ok"})

        with pytest.raises(FeedSourceError, match="must be a list"):
            source.get_latest()

    def test_close_closes_session(self, source):
        source.close()

        source.session.close.assert_called_once()
