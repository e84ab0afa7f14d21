"""
Tests for monitor and detection models.
"""

import pytest

from src.listeners.models import SpikeConfig
from src.monitor.config import DEFAULT_CONFIG, DEV_CONFIG, RELAXED_CONFIG, SENSITIVE_CONFIG
from src.monitor.models import Feed, FeedAlert, MonitorConfig, SortOrder


class TestFeed:
    """Tests for Feed dataclass."""

    def test_from_dict(self):
        feed = Feed.from_dict(
            {"id": "77", "name": "Tower", "listeners": 12, "location": "Ogdenville"}
        )

        assert feed.id == 77
        assert feed.name == "Tower"
        assert feed.listeners == 12
        assert feed.location == "Ogdenville"
        assert feed.alert is None

    def test_from_dict_empty_alert(self):
        feed = Feed.from_dict({"id": 1, "listeners": 3, "alert": ""})

        assert feed.alert is None
        assert feed.name == ""

    def test_from_dict_missing_listeners(self):
        with pytest.raises(KeyError):
            Feed.from_dict({"id": 1})

    def test_url(self):
        assert Feed(id=31, name="x", listeners=1).url.endswith("/listen/feed/31")


class TestFeedAlert:
    """Tests for FeedAlert dataclass."""

    def test_to_dict(self):
        alert = FeedAlert(feed=Feed(id=5, name="Dispatch", listeners=80), spiked=True, delta=25)

        data = alert.to_dict()

        assert data["spiked"] is True
        assert data["delta"] == 25
        assert data["feed"]["id"] == 5
        assert data["feed"]["url"] == alert.feed.url


class TestSpikeConfig:
    """Tests for SpikeConfig dataclass."""

    def test_default_config(self):
        config = SpikeConfig()

        assert config.spike_base == 0.2
        assert config.low_listener_increase == 0.01
        assert config.high_listener_decrease == 0.01
        assert config.high_listener_decrease_every == 10.0
        assert config.reset_fraction == 0.05
        assert config.adjust_fraction == 0.1
        assert config.spikes_required == 1

    @pytest.mark.parametrize(
        "overrides",
        [
            {"high_listener_decrease_every": 0.0},
            {"adjust_fraction": 1.5},
            {"spikes_required": -1},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            SpikeConfig(**overrides)


class TestMonitorConfig:
    """Tests for MonitorConfig and presets."""

    def test_default_config(self):
        config = MonitorConfig()

        assert config.update_time_minutes == 6.0
        assert config.minimum_listeners == 15
        assert config.sort_order is SortOrder.DESCENDING
        assert config.averages_path == "averages.csv"
        assert config.spike == SpikeConfig()

    def test_presets_differ(self):
        assert SENSITIVE_CONFIG.spike.spike_base < DEFAULT_CONFIG.spike.spike_base
        assert RELAXED_CONFIG.spike.spike_base > DEFAULT_CONFIG.spike.spike_base
        assert DEV_CONFIG.minimum_listeners == 0
