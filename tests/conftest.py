"""
Pytest configuration and shared fixtures.
"""

import pytest

from src.listeners.models import SpikeConfig
from src.listeners.state import FeedAnomalyState
from src.monitor.models import Feed, MonitorConfig, SortOrder


# Detection fixtures
@pytest.fixture
def spike_config():
    """Default detection constants."""
    return SpikeConfig()


@pytest.fixture
def streak_config():
    """Constants requiring two consecutive spikes before correcting."""
    return SpikeConfig(
        spike_base=0.2,
        low_listener_increase=0.01,
        high_listener_decrease=0.01,
        high_listener_decrease_every=10.0,
        reset_fraction=0.05,
        adjust_fraction=0.1,
        spikes_required=2,
    )


@pytest.fixture
def settled_state():
    """Feed whose average and hourly baselines all sit at 100 listeners."""
    return FeedAnomalyState.new(100.0, [100.0] * 24)


# Monitor fixtures
@pytest.fixture
def monitor_config(tmp_path):
    """Monitor configuration persisting into a temporary directory."""
    return MonitorConfig(
        feed_url="http://feeds.test/feeds.json",
        request_timeout_seconds=1.0,
        update_time_minutes=1.0,
        minimum_listeners=15,
        sort_order=SortOrder.DESCENDING,
        averages_path=str(tmp_path / "averages.csv"),
    )


@pytest.fixture
def sample_feeds():
    """A small feed listing as returned by a feed source."""
    return [
        Feed(id=101, name="County Fire", listeners=40, location="Springfield, IL"),
        Feed(id=202, name="Metro Police", listeners=250, location="Shelbyville, IL"),
        Feed(id=303, name="Rail Dispatch", listeners=8, location="Capital City, IL"),
    ]
