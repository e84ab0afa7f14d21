"""
Per-feed listener tracking and spike detection.

Architecture:
- BoundedAverage: moving average over the last 5 listener counts
- FeedAnomalyState: adaptive spike threshold + unskewed baseline + hourly baselines
- FeedRegistry: feed id -> state for every known feed
- persistence: CSV load/save of the hourly baselines across restarts
"""

from .average import MOVING_AVG_SIZE, BoundedAverage
from .models import SpikeConfig
from .persistence import load_registry, save_registry
from .registry import FeedRegistry
from .state import BaselineMode, FeedAnomalyState, lerp

__all__ = [
    "MOVING_AVG_SIZE",
    "BaselineMode",
    "BoundedAverage",
    "FeedAnomalyState",
    "FeedRegistry",
    "SpikeConfig",
    "lerp",
    "load_registry",
    "save_registry",
]
