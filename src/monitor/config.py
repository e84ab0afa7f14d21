"""
Predefined configurations for different monitoring scenarios, and loading
of the optional YAML config file that is re-read every polling cycle.
"""

import dataclasses
from pathlib import Path

import yaml

from src.listeners.models import SpikeConfig

from .models import MonitorConfig, SortOrder


# Balanced defaults
DEFAULT_CONFIG = MonitorConfig()


# Surface smaller jumps and enter correction after a single spike
SENSITIVE_CONFIG = MonitorConfig(
    update_time_minutes=3.0,
    minimum_listeners=5,
    spike=SpikeConfig(
        spike_base=0.1,
        low_listener_increase=0.005,
        high_listener_decrease=0.02,
        spikes_required=0,
    ),
)


# Only large, sustained jumps on busy feeds
RELAXED_CONFIG = MonitorConfig(
    update_time_minutes=10.0,
    minimum_listeners=50,
    spike=SpikeConfig(
        spike_base=0.35,
        low_listener_increase=0.02,
        high_listener_decrease=0.005,
        high_listener_decrease_every=25.0,
        spikes_required=2,
    ),
)


# Development/Testing (fast polling, everything visible)
DEV_CONFIG = MonitorConfig(
    update_time_minutes=0.5,
    minimum_listeners=0,
    averages_path="data/averages-dev.csv",
)


def load_config_file(path: str | Path, base: MonitorConfig = DEFAULT_CONFIG) -> MonitorConfig:
    """Build a MonitorConfig from a YAML file layered over `base`

    Top-level keys are MonitorConfig fields; the optional `spike` section
    holds SpikeConfig fields. Keys missing from the file keep the value of
    `base`, which is never modified.

    Example:
        update_time_minutes: 5
        minimum_listeners: 10
        sort_order: ascending
        spike:
          spike_base: 0.25
          spikes_required: 2

    Raises:
        OSError: If the file cannot be read
        yaml.YAMLError: If the file is not valid YAML
        ValueError: If a key is unknown or a value is invalid
    """
    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config file {path}: expected a mapping")

    raw = dict(raw)
    spike_raw = raw.pop("spike", None) or {}
    if not isinstance(spike_raw, dict):
        raise ValueError(f"Invalid config file {path}: 'spike' must be a mapping")

    if "sort_order" in raw:
        raw["sort_order"] = SortOrder(raw["sort_order"])

    try:
        spike = dataclasses.replace(base.spike, **spike_raw)
        return dataclasses.replace(base, spike=spike, **raw)
    except TypeError as e:
        raise ValueError(f"Invalid config file {path}: {e}") from e
