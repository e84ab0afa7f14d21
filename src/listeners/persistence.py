"""
CSV persistence for the feed registry.

One headerless row per feed: `feed_id, hour0, ..., hour23`. Hourly baselines
are truncated to whole numbers when written.
"""

from datetime import UTC, datetime
from pathlib import Path

import pandas as pd
import structlog

from .registry import FeedRegistry
from .state import HOURS_PER_DAY, FeedAnomalyState

logger = structlog.get_logger(__name__)

COLUMNS = 1 + HOURS_PER_DAY


def load_registry(path: str | Path, hour: int | None = None) -> FeedRegistry:
    """Load persisted hourly baselines into a fresh registry

    Args:
        path: CSV file written by `save_registry`
        hour: Hour of day used to seed each feed's moving average.
              Defaults to the current UTC hour.

    Returns:
        Registry with one state per persisted feed

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a row is malformed
    """
    path = Path(path)
    if hour is None:
        hour = datetime.now(UTC).hour

    try:
        frame = pd.read_csv(path, header=None)
    except pd.errors.EmptyDataError:
        logger.info("Averages file is empty", path=str(path))
        return FeedRegistry()

    if frame.shape[1] != COLUMNS:
        raise ValueError(f"Expected {COLUMNS} columns, got {frame.shape[1]}")
    if frame.isna().any().any():
        raise ValueError("Averages file has missing values")

    frame = frame.apply(pd.to_numeric)

    registry = FeedRegistry()
    for row in frame.itertuples(index=False, name=None):
        feed_id = int(row[0])
        hourly = [float(v) for v in row[1:]]
        registry[feed_id] = FeedAnomalyState.new(hourly[hour], hourly)

    logger.info("Averages loaded", path=str(path), feeds=len(registry), hour=hour)
    return registry


def save_registry(path: str | Path, registry: FeedRegistry) -> None:
    """Write every feed's hourly baselines, truncated to integers"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    rows = [
        [feed_id, *(int(value) for value in state.hourly)]
        for feed_id, state in sorted(registry.items())
    ]

    if not rows:
        path.write_text("", encoding="utf-8")
    else:
        pd.DataFrame(rows).to_csv(path, header=False, index=False)

    logger.debug("Averages saved", path=str(path), feeds=len(rows))
