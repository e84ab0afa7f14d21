"""
Per-feed anomaly state.

Each feed carries a bounded moving average, an adaptive spike threshold and
an optional "unskewed" baseline. After a sustained spike the unskewed
baseline stands in for the live average in delta calculations and slowly
decays back towards it, so one spike does not poison the hourly baselines
that are persisted and used to re-seed the feed after a restart.

Per cycle the order is fixed:
1. spike detection against the average from before this cycle
2. moving average update
3. hourly baseline / corrective state update using the new average
"""

from enum import Enum

from .average import BoundedAverage
from .models import SpikeConfig

HOURS_PER_DAY = 24
LOW_LISTENER_LIMIT = 50.0
MIN_THRESHOLD = 0.01


class BaselineMode(Enum):
    """Whether a feed compares against its live average or an unskewed baseline"""

    TRACKING = "tracking"
    CORRECTING = "correcting"


def lerp(start: float, end: float, fraction: float) -> float:
    """Linear interpolation from `start` towards `end`"""
    return start + (end - start) * fraction


class FeedAnomalyState:
    """Tracks listener history for one feed and flags spikes"""

    def __init__(self, average: BoundedAverage, hourly: list[float]):
        if len(hourly) != HOURS_PER_DAY:
            raise ValueError(
                f"Hourly baseline needs {HOURS_PER_DAY} values, got {len(hourly)}"
            )

        self.average = average
        self.corrected_baseline: float | None = None
        self.hourly = [float(v) for v in hourly]
        self.spike_streak = 0

    @classmethod
    def new(cls, seed: float = 0.0, hourly: list[float] | None = None) -> "FeedAnomalyState":
        """Create a state seeded with `seed` and an optional persisted hourly row"""
        if hourly is None:
            hourly = [0.0] * HOURS_PER_DAY
        return cls(BoundedAverage(seed), hourly)

    @property
    def mode(self) -> BaselineMode:
        if self.corrected_baseline is None:
            return BaselineMode.TRACKING
        return BaselineMode.CORRECTING

    def step(self, config: SpikeConfig, hour: int, listeners: float) -> bool:
        """Run one polling cycle for this feed

        Args:
            config: Spike detection constants
            hour: Hour of day (0-23) the sample belongs to
            listeners: Raw listener count for this cycle

        Returns:
            True if the sample is a spike relative to the previous average
        """
        has_spiked = self.has_spiked(config, listeners)

        self.average.update(listeners)
        self.update_hourly(config, hour, has_spiked)

        return has_spiked

    def update_hourly(self, config: SpikeConfig, hour: int, has_spiked: bool) -> None:
        """Advance the spike streak and the corrective baseline, then commit the hour"""
        if not 0 <= hour < HOURS_PER_DAY:
            raise IndexError(f"Hour out of range: {hour}")

        self.spike_streak = self.spike_streak + 1 if has_spiked else 0
        current = self.average.current

        if self.mode is BaselineMode.CORRECTING:
            unskewed = self.corrected_baseline

            # The live average caught back up with the unskewed one
            if current - unskewed < unskewed * config.reset_fraction:
                self.corrected_baseline = None
                self.hourly[hour] = current
            else:
                # Drift towards the live average to follow natural growth
                new_val = lerp(unskewed, current, config.adjust_fraction)
                self.corrected_baseline = new_val
                self.hourly[hour] = new_val

        elif self.mode is BaselineMode.TRACKING:
            if (
                has_spiked
                and self.spike_streak > config.spikes_required
                and self.average.last > 0
            ):
                # Current rather than last average, so the saved baseline can
                # still catch up to natural listener changes
                self.corrected_baseline = current

            self.hourly[hour] = current

    def spike_threshold(self, config: SpikeConfig, listeners: float) -> float:
        """Relative jump `listeners` must exceed over the average to count as a spike"""
        spike_pcnt = config.spike_base

        # Small feeds get a higher bar so tiny absolute jumps stay quiet
        if listeners < LOW_LISTENER_LIMIT:
            return spike_pcnt + (LOW_LISTENER_LIMIT - listeners) * config.low_listener_increase

        # Fast-rising large feeds get a lower bar, floored at MIN_THRESHOLD
        decrease = (
            self.average_delta(listeners)
            / config.high_listener_decrease_every
            * config.high_listener_decrease
        )
        return spike_pcnt - min(spike_pcnt - MIN_THRESHOLD, decrease)

    def has_spiked(self, config: SpikeConfig, listeners: float) -> bool:
        if self.average.current == 0:
            return False

        threshold = self.spike_threshold(config, listeners)
        return (listeners - self.average.current) >= listeners * threshold

    def average_delta(self, listeners: float) -> float:
        """Listener change against the unskewed baseline, or the live average"""
        if self.corrected_baseline is not None:
            return listeners - self.corrected_baseline
        return listeners - self.average.current

    def __repr__(self) -> str:
        return (
            f"FeedAnomalyState(average={self.average!r}, mode={self.mode.value}, "
            f"corrected_baseline={self.corrected_baseline}, spike_streak={self.spike_streak})"
        )
