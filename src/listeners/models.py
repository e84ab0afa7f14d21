"""
Configuration model for per-feed spike detection.
"""

from dataclasses import dataclass


@dataclass
class SpikeConfig:
    """Numeric constants driving spike detection and baseline correction"""

    # Spike threshold
    spike_base: float = 0.2  # Relative jump that counts as a spike (20%)
    low_listener_increase: float = 0.01  # Added to the threshold per listener below 50
    high_listener_decrease: float = 0.01  # Removed from the threshold per `every` listeners of delta
    high_listener_decrease_every: float = 10.0

    # Unskewed (corrective) baseline
    reset_fraction: float = 0.05  # Drop the baseline once the average is within 5% of it
    adjust_fraction: float = 0.1  # Lerp factor towards the live average per cycle
    spikes_required: int = 1  # Consecutive spikes needed before correcting

    def __post_init__(self):
        if self.high_listener_decrease_every <= 0:
            raise ValueError("high_listener_decrease_every must be positive")
        if not 0.0 <= self.adjust_fraction <= 1.0:
            raise ValueError("adjust_fraction must be between 0 and 1")
        if self.spikes_required < 0:
            raise ValueError("spikes_required cannot be negative")
