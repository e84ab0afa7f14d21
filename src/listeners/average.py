"""
Bounded moving average over the most recent listener counts.
"""

from collections import deque

MOVING_AVG_SIZE = 5


class BoundedAverage:
    """Mean of a fixed-size FIFO window of raw values"""

    def __init__(self, seed: float = 0.0):
        self.moving: deque[float] = deque(maxlen=MOVING_AVG_SIZE)

        # Non-positive seeds carry no history
        if seed > 0:
            self.moving.append(seed)

        self.current = seed
        self.last = seed

    def update(self, value: float) -> None:
        """Push a new value, evicting the oldest once the window is full"""
        self.moving.append(value)

        self.last = self.current
        self.current = sum(self.moving) / len(self.moving)

    def __repr__(self) -> str:
        return (
            f"BoundedAverage(current={self.current}, last={self.last}, "
            f"moving={list(self.moving)})"
        )
