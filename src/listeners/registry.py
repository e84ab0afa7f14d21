"""
Registry of per-feed anomaly states keyed by feed id.
"""

from collections.abc import Callable, Iterator

import structlog

from .models import SpikeConfig
from .state import FeedAnomalyState

logger = structlog.get_logger(__name__)


class FeedRegistry:
    """Owns the anomaly state of every known feed"""

    def __init__(self, states: dict[int, FeedAnomalyState] | None = None):
        self._states: dict[int, FeedAnomalyState] = dict(states or {})

    def get_or_insert(
        self, feed_id: int, factory: Callable[[], FeedAnomalyState]
    ) -> FeedAnomalyState:
        """Return the state for `feed_id`, creating it with `factory` on first sighting"""
        state = self._states.get(feed_id)
        if state is None:
            state = factory()
            self._states[feed_id] = state
            logger.debug("Feed registered", feed_id=feed_id)
        return state

    def step(self, config: SpikeConfig, hour: int, feed_id: int, listeners: float) -> bool:
        """Step the feed's state, creating an unseeded one for unknown feeds"""
        state = self.get_or_insert(feed_id, FeedAnomalyState.new)
        has_spiked = state.step(config, hour, listeners)

        logger.debug(
            "Feed stepped",
            feed_id=feed_id,
            listeners=listeners,
            average=round(state.average.current, 2),
            unskewed=state.corrected_baseline,
            spiked=has_spiked,
        )
        return has_spiked

    def get(self, feed_id: int) -> FeedAnomalyState | None:
        return self._states.get(feed_id)

    def items(self):
        return self._states.items()

    def __getitem__(self, feed_id: int) -> FeedAnomalyState:
        return self._states[feed_id]

    def __setitem__(self, feed_id: int, state: FeedAnomalyState) -> None:
        self._states[feed_id] = state

    def __contains__(self, feed_id: object) -> bool:
        return feed_id in self._states

    def __iter__(self) -> Iterator[int]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __repr__(self) -> str:
        return f"FeedRegistry(feeds={len(self._states)})"
