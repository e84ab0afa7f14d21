"""
Polling loop feeding listener counts through the per-feed spike detectors.
"""

import time
from collections.abc import Callable
from datetime import UTC, datetime

import structlog
import yaml

from src.listeners.persistence import load_registry, save_registry
from src.listeners.registry import FeedRegistry

from .models import Feed, FeedAlert, MonitorConfig, SortOrder
from .notifier import Notifier
from .source import FeedSource, FeedSourceError

logger = structlog.get_logger(__name__)

# Errors that skip a cycle instead of stopping the monitor
CYCLE_ERRORS = (FeedSourceError, OSError, ValueError)

# Errors raised while re-reading the config file
CONFIG_ERRORS = (OSError, ValueError, yaml.YAMLError)


def sort_feeds(feeds: list[Feed], order: SortOrder) -> list[Feed]:
    """Sort feeds by listener count"""
    return sorted(feeds, key=lambda f: f.listeners, reverse=order is SortOrder.DESCENDING)


class ListenerMonitor:
    """Runs one detection cycle per polling interval across all feeds"""

    def __init__(
        self,
        config: MonitorConfig,
        source: FeedSource,
        notifier: Notifier,
        registry: FeedRegistry | None = None,
        config_loader: Callable[[], MonitorConfig] | None = None,
    ):
        self.config = config
        self.config_loader = config_loader
        self.source = source
        self.notifier = notifier
        self.registry = registry if registry is not None else self._load_registry()

        self.stats = {
            "cycles": 0,
            "feeds_processed": 0,
            "feeds_filtered": 0,
            "duplicate_feeds": 0,
            "spikes_detected": 0,
            "alerts_sent": 0,
            "cycle_errors": 0,
            "config_errors": 0,
        }

        logger.info(
            "Monitor initialized",
            feed_url=config.feed_url,
            known_feeds=len(self.registry),
            update_time_minutes=config.update_time_minutes,
            minimum_listeners=config.minimum_listeners,
        )

    def _load_registry(self) -> FeedRegistry:
        """Load persisted baselines, starting empty if they cannot be read"""
        try:
            return load_registry(self.config.averages_path)
        except FileNotFoundError:
            logger.info("No saved averages, starting fresh", path=self.config.averages_path)
        except (OSError, ValueError) as e:
            logger.warning(
                "Failed to load averages, starting fresh",
                path=self.config.averages_path,
                error=str(e),
            )
        return FeedRegistry()

    def perform_update(self, hour: int | None = None) -> list[FeedAlert]:
        """Fetch the latest feeds, step every feed and notify about alerted ones

        Args:
            hour: Hour of day for the hourly baselines. Defaults to the current UTC hour.

        Returns:
            Alerts handed to the notifier, in display order
        """
        feeds = self.source.get_latest()
        if hour is None:
            hour = datetime.now(UTC).hour

        display_feeds: list[tuple[Feed, bool]] = []
        seen_ids: set[int] = set()

        for feed in feeds:
            # Each feed is stepped at most once per cycle, first listing wins
            if feed.id in seen_ids:
                self.stats["duplicate_feeds"] += 1
                logger.warning("Duplicate feed in listing, skipping", feed_id=feed.id)
                continue
            seen_ids.add(feed.id)

            if feed.listeners < self.config.minimum_listeners:
                self.stats["feeds_filtered"] += 1
                continue

            has_spiked = self.registry.step(self.config.spike, hour, feed.id, float(feed.listeners))
            self.stats["feeds_processed"] += 1

            if has_spiked:
                self.stats["spikes_detected"] += 1

            if has_spiked or feed.alert is not None:
                display_feeds.append((feed, has_spiked))

        self.stats["cycles"] += 1

        if not display_feeds:
            return []

        spiked_ids = {feed.id for feed, spiked in display_feeds if spiked}
        ordered = sort_feeds([feed for feed, _ in display_feeds], self.config.sort_order)

        alerts = [
            FeedAlert(
                feed=feed,
                spiked=feed.id in spiked_ids,
                delta=int(self.registry[feed.id].average_delta(float(feed.listeners))),
            )
            for feed in ordered
        ]

        self.notifier.notify(alerts)
        self.stats["alerts_sent"] += len(alerts)

        logger.info("Alerts sent", count=len(alerts), spiked=len(spiked_ids), hour=hour)
        return alerts

    def save(self) -> None:
        save_registry(self.config.averages_path, self.registry)

    def reload_config(self) -> None:
        """Re-read the config file, if one is configured

        Raises:
            OSError, ValueError, yaml.YAMLError: If the file cannot be loaded.
                The current config is left untouched.
        """
        if self.config_loader is None:
            return

        config = self.config_loader()
        if config != self.config:
            logger.info(
                "Config reloaded",
                update_time_minutes=config.update_time_minutes,
                minimum_listeners=config.minimum_listeners,
                spike_base=config.spike.spike_base,
            )
        self.config = config

    def run_cycle(self) -> list[FeedAlert]:
        """One full cycle: update every feed, then persist the baselines"""
        alerts = self.perform_update()
        self.save()
        return alerts

    def run(
        self,
        duration_seconds: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Run cycles until interrupted or for a specified duration

        Args:
            duration_seconds: Optional duration in seconds. If None, runs indefinitely.
            sleep: Function used to wait between cycles
        """
        logger.info(
            "Starting listener monitor",
            feed_url=self.config.feed_url,
            duration=duration_seconds if duration_seconds else "indefinite",
        )

        start_time = time.time()

        try:
            while True:
                try:
                    self.reload_config()
                except CONFIG_ERRORS as e:
                    self.stats["config_errors"] += 1
                    logger.error("Failed to load config, skipping", error=str(e), exc_info=True)
                    update_time_minutes = MonitorConfig().update_time_minutes
                else:
                    update_time_minutes = self.config.update_time_minutes
                    try:
                        self.run_cycle()
                    except CYCLE_ERRORS as e:
                        self.stats["cycle_errors"] += 1
                        logger.error("Cycle failed, skipping", error=str(e), exc_info=True)

                elapsed = time.time() - start_time
                logger.info(
                    "Monitor stats",
                    cycles=self.stats["cycles"],
                    known_feeds=len(self.registry),
                    spikes_detected=self.stats["spikes_detected"],
                    alerts_sent=self.stats["alerts_sent"],
                    cycle_errors=self.stats["cycle_errors"],
                    elapsed_sec=round(elapsed, 1),
                )

                if duration_seconds and elapsed >= duration_seconds:
                    logger.info("Duration limit reached", duration_seconds=duration_seconds)
                    break

                sleep(update_time_minutes * 60.0)

        except KeyboardInterrupt:
            logger.info("Received interrupt signal, stopping monitor")

        finally:
            try:
                self.save()
            except OSError as e:
                logger.error("Failed to save averages", error=str(e))

            self.source.close()

            logger.info(
                "Monitor stopped",
                cycles=self.stats["cycles"],
                feeds_processed=self.stats["feeds_processed"],
                spikes_detected=self.stats["spikes_detected"],
                alerts_sent=self.stats["alerts_sent"],
                cycle_errors=self.stats["cycle_errors"],
                config_errors=self.stats["config_errors"],
                duplicate_feeds=self.stats["duplicate_feeds"],
                elapsed_sec=round(time.time() - start_time, 1),
            )
