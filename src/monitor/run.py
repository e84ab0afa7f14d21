"""
Listener Monitor - CLI Entry Point
Polls feed listener counts and reports feeds whose listeners suddenly spike
"""

import argparse
import dataclasses
import functools
import logging
import os
import sys

import structlog

from src.core.logger import setup_logging

from .config import (
    DEFAULT_CONFIG,
    DEV_CONFIG,
    RELAXED_CONFIG,
    SENSITIVE_CONFIG,
    load_config_file,
)
from .models import MonitorConfig, SortOrder
from .monitor import CONFIG_ERRORS, ListenerMonitor
from .notifier import LogNotifier
from .source import HttpFeedSource

logger = structlog.get_logger(__name__)


# Predefined configurations
CONFIGS = {
    "default": DEFAULT_CONFIG,
    "sensitive": SENSITIVE_CONFIG,
    "relaxed": RELAXED_CONFIG,
    "dev": DEV_CONFIG,
}

# CLI option -> SpikeConfig field
SPIKE_OPTIONS = {
    "spike": "spike_base",
    "low_listener_increase": "low_listener_increase",
    "high_listener_dec": "high_listener_decrease",
    "high_listener_dec_every": "high_listener_decrease_every",
    "reset_pcnt": "reset_fraction",
    "adjust_pcnt": "adjust_fraction",
    "spikes_required": "spikes_required",
}


def parse_arguments(argv: list[str] | None = None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="Feed listener spike monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        # Basic usage with defaults
        python -m src.monitor.run --feed-url https://example.org/feeds.json

        # Sensitive preset, polling every 2 minutes
        python -m src.monitor.run --config sensitive --update-time 2

        # Single cycle with a custom spike threshold
        python -m src.monitor.run --once --spike 0.3

        # Settings from a YAML file, re-read every cycle
        python -m src.monitor.run --config relaxed --config-file monitor.yaml

        # Using environment variables
        export FEED_URL=https://example.org/feeds.json
        export AVERAGES_PATH=/var/lib/monitor/averages.csv
        python -m src.monitor.run
        """,
    )

    # Predefined config
    parser.add_argument(
        "--config", choices=list(CONFIGS.keys()), help="Use a predefined configuration"
    )
    parser.add_argument(
        "--config-file",
        default=os.getenv("CONFIG_FILE"),
        help="YAML settings layered over the preset, re-read every cycle "
        "(default: CONFIG_FILE env var)",
    )

    # Feed source
    parser.add_argument(
        "--feed-url",
        default=os.getenv("FEED_URL"),
        help="URL of the JSON feed listing (default: FEED_URL env var)",
    )
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds")

    # Polling behavior
    parser.add_argument("--update-time", type=float, help="Minutes between cycles")
    parser.add_argument(
        "--minimum-listeners", type=int, help="Ignore feeds with fewer listeners"
    )
    parser.add_argument(
        "--sort-order",
        choices=[s.value for s in SortOrder],
        help="Order of alerted feeds by listener count",
    )
    parser.add_argument(
        "--averages-path",
        default=os.getenv("AVERAGES_PATH"),
        help="CSV file holding hourly baselines (default: AVERAGES_PATH env var)",
    )

    # Spike detection constants
    parser.add_argument("--spike", type=float, help="Base spike threshold (fraction)")
    parser.add_argument(
        "--low-listener-increase",
        type=float,
        help="Threshold increase per listener below 50",
    )
    parser.add_argument(
        "--high-listener-dec", type=float, help="Threshold decrease per step of delta"
    )
    parser.add_argument(
        "--high-listener-dec-every", type=float, help="Listeners of delta per decrease step"
    )
    parser.add_argument(
        "--reset-pcnt", type=float, help="Fraction at which the unskewed baseline resets"
    )
    parser.add_argument(
        "--adjust-pcnt", type=float, help="Lerp fraction of the unskewed baseline per cycle"
    )
    parser.add_argument(
        "--spikes-required", type=int, help="Consecutive spikes before correcting"
    )

    # Runtime settings
    parser.add_argument(
        "--duration", type=int, help="Run for N seconds then stop (default: infinite)"
    )
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def apply_cli_overrides(config: MonitorConfig, args) -> MonitorConfig:
    """Return a copy of `config` with the command-line overrides applied"""

    # Presets are shared, work on copies
    spike_overrides = {
        field_name: getattr(args, option)
        for option, field_name in SPIKE_OPTIONS.items()
        if getattr(args, option) is not None
    }
    config = dataclasses.replace(
        config, spike=dataclasses.replace(config.spike, **spike_overrides)
    )

    if args.feed_url:
        config.feed_url = args.feed_url
    if args.timeout is not None:
        config.request_timeout_seconds = args.timeout
    if args.update_time is not None:
        config.update_time_minutes = args.update_time
    if args.minimum_listeners is not None:
        config.minimum_listeners = args.minimum_listeners
    if args.sort_order:
        config.sort_order = SortOrder(args.sort_order)
    if args.averages_path:
        config.averages_path = args.averages_path

    return config


def build_config_from_args(args) -> MonitorConfig:
    """Build a MonitorConfig from command-line arguments

    Precedence, lowest first: preset, config file, command-line flags.

    Raises:
        OSError, ValueError, yaml.YAMLError: If the config file cannot be loaded
    """
    base = CONFIGS[args.config] if args.config else DEFAULT_CONFIG

    if args.config_file:
        base = load_config_file(args.config_file, base=base)

    return apply_cli_overrides(base, args)


def main(argv: list[str] | None = None):
    """Main entry point"""
    args = parse_arguments(argv)

    # Setup logging
    log_level = getattr(logging, args.log_level)
    setup_logging(level=log_level)

    logger.info("Starting listener monitor")

    if args.config:
        logger.info("Using predefined configuration", config_name=args.config)
    else:
        logger.info("Using default configuration")

    try:
        try:
            config = build_config_from_args(args)
        except CONFIG_ERRORS as e:
            logger.warning(
                "Failed to load config file, using preset",
                config_file=args.config_file,
                error=str(e),
            )
            preset = CONFIGS[args.config] if args.config else DEFAULT_CONFIG
            config = apply_cli_overrides(preset, args)

        config_loader = None
        if args.config_file:
            logger.info("Watching config file", config_file=args.config_file)
            config_loader = functools.partial(build_config_from_args, args)

        source = HttpFeedSource(config.feed_url, timeout_seconds=config.request_timeout_seconds)
        monitor = ListenerMonitor(config, source, LogNotifier(), config_loader=config_loader)

        if args.once:
            try:
                monitor.run_cycle()
            finally:
                source.close()
        else:
            monitor.run(duration_seconds=args.duration)

        logger.info("Monitor completed successfully")
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.error("Monitor failed", error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
