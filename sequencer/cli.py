"""
Sequencer CLI - Command-line interface for the animation sequencer.

Entry point:
    sequencer     - Play a demo sequence on an asyncio clock and log its lifecycle
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path

from .clock import Clock
from .config import SequencerConfig, load_config
from .events import LIFECYCLE_TOPICS
from .logging_config import configure_logging
from .targets import Target, TargetResolver
from .timeline import PresetRegistry, Timeline

logger = logging.getLogger('cli')


def validate_positive_float(value: str) -> float:
    """Validate positive number."""
    try:
        num = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number: {value}")

    if num <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got: {num}")
    return num


def validate_rate(value: str) -> float:
    """Validate a non-zero playback rate."""
    try:
        rate = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid playback rate: {value}")

    if rate == 0:
        raise argparse.ArgumentTypeError("Playback rate must not be 0")
    return rate


def build_demo(timeline: Timeline) -> Timeline:
    """
    Populate a timeline with the demo sequence.

    The box fades in while the caption slides in 200ms later, then both
    pulse together once everything before has finished.
    """
    resolver = timeline.resolver
    resolver.register(Target(name="box", tags={"shape"}, properties={"opacity": 0.0, "scale": 1.0}))
    resolver.register(Target(name="caption", tags={"text"}, properties={"opacity": 0.0, "x": -100.0}))

    timeline.add([
        {"targets": "box", "name": "fade_in"},
        {"targets": ".text", "name": "slide_in", "from": 200},
    ])
    timeline.add({"targets": "*", "name": "pulse"})
    return timeline


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sequencer",
        description="Animation Sequencer - play animations on a master timeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sequencer                         # Play the demo sequence
  sequencer --rate -1               # Play it backwards
  sequencer --rate 0.5 --fps 30     # Half speed, 30 frames per second
  sequencer --list-presets          # Show built-in presets
  sequencer --json                  # Print final target properties as JSON
        """,
    )

    playback_group = parser.add_argument_group("Playback")
    playback_group.add_argument(
        "--rate",
        "-r",
        type=validate_rate,
        default=1.0,
        help="Playback rate, negative plays in reverse (default: 1.0)",
    )
    playback_group.add_argument(
        "--fps",
        type=validate_positive_float,
        default=None,
        help="Clock frame rate (default: from config, 60)",
    )

    config_group = parser.add_argument_group("Configuration")
    config_group.add_argument(
        "--config", "-c", type=Path, default=None, help="Path to a JSON config file"
    )
    config_group.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: from config or $SEQUENCER_LOG_LEVEL)",
    )

    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    output_group.add_argument(
        "--json", action="store_true", help="Print final target properties as JSON"
    )
    return parser


def main(argv=None):
    """
    Main entry point.

    Builds the demo sequence, plays it to completion on an asyncio clock
    and reports the final target properties.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.list_presets:
        for name in PresetRegistry().names():
            print(name)
        return 0

    config = load_config(args.config) if args.config else SequencerConfig()
    configure_logging(args.log_level or config.log_level)

    clock = Clock(fps=args.fps or config.fps)
    timeline = Timeline(clock=clock, resolver=TargetResolver(), config=config, autoplay=False)
    build_demo(timeline)
    timeline.playback_rate = args.rate

    def log_event(topic):
        def listener(source):
            logger.info(f"[{topic}] {source.get_status()}")
        return listener

    for topic in LIFECYCLE_TOPICS:
        timeline.on(topic, log_event(topic))

    # Signal handlers
    def signal_handler(sig, frame):
        clock.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    timeline.play()
    try:
        asyncio.run(clock.run())
    except KeyboardInterrupt:
        pass

    targets = {t.name: t.properties for t in timeline.resolver.targets}
    if args.json:
        print(json.dumps(targets, indent=2, sort_keys=True))
    else:
        for name, properties in targets.items():
            values = ", ".join(f"{k}={v:.3g}" if isinstance(v, float) else f"{k}={v}" for k, v in properties.items())
            print(f"{name}: {values}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
