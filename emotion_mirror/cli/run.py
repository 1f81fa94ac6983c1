#!/usr/bin/env python3
"""
Live webcam emotion mirror.

Usage:
    python -m emotion_mirror.cli.run --camera 0
    python -m emotion_mirror.cli.run --config emotion_mirror.yaml --show-signals
    python -m emotion_mirror.cli.run --no-video
"""

import argparse
import logging
import signal
import sys
from typing import List, Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Show your facial expression as an emotion in real time",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (YAML or JSON)",
    )

    # Hardware arguments
    parser.add_argument(
        "--camera",
        type=int,
        default=None,
        help="Camera device ID (overrides config)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Path to face_landmarker.task (downloaded if not found)",
    )
    parser.add_argument(
        "--gpu",
        action="store_true",
        help="Run the face landmarker on the GPU delegate",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=None,
        help="Target frames per second (overrides config)",
    )

    # Output arguments
    parser.add_argument(
        "--no-video",
        action="store_true",
        help="Run headless and log emotion changes only",
    )
    parser.add_argument(
        "--show-signals",
        action="store_true",
        help="Overlay the smile/brow/eye signal values",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    # Misc arguments
    parser.add_argument(
        "--create-config",
        type=str,
        default=None,
        metavar="PATH",
        help="Create a default config file and exit",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace):
    """Load the config file (or defaults) and apply command line overrides."""
    from emotion_mirror.config import load_config

    config = load_config(args.config)

    if args.camera is not None:
        config.camera_id = args.camera
    if args.model is not None:
        config.model_path = args.model
    if args.gpu:
        config.use_gpu = True
    if args.fps is not None:
        config.target_fps = args.fps
    if args.no_video:
        config.show_video = False
    if args.show_signals:
        config.show_signals = True

    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the live mirror CLI."""
    args = parse_args(argv)

    # Set log level
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.WARNING)

    # Handle create-config option
    if args.create_config:
        from emotion_mirror.config import create_default_config
        create_default_config(args.create_config)
        print(f"Created default config at: {args.create_config}")
        return 0

    from emotion_mirror.controller import EmotionMirror

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    mirror = EmotionMirror(config)

    # Setup signal handlers
    def signal_handler(signum, frame):
        logger.info("Received shutdown signal")
        mirror.request_stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    def on_emotion(label):
        display = mirror.state.display
        logger.info(f"Emotion: {display.text} {display.emoji}")

    mirror.run(on_emotion=None if args.quiet else on_emotion)

    # run() returns early with an error status when setup fails
    if mirror.status_is_error:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
