#!/usr/bin/env python3
"""
Classify blendshape scores from a JSON file.

Usage:
    python -m emotion_mirror.cli.classify scores.json
    echo '{"mouthSmileLeft": 0.4, "mouthSmileRight": 0.3}' | \
        python -m emotion_mirror.cli.classify - --signals --json

The input is one face's scores in any shape accepted by
BlendshapeSet.from_json, or ``null`` for "no face detected".
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import List, Optional

from emotion_mirror.blendshapes import BlendshapeSet
from emotion_mirror.classifier import EmotionClassifier
from emotion_mirror.emotions import display_for

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_INPUT = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Classify blendshape scores into an emotion",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "input",
        type=str,
        help="JSON file with blendshape scores ('-' for stdin)",
    )
    parser.add_argument(
        "--signals",
        action="store_true",
        help="Also print the derived smile/brow/eye signals",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def _read_input(source: str):
    if source == "-":
        return json.load(sys.stdin)
    with open(source, 'r') as f:
        return json.load(f)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the classify CLI."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        data = _read_input(args.input)
        blendshapes = None if data is None else BlendshapeSet.from_json(data)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        logger.error(f"Cannot read blendshapes from {args.input}: {e}")
        return EXIT_BAD_INPUT

    classifier = EmotionClassifier()
    label = classifier.classify(blendshapes)
    display = display_for(label)
    signals = classifier.signals(blendshapes) if blendshapes is not None else None

    logger.debug(f"Classified {len(blendshapes or ())} scores as {label.name}")

    if args.json:
        result = {
            "emotion": label.value,
            "text": display.text,
            "color": display.color,
        }
        if args.signals:
            result["signals"] = asdict(signals) if signals is not None else None
        print(json.dumps(result))
    else:
        print(f"{display.text} {display.emoji} ({display.color})")
        if args.signals:
            if signals is None:
                print("no face")
            else:
                for name, value in asdict(signals).items():
                    print(f"  {name}: {value:.3f}")

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
