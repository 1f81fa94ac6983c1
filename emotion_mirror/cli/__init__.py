"""
CLI subpackage for command-line interface tools.

Available CLI scripts:
- run: Live webcam emotion mirror
- classify: Classify blendshape scores read from a JSON file

Usage:
    python -m emotion_mirror.cli.run --help
    python -m emotion_mirror.cli.classify --help
"""

__all__ = ["run", "classify"]
