"""
Configuration management for the emotion mirror.

This module provides configuration file loading and saving for
MirrorConfig, supporting YAML and JSON formats.
"""

import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .controller import MirrorConfig

logger = logging.getLogger(__name__)

# Default config file locations
DEFAULT_CONFIG_PATHS = [
    Path("emotion_mirror.yaml"),
    Path("emotion_mirror.json"),
    Path.home() / ".config" / "emotion_mirror" / "config.yaml",
    Path.home() / ".config" / "emotion_mirror" / "config.json",
]


def load_config(
    config_path: Optional[Union[str, Path]] = None
) -> MirrorConfig:
    """
    Load mirror configuration from file.

    Supports YAML and JSON formats. If no path is specified, searches
    default locations.

    Args:
        config_path: Path to config file, or None to search defaults

    Returns:
        MirrorConfig instance

    Raises:
        FileNotFoundError: If an explicit config path does not exist
        ValueError: If config file is invalid
    """
    # Find config file
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        path = None
        for default_path in DEFAULT_CONFIG_PATHS:
            if default_path.exists():
                path = default_path
                break

        if path is None:
            logger.info("No config file found, using defaults")
            return MirrorConfig()

    logger.info(f"Loading config from {path}")

    with open(path, 'r') as f:
        if path.suffix in ('.yaml', '.yml'):
            yaml = _import_yaml()
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Failed to parse config file {path}: {e}")
        else:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Failed to parse config file {path}: {e}")

    return _dict_to_config(data or {})


def save_config(
    config: MirrorConfig,
    config_path: Union[str, Path],
    format: str = "auto"
) -> None:
    """
    Save mirror configuration to file.

    Args:
        config: Configuration to save
        config_path: Output file path
        format: "yaml", "json", or "auto" (detect from extension)
    """
    path = Path(config_path)

    # Determine format
    if format == "auto":
        format = "yaml" if path.suffix in ('.yaml', '.yml') else "json"

    data = _config_to_dict(config)

    # Ensure parent directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        if format == "yaml":
            yaml = _import_yaml()
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(data, f, indent=2)

    logger.info(f"Saved config to {path}")


def _import_yaml():
    try:
        import yaml
    except ImportError:
        raise ImportError(
            "PyYAML not installed. Install with: pip install pyyaml"
        )
    return yaml


def _dict_to_config(data: Dict[str, Any]) -> MirrorConfig:
    """Convert dictionary to MirrorConfig."""
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(MirrorConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    config = MirrorConfig(**data)
    config.validate()
    return config


def _config_to_dict(config: MirrorConfig) -> Dict[str, Any]:
    """Convert MirrorConfig to dictionary."""
    return asdict(config)


def create_default_config(output_path: Union[str, Path]) -> None:
    """
    Create a default configuration file with comments.

    Args:
        output_path: Path to write the config file
    """
    path = Path(output_path)

    if path.suffix in ('.yaml', '.yml'):
        content = """# Emotion Mirror Configuration
# ============================

# Camera device ID (usually 0 for built-in camera)
camera_id: 0

# Requested capture size and frame rate
frame_width: 640
frame_height: 480
target_fps: 30.0

# Path to face_landmarker.task (null to search or download)
model_path: null

# Run the face landmarker on the GPU delegate
use_gpu: false

# Face landmarker confidence thresholds [0, 1]
min_detection_confidence: 0.5
min_presence_confidence: 0.5
min_tracking_confidence: 0.5

# Show the video window with the emotion overlay
show_video: true

# Show smile / brow / eye signal values in the overlay
show_signals: false

# Flip the video horizontally like a mirror
mirror_video: true
"""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            f.write(content)
    else:
        save_config(MirrorConfig(), path, format="json")

    logger.info(f"Created default config at {path}")
