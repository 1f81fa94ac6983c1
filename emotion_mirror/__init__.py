"""
Emotion Mirror Package

Classifies facial expressions into emotions from MediaPipe blendshape scores.
"""

__version__ = "0.1.0"

from emotion_mirror.blendshapes import BlendshapeScore, BlendshapeSet, score
from emotion_mirror.classifier import (
    ClassifierThresholds,
    DerivedSignals,
    EmotionClassifier,
    classify,
    compute_signals,
)
from emotion_mirror.emotions import (
    EmotionDisplay,
    EmotionDisplayState,
    EmotionLabel,
    display_for,
)

__all__ = [
    "BlendshapeScore",
    "BlendshapeSet",
    "score",
    "ClassifierThresholds",
    "DerivedSignals",
    "EmotionClassifier",
    "classify",
    "compute_signals",
    "EmotionDisplay",
    "EmotionDisplayState",
    "EmotionLabel",
    "display_for",
]
