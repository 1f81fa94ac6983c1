"""
Rule-based classifier from blendshape scores to an emotion label.

Four derived signals are computed from named blendshape scores and
checked against fixed thresholds in priority order:

    smile     > 0.6  -> HAPPY
    brow_down > 0.5  -> ANGRY
    surprise  > 0.8  -> SURPRISED
    otherwise        -> NEUTRAL

Scores can exceed several thresholds at once; only the first matching
rule fires. No training required.
"""

from dataclasses import dataclass
from typing import Optional

from emotion_mirror.blendshapes import BlendshapeSet, score
from emotion_mirror.emotions import EmotionLabel


SMILE_CATEGORIES = ("mouthSmileLeft", "mouthSmileRight")
BROW_DOWN_CATEGORIES = ("browInnerDown", "browDownLeft", "browDownRight")
EYE_WIDE_CATEGORIES = ("eyeWideLeft", "eyeWideRight")
BROW_UP_CATEGORIES = ("browInnerUp", "browOuterUpLeft", "browOuterUpRight")


@dataclass(frozen=True)
class ClassifierThresholds:
    """Decision constants for EmotionClassifier.

    The values are empirical and tuned by eye, not derived. They can be
    recalibrated here without touching the decision order.
    """

    smile: float = 0.6
    brow_down: float = 0.5
    surprise: float = 0.8

    # Weight of raised brows relative to widened eyes in the surprise signal
    brow_up_weight: float = 0.5


DEFAULT_THRESHOLDS = ClassifierThresholds()


@dataclass(frozen=True)
class DerivedSignals:
    """Per-frame signals computed from blendshape scores."""

    smile: float = 0.0
    brow_down: float = 0.0
    eye_open: float = 0.0
    brow_up: float = 0.0
    surprise: float = 0.0


def _sum_scores(blendshapes: BlendshapeSet, names) -> float:
    total = 0.0
    for name in names:
        total += score(blendshapes, name)
    return total


def compute_signals(
    blendshapes: BlendshapeSet,
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> DerivedSignals:
    """
    Compute the derived signals for one face.

    Args:
        blendshapes: Blendshape scores for the face.
        thresholds: Supplies the brow-up weight of the surprise signal.

    Returns:
        DerivedSignals with smile, brow_down, eye_open, brow_up and the
        combined surprise value.
    """
    eye_open = _sum_scores(blendshapes, EYE_WIDE_CATEGORIES)
    brow_up = _sum_scores(blendshapes, BROW_UP_CATEGORIES)

    return DerivedSignals(
        smile=_sum_scores(blendshapes, SMILE_CATEGORIES),
        brow_down=_sum_scores(blendshapes, BROW_DOWN_CATEGORIES),
        eye_open=eye_open,
        brow_up=brow_up,
        surprise=eye_open + brow_up * thresholds.brow_up_weight,
    )


class EmotionClassifier:
    """
    Maps one frame's blendshape scores to an EmotionLabel.

    Stateless: the same input always yields the same label. The
    classifier is total and never raises for an absent face, an empty
    set, or unknown category names.

    Usage:
        classifier = EmotionClassifier()
        label = classifier.classify(blendshapes)   # EmotionLabel.HAPPY
    """

    def __init__(self, thresholds: Optional[ClassifierThresholds] = None):
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def signals(self, blendshapes: BlendshapeSet) -> DerivedSignals:
        return compute_signals(blendshapes, self.thresholds)

    def classify(self, blendshapes: Optional[BlendshapeSet]) -> EmotionLabel:
        """
        Classify a face's expression.

        Parameters:
            blendshapes (Optional[BlendshapeSet]): Scores for the first
                detected face, or None when no face was detected.

        Returns:
            EmotionLabel: NEUTRAL for no face; otherwise the first of
                HAPPY, ANGRY, SURPRISED whose signal strictly exceeds its
                threshold, else NEUTRAL.
        """
        if blendshapes is None:
            return EmotionLabel.NEUTRAL

        return self.decide(self.signals(blendshapes))

    def decide(self, signals: DerivedSignals) -> EmotionLabel:
        """Apply the thresholds to already computed signals."""
        t = self.thresholds

        if signals.smile > t.smile:
            return EmotionLabel.HAPPY
        if signals.brow_down > t.brow_down:
            return EmotionLabel.ANGRY
        if signals.surprise > t.surprise:
            return EmotionLabel.SURPRISED
        return EmotionLabel.NEUTRAL


_default_classifier = EmotionClassifier()


def classify(blendshapes: Optional[BlendshapeSet]) -> EmotionLabel:
    """Classify with the default thresholds."""
    return _default_classifier.classify(blendshapes)
