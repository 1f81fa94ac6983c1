"""
Property-based tests for EmotionClassifier.

These tests verify the decision rules of the blendshape-to-emotion
classifier using Hypothesis for property-based testing.
"""

import pytest
from hypothesis import given, settings
import hypothesis.strategies as st

from emotion_mirror.blendshapes import BLENDSHAPE_NAMES, BlendshapeSet
from emotion_mirror.classifier import (
    BROW_DOWN_CATEGORIES,
    BROW_UP_CATEGORIES,
    DEFAULT_THRESHOLDS,
    EYE_WIDE_CATEGORIES,
    SMILE_CATEGORIES,
    ClassifierThresholds,
    EmotionClassifier,
    classify,
    compute_signals,
)
from emotion_mirror.emotions import EmotionLabel, display_for


SIGNAL_CATEGORIES = (
    SMILE_CATEGORIES + BROW_DOWN_CATEGORIES + EYE_WIDE_CATEGORIES + BROW_UP_CATEGORIES
)

unit_floats = st.floats(min_value=0.0, max_value=1.0, allow_nan=False, allow_infinity=False)


def signal_scores_strategy():
    """Generate scores for every category the classifier reads."""
    return st.fixed_dictionaries({name: unit_floats for name in SIGNAL_CATEGORIES})


def expected_label(scores: dict) -> EmotionLabel:
    """Straight-line reading of the decision rules, used as the oracle."""
    t = DEFAULT_THRESHOLDS
    smile = scores["mouthSmileLeft"] + scores["mouthSmileRight"]
    brow_down = scores["browInnerDown"] + scores["browDownLeft"] + scores["browDownRight"]
    eye_open = scores["eyeWideLeft"] + scores["eyeWideRight"]
    brow_up = scores["browInnerUp"] + scores["browOuterUpLeft"] + scores["browOuterUpRight"]
    surprise = eye_open + brow_up * t.brow_up_weight

    if smile > t.smile:
        return EmotionLabel.HAPPY
    if brow_down > t.brow_down:
        return EmotionLabel.ANGRY
    if surprise > t.surprise:
        return EmotionLabel.SURPRISED
    return EmotionLabel.NEUTRAL


class TestClassificationTotality:
    """
    **Property: Classification Is Total**

    *For any* blendshape set, including an absent face, classify SHALL return
    exactly one of the four emotion labels and never raise.
    """

    @settings(max_examples=100)
    @given(pairs=st.lists(st.tuples(st.text(max_size=20), unit_floats), max_size=60))
    def test_any_set_maps_to_a_label(self, pairs):
        """
        Property: arbitrary names and scores always classify to a defined label.
        """
        label = classify(BlendshapeSet.from_pairs(pairs))
        assert label in set(EmotionLabel)

    def test_absent_face_is_neutral(self):
        assert classify(None) is EmotionLabel.NEUTRAL

    def test_empty_set_is_neutral(self):
        assert classify(BlendshapeSet()) is EmotionLabel.NEUTRAL

    def test_all_zero_scores_are_neutral(self):
        shapes = BlendshapeSet.from_mapping({name: 0.0 for name in BLENDSHAPE_NAMES})
        assert classify(shapes) is EmotionLabel.NEUTRAL


class TestDecisionRules:
    """
    **Property: Ordered Threshold Rules**

    *For any* scores of the classifier's categories, the label SHALL be the
    first of HAPPY, ANGRY, SURPRISED whose signal strictly exceeds its
    threshold, otherwise NEUTRAL.
    """

    @settings(max_examples=200)
    @given(scores=signal_scores_strategy())
    def test_matches_rule_order(self, scores):
        """
        Property: classification agrees with the ordered threshold rules.
        """
        assert classify(BlendshapeSet.from_mapping(scores)) is expected_label(scores)

    @settings(max_examples=100)
    @given(
        scores=signal_scores_strategy(),
        noise=st.dictionaries(
            st.sampled_from([n for n in BLENDSHAPE_NAMES if n not in SIGNAL_CATEGORIES]),
            unit_floats,
        ),
    )
    def test_other_categories_are_ignored(self, scores, noise):
        """
        Property: categories outside the signal set never change the label.
        """
        with_noise = BlendshapeSet.from_mapping({**noise, **scores})
        assert classify(with_noise) is classify(BlendshapeSet.from_mapping(scores))

    @settings(max_examples=100)
    @given(left=unit_floats, right=unit_floats)
    def test_smile_is_checked_first(self, left, right):
        """
        Property: a smile above threshold wins over maxed-out brow and eye signals.
        """
        scores = {name: 1.0 for name in SIGNAL_CATEGORIES}
        scores["mouthSmileLeft"] = left
        scores["mouthSmileRight"] = right

        label = classify(BlendshapeSet.from_mapping(scores))

        if left + right > DEFAULT_THRESHOLDS.smile:
            assert label is EmotionLabel.HAPPY
        else:
            assert label is EmotionLabel.ANGRY

    def test_smile_threshold_is_strict(self):
        at_threshold = BlendshapeSet.from_mapping({"mouthSmileLeft": 0.6})
        above = BlendshapeSet.from_mapping({"mouthSmileLeft": 0.61})

        assert classify(at_threshold) is EmotionLabel.NEUTRAL
        assert classify(above) is EmotionLabel.HAPPY

    def test_brow_down_threshold_is_strict(self):
        assert classify(BlendshapeSet.from_mapping({"browDownLeft": 0.5})) is EmotionLabel.NEUTRAL
        assert classify(BlendshapeSet.from_mapping({"browDownLeft": 0.51})) is EmotionLabel.ANGRY

    def test_surprise_threshold_is_strict(self):
        assert classify(BlendshapeSet.from_mapping({"eyeWideLeft": 0.8})) is EmotionLabel.NEUTRAL
        assert classify(BlendshapeSet.from_mapping({"eyeWideLeft": 0.81})) is EmotionLabel.SURPRISED

    def test_happy_beats_angry(self):
        shapes = BlendshapeSet.from_mapping({
            "mouthSmileLeft": 0.35,
            "mouthSmileRight": 0.35,
            "browInnerDown": 0.3,
            "browDownLeft": 0.3,
            "browDownRight": 0.3,
        })
        assert classify(shapes) is EmotionLabel.HAPPY

    def test_angry_beats_surprised(self):
        shapes = BlendshapeSet.from_mapping({
            "mouthSmileLeft": 0.3,
            "browDownLeft": 0.3,
            "browDownRight": 0.3,
            "eyeWideLeft": 0.45,
            "eyeWideRight": 0.45,
        })
        assert classify(shapes) is EmotionLabel.ANGRY

    def test_brow_up_alone_counts_at_half_weight(self):
        # 3 * 0.5 * 0.5 = 0.75 stays below the surprise threshold
        shapes = BlendshapeSet.from_mapping({name: 0.5 for name in BROW_UP_CATEGORIES})
        assert compute_signals(shapes).surprise == pytest.approx(0.75)
        assert classify(shapes) is EmotionLabel.NEUTRAL


class TestEndToEndScenarios:
    """Known inputs with their expected label and presentation."""

    def test_smile_scenario(self):
        shapes = BlendshapeSet.from_json([{"mouthSmileLeft": 0.4}, {"mouthSmileRight": 0.3}])

        label = classify(shapes)

        assert compute_signals(shapes).smile == pytest.approx(0.7)
        assert label is EmotionLabel.HAPPY
        assert display_for(label).color == "#00ff00"
        assert "HAPPY" in display_for(label).text

    def test_frown_scenario(self):
        shapes = BlendshapeSet.from_json([
            {"browInnerDown": 0.3}, {"browDownLeft": 0.2}, {"browDownRight": 0.1},
        ])

        label = classify(shapes)

        assert compute_signals(shapes).brow_down == pytest.approx(0.6)
        assert label is EmotionLabel.ANGRY
        assert display_for(label).color == "red"

    def test_wide_eyes_scenario(self):
        shapes = BlendshapeSet.from_json([
            {"eyeWideLeft": 0.5}, {"eyeWideRight": 0.4}, {"browInnerUp": 0.2},
        ])

        signals = compute_signals(shapes)

        assert signals.eye_open == pytest.approx(0.9)
        assert signals.brow_up == pytest.approx(0.2)
        assert signals.surprise == pytest.approx(1.0)
        assert classify(shapes) is EmotionLabel.SURPRISED
        assert display_for(EmotionLabel.SURPRISED).color == "yellow"

    def test_empty_scenario(self):
        label = classify(BlendshapeSet.from_json([]))

        assert label is EmotionLabel.NEUTRAL
        assert display_for(label).color == "white"


class TestThresholdRecalibration:
    """Thresholds are named constants that can be overridden per classifier."""

    def test_default_values(self):
        assert DEFAULT_THRESHOLDS == ClassifierThresholds(
            smile=0.6, brow_down=0.5, surprise=0.8, brow_up_weight=0.5
        )

    def test_custom_thresholds_keep_rule_order(self):
        classifier = EmotionClassifier(ClassifierThresholds(smile=0.2, brow_down=0.2))
        shapes = BlendshapeSet.from_mapping({"mouthSmileLeft": 0.3, "browDownLeft": 0.9})

        assert classifier.classify(shapes) is EmotionLabel.HAPPY

    def test_custom_brow_up_weight(self):
        classifier = EmotionClassifier(ClassifierThresholds(brow_up_weight=1.0))
        shapes = BlendshapeSet.from_mapping({"browInnerUp": 0.9})

        assert classifier.signals(shapes).surprise == pytest.approx(0.9)
        assert classifier.classify(shapes) is EmotionLabel.SURPRISED
        assert classify(shapes) is EmotionLabel.NEUTRAL

    def test_thresholds_are_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_THRESHOLDS.smile = 0.1
