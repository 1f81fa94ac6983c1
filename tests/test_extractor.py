"""
Tests for BlendshapeExtractor.

The MediaPipe detector is mocked; no model file is loaded.
"""

from types import SimpleNamespace
from unittest.mock import Mock, patch

import numpy as np
import pytest

from emotion_mirror import extractor as extractor_module
from emotion_mirror.blendshapes import BlendshapeSet
from emotion_mirror.extractor import BlendshapeExtractor


def category(name, value):
    return SimpleNamespace(category_name=name, score=value)


def extractor_with_detector(detector):
    """Build an extractor around a mocked detector, skipping model loading."""
    extractor = BlendshapeExtractor.__new__(BlendshapeExtractor)
    extractor._model_path = "face_landmarker.task"
    extractor._detector = detector
    return extractor


class TestConstruction:

    def test_missing_mediapipe(self):
        with patch.object(extractor_module, "MEDIAPIPE_AVAILABLE", False):
            with pytest.raises(ImportError, match="pip install mediapipe"):
                BlendshapeExtractor()

    def test_missing_explicit_model(self, tmp_path):
        with patch.object(extractor_module, "MEDIAPIPE_AVAILABLE", True):
            with pytest.raises(FileNotFoundError):
                BlendshapeExtractor(model_path=str(tmp_path / "missing.task"))


class TestExtract:

    def test_empty_frame_gives_none(self):
        detector = Mock()
        extractor = extractor_with_detector(detector)

        assert extractor.extract(np.zeros((0, 0, 3), dtype=np.uint8), 0) is None
        detector.detect_for_video.assert_not_called()

    def test_first_face_blendshapes(self):
        pytest.importorskip("mediapipe")
        detector = Mock()
        detector.detect_for_video.return_value = SimpleNamespace(face_blendshapes=[
            [category("mouthSmileLeft", 0.4), category("mouthSmileRight", 0.3)],
            [category("browDownLeft", 0.9)],
        ])
        extractor = extractor_with_detector(detector)

        shapes = extractor.extract(np.zeros((48, 64, 3), dtype=np.uint8), 1234)

        assert shapes == BlendshapeSet.from_pairs([("mouthSmileLeft", 0.4), ("mouthSmileRight", 0.3)])
        assert detector.detect_for_video.call_args.args[1] == 1234

    def test_no_face_gives_none(self):
        pytest.importorskip("mediapipe")
        detector = Mock()
        detector.detect_for_video.return_value = SimpleNamespace(face_blendshapes=[])
        extractor = extractor_with_detector(detector)

        assert extractor.extract(np.zeros((48, 64, 3), dtype=np.uint8), 1) is None

    def test_close_releases_detector(self):
        detector = Mock()

        with extractor_with_detector(detector) as extractor:
            pass

        detector.close.assert_called_once()
        extractor.close()
        detector.close.assert_called_once()
