"""
BlendshapeExtractor for reading facial blendshape scores with MediaPipe Face Landmarker.

This module wraps the MediaPipe Tasks API (FaceLandmarker, mediapipe >= 0.10)
in VIDEO running mode and returns the blendshape scores of the first
detected face for each frame.
"""

import logging
import os
import urllib.request
from typing import Optional

import cv2
import numpy as np

try:
    import mediapipe as mp
    from mediapipe.tasks import python
    from mediapipe.tasks.python import vision

    MEDIAPIPE_AVAILABLE = True
except ImportError:
    MEDIAPIPE_AVAILABLE = False

from .blendshapes import BlendshapeSet

logger = logging.getLogger(__name__)


# Model download URL
MODEL_URL = "https://storage.googleapis.com/mediapipe-models/face_landmarker/face_landmarker/float16/1/face_landmarker.task"
DEFAULT_MODEL_PATH = "face_landmarker.task"


class BlendshapeExtractor:
    """Reads per-frame blendshape scores from MediaPipe Face Landmarker.

    Only the first detected face is considered. A frame without a face,
    or a detection without blendshapes, yields None.

    Timestamps passed to ``extract`` must increase monotonically, as
    required by the VIDEO running mode.
    """

    def __init__(
        self,
        model_path: Optional[str] = None,
        use_gpu: bool = False,
        min_detection_confidence: float = 0.5,
        min_presence_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
    ):
        """
        Initialize MediaPipe Face Landmarker.

        Args:
            model_path: Path to the face_landmarker.task model file. If None,
                the working directory and package directory are searched,
                then the model is downloaded.
            use_gpu: Run the model on the GPU delegate instead of CPU.
            min_detection_confidence: Minimum confidence for face detection [0, 1]
            min_presence_confidence: Minimum face presence score [0, 1]
            min_tracking_confidence: Minimum confidence for landmark tracking [0, 1]

        Raises:
            ImportError: If MediaPipe is not installed.
            FileNotFoundError: If an explicit model_path does not exist.
        """
        if not MEDIAPIPE_AVAILABLE:
            raise ImportError(
                "MediaPipe is not installed. Install with: pip install mediapipe"
            )

        if model_path is not None and not os.path.exists(model_path):
            raise FileNotFoundError(f"Face landmarker model not found: {model_path}")

        self._model_path = model_path or self._get_model_path()

        delegate = (
            python.BaseOptions.Delegate.GPU if use_gpu
            else python.BaseOptions.Delegate.CPU
        )
        base_options = python.BaseOptions(
            model_asset_path=self._model_path,
            delegate=delegate,
        )
        options = vision.FaceLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            output_face_blendshapes=True,
            num_faces=1,
            min_face_detection_confidence=min_detection_confidence,
            min_face_presence_confidence=min_presence_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._detector = vision.FaceLandmarker.create_from_options(options)
        logger.info(f"Face landmarker loaded from {self._model_path}")

    @property
    def model_path(self) -> str:
        return self._model_path

    def _get_model_path(self) -> str:
        """Get or download the face landmarker model."""
        if os.path.exists(DEFAULT_MODEL_PATH):
            return DEFAULT_MODEL_PATH

        # Check in package directory
        package_dir = os.path.dirname(__file__)
        package_model_path = os.path.join(package_dir, DEFAULT_MODEL_PATH)
        if os.path.exists(package_model_path):
            return package_model_path

        logger.info(f"Downloading face landmarker model to {DEFAULT_MODEL_PATH}...")
        urllib.request.urlretrieve(MODEL_URL, DEFAULT_MODEL_PATH)
        logger.info("Model downloaded successfully.")
        return DEFAULT_MODEL_PATH

    def extract(self, frame: np.ndarray, timestamp_ms: int) -> Optional[BlendshapeSet]:
        """
        Read blendshape scores from a video frame.

        Args:
            frame: BGR format video frame (H, W, 3)
            timestamp_ms: Frame timestamp in milliseconds, strictly increasing

        Returns:
            BlendshapeSet for the first detected face, or None if no face
            (or no blendshape output) was detected
        """
        if frame is None or frame.size == 0:
            return None

        # Convert BGR to RGB for MediaPipe
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)

        result = self._detector.detect_for_video(mp_image, int(timestamp_ms))

        if not result.face_blendshapes:
            return None

        return BlendshapeSet.from_categories(result.face_blendshapes[0])

    def close(self):
        """Release MediaPipe resources."""
        if hasattr(self, "_detector") and self._detector:
            self._detector.close()
            self._detector = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
