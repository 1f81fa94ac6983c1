"""
Emotion mirror controller that coordinates all components.

This is the main entry point for the emotion mirror. It handles camera
input, blendshape extraction, emotion classification, and the video
overlay.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import cv2
import numpy as np

from emotion_mirror.blendshapes import BlendshapeSet
from emotion_mirror.classifier import DerivedSignals, EmotionClassifier
from emotion_mirror.emotions import EmotionDisplayState, EmotionLabel
from emotion_mirror.extractor import BlendshapeExtractor
from emotion_mirror.overlay import draw_emotion, draw_signals, draw_status

logger = logging.getLogger(__name__)

READY_MESSAGE = "AI Ready! Show me a face."
LOADING_MESSAGE = "Loading AI..."
MISSING_RUNTIME_MESSAGE = "Error: mediapipe not installed! Run pip install mediapipe."
MISSING_MODEL_MESSAGE = "Error: face landmarker model not found!"
MODEL_LOAD_MESSAGE = "Error: could not load face landmarker model!"
CAMERA_MESSAGE = "Error: Camera access denied or unavailable!"

WINDOW_NAME = "Emotion Mirror"

# How long a setup error stays on screen before the window closes
ERROR_DISPLAY_MS = 3000


@dataclass
class MirrorConfig:
    """Configuration for EmotionMirror."""

    # Camera settings
    camera_id: int = 0
    frame_width: int = 640
    frame_height: int = 480
    target_fps: float = 30.0

    # Face landmarker settings
    model_path: Optional[str] = None
    use_gpu: bool = False
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

    # Display settings
    show_video: bool = True
    show_signals: bool = False
    mirror_video: bool = True

    def validate(self) -> None:
        """
        Check the values a running mirror depends on.

        Raises:
            ValueError: If target_fps is not positive or a confidence
                threshold is outside [0, 1].
        """
        if not _is_number(self.target_fps) or not self.target_fps > 0:
            raise ValueError(f"target_fps must be positive, got {self.target_fps!r}")

        for name in (
            "min_detection_confidence",
            "min_presence_confidence",
            "min_tracking_confidence",
        ):
            value = getattr(self, name)
            if not _is_number(value) or not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value!r}")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class EmotionMirror:
    """
    Frame-driven emotion mirror.

    Coordinates:
    - Camera capture
    - MediaPipe blendshape extraction
    - Emotion classification
    - Active emotion display state and overlay

    Everything runs on the calling thread; the display state is only
    changed by the frame currently being processed.

    Usage:
        mirror = EmotionMirror()
        mirror.run()

        # Headless, with a listener
        mirror = EmotionMirror(MirrorConfig(show_video=False))
        mirror.state.subscribe(lambda old, new: print(new.name))
        mirror.run()
    """

    def __init__(
        self,
        config: Optional[MirrorConfig] = None,
        classifier: Optional[EmotionClassifier] = None,
        state: Optional[EmotionDisplayState] = None,
        extractor: Optional[BlendshapeExtractor] = None,
    ):
        """
        Create an EmotionMirror.

        Parameters:
            config (Optional[MirrorConfig]): Mirror configuration. Defaults to MirrorConfig().
            classifier (Optional[EmotionClassifier]): Classifier to use. Defaults to the fixed-threshold classifier.
            state (Optional[EmotionDisplayState]): Display state to drive. A fresh NEUTRAL state is created if omitted.
            extractor (Optional[BlendshapeExtractor]): Pre-built extractor; created lazily by initialize() if omitted.
        """
        self.config = config or MirrorConfig()
        self.classifier = classifier or EmotionClassifier()
        self.state = state or EmotionDisplayState()

        # Components (initialized lazily)
        self._extractor = extractor
        self._camera: Optional[cv2.VideoCapture] = None

        # Status shown to the user
        self.status_message = LOADING_MESSAGE
        self.status_is_error = False
        self.last_signals: Optional[DerivedSignals] = None

        # Frame tracking
        self._running = False
        self._window_open = False
        self._last_timestamp_ms: Optional[int] = None
        self._frame_count = 0
        self._skipped_count = 0
        self._start_time = 0.0

        # Callbacks
        self._on_frame: Optional[Callable] = None
        self._on_emotion: Optional[Callable] = None

    def _set_status(self, message: str, is_error: bool = False) -> None:
        self.status_message = message
        self.status_is_error = is_error

    def _init_extractor(self) -> bool:
        """
        Lazily create the blendshape extractor.

        Returns:
            True if the extractor is available after the call. On failure the
            reason is logged and shown as the status message.
        """
        if self._extractor is not None:
            return True

        try:
            self._extractor = BlendshapeExtractor(
                model_path=self.config.model_path,
                use_gpu=self.config.use_gpu,
                min_detection_confidence=self.config.min_detection_confidence,
                min_presence_confidence=self.config.min_presence_confidence,
                min_tracking_confidence=self.config.min_tracking_confidence,
            )
            return True
        except ImportError as e:
            logger.error(f"Face tracking runtime unavailable: {e}")
            self._set_status(MISSING_RUNTIME_MESSAGE, is_error=True)
        except FileNotFoundError as e:
            logger.error(f"Setup error: {e}")
            self._set_status(MISSING_MODEL_MESSAGE, is_error=True)
        except Exception as e:
            logger.error(f"Failed to initialize face landmarker: {e}")
            self._set_status(MODEL_LOAD_MESSAGE, is_error=True)
        return False

    def _init_camera(self) -> bool:
        """
        Ensure the configured camera is opened and configured for capture.

        Returns:
            True if the camera is opened successfully, False otherwise.
        """
        if self._camera is not None:
            return True

        camera = cv2.VideoCapture(self.config.camera_id)
        if not camera.isOpened():
            camera.release()
            logger.error(f"Failed to open camera {self.config.camera_id}")
            self._set_status(CAMERA_MESSAGE, is_error=True)
            return False

        camera.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.frame_width)
        camera.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.frame_height)
        camera.set(cv2.CAP_PROP_FPS, self.config.target_fps)
        self._camera = camera

        return True

    def initialize(self) -> bool:
        """
        Initialize the face landmarker, then the camera.

        Failures are reported through ``status_message`` and the log rather
        than raised, so the caller can keep showing the message.

        Returns:
            True if both components are ready.
        """
        if not self._init_extractor():
            return False

        if not self._init_camera():
            return False

        self._set_status(READY_MESSAGE)
        logger.info(READY_MESSAGE)
        return True

    def process_blendshapes(self, blendshapes: Optional[BlendshapeSet]) -> EmotionLabel:
        """
        Classify one frame's blendshapes and make the result the active emotion.

        Parameters:
            blendshapes (Optional[BlendshapeSet]): First face's scores, or None when no face was detected.

        Returns:
            EmotionLabel: The newly active emotion.
        """
        if blendshapes is None:
            self.last_signals = None
            label = EmotionLabel.NEUTRAL
        else:
            self.last_signals = self.classifier.signals(blendshapes)
            label = self.classifier.decide(self.last_signals)

        # The ready prompt is only needed until the first frame is classified
        if self.status_message == READY_MESSAGE and not self.status_is_error:
            self._set_status("")

        self.state.set_active(label)
        return label

    def process_frame(self, frame: np.ndarray, timestamp_ms: int) -> EmotionLabel:
        """
        Run one scheduler tick on a captured frame.

        The tick is skipped, leaving the active emotion unchanged, when the
        frame is not newer than the last processed one or when detection
        fails on this frame.

        Parameters:
            frame (np.ndarray): BGR image from the camera (HxWx3).
            timestamp_ms (int): Frame timestamp in milliseconds.

        Returns:
            EmotionLabel: The active emotion after this tick.
        """
        if self._extractor is None:
            return self.state.active

        if self._last_timestamp_ms is not None and timestamp_ms <= self._last_timestamp_ms:
            self._skipped_count += 1
            return self.state.active
        self._last_timestamp_ms = timestamp_ms

        try:
            blendshapes = self._extractor.extract(frame, timestamp_ms)
        except Exception as e:
            logger.error(f"Detection error: {e}")
            return self.state.active

        return self.process_blendshapes(blendshapes)

    def step(self) -> Optional[EmotionLabel]:
        """
        Run a single loop iteration: capture a frame, classify it, and invoke callbacks.

        Returns:
            Optional[EmotionLabel]: The active emotion, or None if no frame could be read.
        """
        if self._camera is None:
            return None

        ret, frame = self._camera.read()
        if not ret:
            return None

        timestamp_ms = int(time.monotonic() * 1000)
        previous = self.state.active
        label = self.process_frame(frame, timestamp_ms)

        if self._on_emotion is not None and label is not previous:
            self._on_emotion(label)

        if self._on_frame is not None:
            self._on_frame(frame, label)

        if self.config.show_video:
            self._show(frame)

        self._frame_count += 1
        return label

    def run(
        self,
        show_video: Optional[bool] = None,
        on_frame: Optional[Callable] = None,
        on_emotion: Optional[Callable] = None,
    ) -> None:
        """
        Run the main loop until stopped, the camera fails, or 'q' is pressed.

        Parameters:
            show_video (Optional[bool]): Overrides config.show_video when given.
            on_frame (Optional[Callable]): Called every frame as on_frame(frame, label).
            on_emotion (Optional[Callable]): Called as on_emotion(label) when the active emotion changes.

        Raises:
            ValueError: If the config fails validation. Nothing has been opened yet.
        """
        if show_video is not None:
            self.config.show_video = show_video

        self.config.validate()

        if not self.initialize():
            logger.error(self.status_message)
            if self.config.show_video:
                self._show_error_frame()
            self.stop()
            return

        self._on_frame = on_frame
        self._on_emotion = on_emotion
        self._running = True
        self._start_time = time.time()
        self._frame_count = 0

        logger.info("Emotion mirror started. Press 'q' to quit.")

        try:
            target_interval = 1.0 / self.config.target_fps

            while self._running:
                loop_start = time.time()

                if self.step() is None:
                    logger.warning("Failed to read frame from camera")

                if self.config.show_video and cv2.waitKey(1) & 0xFF == ord('q'):
                    break

                # Maintain frame rate
                elapsed = time.time() - loop_start
                if elapsed < target_interval:
                    time.sleep(target_interval - elapsed)

        except KeyboardInterrupt:
            logger.info("Interrupted")

        finally:
            self.stop()

    def render(self, frame: np.ndarray) -> np.ndarray:
        """Draw the emotion, status and optional signals onto ``frame``."""
        if self.config.mirror_video:
            frame = cv2.flip(frame, 1)

        draw_emotion(frame, self.state)
        draw_status(frame, self.status_message, self.status_is_error)

        if self.config.show_signals and self.last_signals is not None:
            draw_signals(frame, self.last_signals)

        return frame

    def _show(self, frame: np.ndarray) -> None:
        cv2.imshow(WINDOW_NAME, self.render(frame))
        self._window_open = True

    def _show_error_frame(self) -> None:
        # No camera frame exists yet, so the status is drawn on a blank one
        frame = np.zeros(
            (self.config.frame_height, self.config.frame_width, 3), dtype=np.uint8
        )
        self._show(frame)
        cv2.waitKey(ERROR_DISPLAY_MS)

    def request_stop(self) -> None:
        """
        Ask a running loop to exit after the current iteration.

        Only clears the running flag, so it is safe to call from a signal
        handler. run() releases the components on its way out.
        """
        self._running = False

    def stop(self) -> None:
        """
        Stop the loop and release the camera, extractor and window.

        Safe to call at any time, including more than once.
        """
        self._running = False

        if self._camera is not None:
            self._camera.release()
            self._camera = None

        if self._extractor is not None:
            self._extractor.close()
            self._extractor = None

        if self._window_open:
            cv2.destroyAllWindows()
            self._window_open = False

        if self._frame_count > 0:
            elapsed = time.time() - self._start_time
            logger.info(
                f"Processed {self._frame_count} frames in {elapsed:.1f}s "
                f"({self._frame_count / max(elapsed, 1e-6):.1f} FPS, "
                f"{self._skipped_count} stale ticks skipped)"
            )

    @property
    def is_running(self) -> bool:
        return self._running

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
