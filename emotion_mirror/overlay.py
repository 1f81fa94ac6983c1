"""OpenCV overlay for the emotion mirror video window.

Draws the active emotion's text in its colour, a row of four emotion
slots with the active one highlighted, and a status line. Drawing reads
the display state only and never changes it.
"""

from typing import Tuple

import cv2
import numpy as np

from emotion_mirror.classifier import DerivedSignals
from emotion_mirror.emotions import DISPLAY_ORDER, EMOTION_DISPLAYS, EmotionDisplayState

FONT = cv2.FONT_HERSHEY_SIMPLEX

ERROR_BGR = (0, 0, 255)
STATUS_BGR = (200, 200, 200)
DIMMED_BGR = (90, 90, 90)

SLOT_WIDTH = 110
SLOT_HEIGHT = 34
SLOT_GAP = 8


def draw_emotion(frame: np.ndarray, state: EmotionDisplayState) -> np.ndarray:
    """
    Draw the active emotion text and the emotion slot row onto ``frame``.

    Parameters:
        frame (np.ndarray): BGR image; modified in place.
        state (EmotionDisplayState): Source of the active emotion.

    Returns:
        np.ndarray: The same frame, for chaining.
    """
    display = state.display
    cv2.putText(frame, display.text, (10, 40), FONT, 1.2, (0, 0, 0), 5, cv2.LINE_AA)
    cv2.putText(frame, display.text, (10, 40), FONT, 1.2, display.bgr, 2, cv2.LINE_AA)

    h = frame.shape[0]
    y = h - SLOT_HEIGHT - 10
    for i, label in enumerate(DISPLAY_ORDER):
        x = 10 + i * (SLOT_WIDTH + SLOT_GAP)
        _draw_slot(frame, (x, y), label.name, EMOTION_DISPLAYS[label].bgr,
                   active=state.is_active(label))

    return frame


def _draw_slot(
    frame: np.ndarray,
    origin: Tuple[int, int],
    name: str,
    color: Tuple[int, int, int],
    active: bool,
) -> None:
    x, y = origin
    bottom_right = (x + SLOT_WIDTH, y + SLOT_HEIGHT)

    if active:
        cv2.rectangle(frame, (x, y), bottom_right, color, cv2.FILLED)
        cv2.putText(frame, name, (x + 8, y + 23), FONT, 0.5, (0, 0, 0), 2, cv2.LINE_AA)
    else:
        cv2.rectangle(frame, (x, y), bottom_right, DIMMED_BGR, 1)
        cv2.putText(frame, name, (x + 8, y + 23), FONT, 0.5, DIMMED_BGR, 1, cv2.LINE_AA)


def draw_status(frame: np.ndarray, message: str, is_error: bool = False) -> np.ndarray:
    """Draw a one-line status message under the emotion text."""
    if message:
        color = ERROR_BGR if is_error else STATUS_BGR
        cv2.putText(frame, message, (10, 75), FONT, 0.6, color, 2, cv2.LINE_AA)
    return frame


def draw_signals(frame: np.ndarray, signals: DerivedSignals) -> np.ndarray:
    """Debug readout of the derived signals in the top-right corner."""
    w = frame.shape[1]
    lines = [
        f"smile:     {signals.smile:.2f}",
        f"brow down: {signals.brow_down:.2f}",
        f"eye open:  {signals.eye_open:.2f}",
        f"brow up:   {signals.brow_up:.2f}",
        f"surprise:  {signals.surprise:.2f}",
    ]
    y = 25
    for line in lines:
        cv2.putText(frame, line, (w - 200, y), FONT, 0.5, (255, 255, 0), 1, cv2.LINE_AA)
        y += 20
    return frame
