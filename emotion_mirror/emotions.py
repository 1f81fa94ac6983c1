"""Emotion labels, their presentation, and the active-emotion display state.

Exactly one emotion is active at any time. The display state starts at
NEUTRAL and every classification result is a legal transition from any
state to any other.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)


class EmotionLabel(Enum):
    """The four emotions the mirror can show."""

    NEUTRAL = "neutral"
    HAPPY = "happy"
    ANGRY = "angry"
    SURPRISED = "surprised"


@dataclass(frozen=True)
class EmotionDisplay:
    """How an emotion is shown to the user.

    Attributes:
        text: Result text, e.g. "HAPPY!".
        color: Colour as a web colour string ("#00ff00", "red", ...).
        emoji: Glyph shown beside the text where the renderer supports it.
        bgr: The same colour as an OpenCV BGR tuple.
    """

    text: str
    color: str
    emoji: str
    bgr: Tuple[int, int, int]


EMOTION_DISPLAYS: Dict[EmotionLabel, EmotionDisplay] = {
    EmotionLabel.NEUTRAL: EmotionDisplay("NEUTRAL", "white", "\U0001F610", (255, 255, 255)),
    EmotionLabel.HAPPY: EmotionDisplay("HAPPY!", "#00ff00", "\U0001F604", (0, 255, 0)),
    EmotionLabel.ANGRY: EmotionDisplay("ANGRY", "red", "\U0001F620", (0, 0, 255)),
    EmotionLabel.SURPRISED: EmotionDisplay("SURPRISED", "yellow", "\U0001F632", (0, 255, 255)),
}

# Left-to-right order of the emotion icon row
DISPLAY_ORDER = (
    EmotionLabel.NEUTRAL,
    EmotionLabel.HAPPY,
    EmotionLabel.ANGRY,
    EmotionLabel.SURPRISED,
)


def display_for(label: EmotionLabel) -> EmotionDisplay:
    """Return the text/colour pair for ``label``."""
    return EMOTION_DISPLAYS[label]


EmotionListener = Callable[[EmotionLabel, EmotionLabel], None]


class EmotionDisplayState:
    """Holds the single active emotion for the presentation layer.

    Renderers either poll ``active`` / ``flags()`` every frame or register
    a listener with ``subscribe``. Listeners are called with
    ``(previous, current)`` only when the active label actually changes,
    so re-selecting the active label is observationally a no-op.

    Usage:
        state = EmotionDisplayState()
        state.set_active(EmotionLabel.HAPPY)
        state.is_active(EmotionLabel.NEUTRAL)   # False
    """

    INITIAL = EmotionLabel.NEUTRAL

    def __init__(self):
        self._active = self.INITIAL
        self._listeners: List[EmotionListener] = []

    @property
    def active(self) -> EmotionLabel:
        """The currently active emotion."""
        return self._active

    @property
    def display(self) -> EmotionDisplay:
        """Presentation of the currently active emotion."""
        return EMOTION_DISPLAYS[self._active]

    def set_active(self, label: EmotionLabel) -> None:
        """
        Make ``label`` the active emotion and deactivate the other three.

        Args:
            label: Emotion to activate.

        Raises:
            TypeError: If ``label`` is not an EmotionLabel.
        """
        if not isinstance(label, EmotionLabel):
            raise TypeError(f"Expected EmotionLabel, got {type(label).__name__}")

        if label is self._active:
            return

        previous = self._active
        self._active = label
        logger.debug(f"Emotion changed: {previous.name} -> {label.name}")

        for listener in list(self._listeners):
            listener(previous, label)

    def is_active(self, label: EmotionLabel) -> bool:
        return label is self._active

    def flags(self) -> Dict[EmotionLabel, bool]:
        """Active flag for every label, in display order. Exactly one is True."""
        return {label: label is self._active for label in DISPLAY_ORDER}

    def subscribe(self, listener: EmotionListener) -> None:
        """Register ``listener(previous, current)`` for active-label changes."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: EmotionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def reset(self) -> None:
        """Return to the initial NEUTRAL state."""
        self.set_active(self.INITIAL)

    def __repr__(self) -> str:
        return f"EmotionDisplayState(active={self._active.name})"
