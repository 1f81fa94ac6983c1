"""
Blendshape score containers and named lookup.

MediaPipe Face Landmarker reports, per detected face, a list of 52 named
blendshape categories with normalized activation scores in [0, 1]. This
module wraps one face's list for one frame and provides the named lookup
used by the emotion classifier.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence, Tuple, Union, overload


# MediaPipe Face Landmarker blendshape vocabulary, in model output order.
# Reference only: category names are not validated against this list.
BLENDSHAPE_NAMES = (
    "_neutral",
    "browDownLeft",
    "browDownRight",
    "browInnerUp",
    "browOuterUpLeft",
    "browOuterUpRight",
    "cheekPuff",
    "cheekSquintLeft",
    "cheekSquintRight",
    "eyeBlinkLeft",
    "eyeBlinkRight",
    "eyeLookDownLeft",
    "eyeLookDownRight",
    "eyeLookInLeft",
    "eyeLookInRight",
    "eyeLookOutLeft",
    "eyeLookOutRight",
    "eyeLookUpLeft",
    "eyeLookUpRight",
    "eyeSquintLeft",
    "eyeSquintRight",
    "eyeWideLeft",
    "eyeWideRight",
    "jawForward",
    "jawLeft",
    "jawOpen",
    "jawRight",
    "mouthClose",
    "mouthDimpleLeft",
    "mouthDimpleRight",
    "mouthFrownLeft",
    "mouthFrownRight",
    "mouthFunnel",
    "mouthLeft",
    "mouthLowerDownLeft",
    "mouthLowerDownRight",
    "mouthPressLeft",
    "mouthPressRight",
    "mouthPucker",
    "mouthRight",
    "mouthRollLower",
    "mouthRollUpper",
    "mouthShrugLower",
    "mouthShrugUpper",
    "mouthSmileLeft",
    "mouthSmileRight",
    "mouthStretchLeft",
    "mouthStretchRight",
    "mouthUpperUpLeft",
    "mouthUpperUpRight",
    "noseSneerLeft",
    "noseSneerRight",
)


@dataclass(frozen=True)
class BlendshapeScore:
    """One named blendshape activation for a single frame.

    Attributes:
        category_name: Blendshape identifier, e.g. "mouthSmileLeft".
        score: Normalized activation in [0, 1] as reported by the tracker.
    """

    category_name: str
    score: float


class BlendshapeSet(Sequence[BlendshapeScore]):
    """Ordered blendshape scores for one detected face in one frame.

    Order and duplicates are preserved exactly as delivered by the
    tracker. Lookups by name return the first matching entry.

    Usage:
        shapes = BlendshapeSet.from_mapping({"mouthSmileLeft": 0.4})
        shapes.score("mouthSmileLeft")   # 0.4
        shapes.score("jawOpen")          # 0.0 (absent means relaxed)
    """

    __slots__ = ("_scores",)

    def __init__(self, scores: Iterable[BlendshapeScore] = ()):
        self._scores: Tuple[BlendshapeScore, ...] = tuple(scores)

    @overload
    def __getitem__(self, index: int) -> BlendshapeScore: ...

    @overload
    def __getitem__(self, index: slice) -> "BlendshapeSet": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return BlendshapeSet(self._scores[index])
        return self._scores[index]

    def __len__(self) -> int:
        return len(self._scores)

    def __iter__(self) -> Iterator[BlendshapeScore]:
        return iter(self._scores)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BlendshapeSet):
            return NotImplemented
        return self._scores == other._scores

    def __hash__(self) -> int:
        return hash(self._scores)

    def __repr__(self) -> str:
        return f"BlendshapeSet({list(self._scores)!r})"

    def score(self, name: str) -> float:
        """Return the score of the first category called ``name``, else 0.0."""
        return score(self, name)

    def to_dict(self) -> dict:
        """Map category name to score; the first occurrence of a name wins."""
        result = {}
        for entry in self._scores:
            result.setdefault(entry.category_name, entry.score)
        return result

    @classmethod
    def from_categories(cls, categories: Iterable[Any]) -> "BlendshapeSet":
        """
        Build a set from MediaPipe ``Category`` objects.

        Args:
            categories: Objects exposing ``category_name`` and ``score``,
                e.g. ``result.face_blendshapes[0]`` from FaceLandmarker.

        Returns:
            BlendshapeSet in the order the categories were given.
        """
        return cls(
            BlendshapeScore(str(c.category_name), float(c.score))
            for c in categories
        )

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, float]]) -> "BlendshapeSet":
        """Build a set from ``(category_name, score)`` pairs."""
        return cls(BlendshapeScore(str(name), float(value)) for name, value in pairs)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, float]) -> "BlendshapeSet":
        """Build a set from a ``{category_name: score}`` mapping."""
        return cls.from_pairs(mapping.items())

    @classmethod
    def from_json(cls, data: Union[list, dict]) -> "BlendshapeSet":
        """
        Build a set from decoded JSON.

        Accepted shapes:
            - ``[{"categoryName": "mouthSmileLeft", "score": 0.4}, ...]``
              (``category_name`` is accepted as well)
            - ``[{"mouthSmileLeft": 0.4}, {"mouthSmileRight": 0.3}]``
            - ``{"mouthSmileLeft": 0.4, "mouthSmileRight": 0.3}``

        Raises:
            ValueError: If the data matches none of the shapes above or a
                score is not a number.
        """
        if isinstance(data, dict):
            return cls.from_pairs(_checked_pair(k, v) for k, v in data.items())

        if not isinstance(data, list):
            raise ValueError(
                f"Expected a JSON list or object of blendshapes, got {type(data).__name__}"
            )

        pairs = []
        for i, record in enumerate(data):
            if not isinstance(record, dict):
                raise ValueError(f"Entry {i} is not an object: {record!r}")

            name = record.get("categoryName", record.get("category_name"))
            if name is not None:
                if "score" not in record:
                    raise ValueError(f"Entry {i} has a category name but no score")
                pairs.append(_checked_pair(name, record["score"]))
            elif len(record) == 1:
                (key, value), = record.items()
                pairs.append(_checked_pair(key, value))
            else:
                raise ValueError(
                    f"Entry {i} must be {{'categoryName', 'score'}} or a single "
                    f"{{name: score}} pair, got keys {sorted(record)}"
                )

        return cls.from_pairs(pairs)


def score(blendshapes: Optional[Iterable[BlendshapeScore]], name: str) -> float:
    """
    Look up a blendshape score by category name.

    Args:
        blendshapes: Scores for one face in one frame. ``None`` is treated
            as an empty set.
        name: Category name to find.

    Returns:
        Score of the first entry whose ``category_name`` equals ``name``,
        or 0.0 when the category is absent (muscle fully relaxed).
    """
    if blendshapes is None:
        return 0.0
    for entry in blendshapes:
        if entry.category_name == name:
            return entry.score
    return 0.0


def _checked_pair(name: Any, value: Any) -> Tuple[str, float]:
    if not isinstance(name, str):
        raise ValueError(f"Category name must be a string, got {name!r}")
    # bool is an int subclass but never a valid score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Score for {name!r} must be a number, got {value!r}")
    try:
        converted = float(value)
    except OverflowError:
        raise ValueError(f"Score for {name!r} is out of range: {value!r}")
    if not math.isfinite(converted):
        raise ValueError(f"Score for {name!r} must be finite, got {value!r}")
    return name, converted
