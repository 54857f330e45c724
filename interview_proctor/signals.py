"""
Frame Signal - Per-frame input from the perception models
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from .errors import InvalidInputError

Keypoint = Tuple[float, ...]


@dataclass(frozen=True)
class DetectedObject:
    """One classified object in a frame"""
    label: str
    confidence: float

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise InvalidInputError(f"Object confidence must be in [0, 1], got {self.confidence}")


@dataclass(frozen=True)
class FrameSignal:
    """
    Result of analyzing one video frame.

    Attributes:
        face_count: Number of faces detected (>= 0)
        gaze_keypoints: Face-mesh keypoints of the first face as (x, y[, z]) points
        detected_objects: Classified objects with confidence
    """
    face_count: int
    gaze_keypoints: Optional[Sequence[Keypoint]] = None
    detected_objects: Sequence[DetectedObject] = field(default_factory=tuple)

    def __post_init__(self):
        if self.face_count < 0:
            raise InvalidInputError(f"face_count must be >= 0, got {self.face_count}")
