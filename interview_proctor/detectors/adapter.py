"""
Perception Adapter - Turns external model output into a FrameSignal

The face-landmark and object-classification models are black boxes. The
adapter only normalizes their output shapes; it never looks inside them.
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..signals import DetectedObject, FrameSignal, Keypoint

logger = logging.getLogger(__name__)


# face_model(frame) -> list of faces, each a dict or object with optional "keypoints"
FaceModel = Callable[[Any], Sequence[Any]]
# object_model(frame) -> list of (label, confidence) pairs or dicts
ObjectModel = Callable[[Any], Sequence[Any]]


def _field(item: Any, *names: str, default: Any = None) -> Any:
    """Read the first present key/attribute out of a dict or object"""
    for name in names:
        if isinstance(item, dict):
            if name in item:
                return item[name]
        elif hasattr(item, name):
            return getattr(item, name)
    return default


def _to_point(point: Any) -> Keypoint:
    if isinstance(point, (tuple, list)):
        return tuple(float(v) for v in point)
    x = _field(point, "x")
    y = _field(point, "y")
    z = _field(point, "z")
    if z is None:
        return (float(x), float(y))
    return (float(x), float(y), float(z))


def _to_object(item: Any) -> DetectedObject:
    if isinstance(item, (tuple, list)):
        label, confidence = item[0], item[1]
    else:
        label = _field(item, "label", "class", "name")
        confidence = _field(item, "confidence", "score", default=0.0)
    return DetectedObject(label=str(label), confidence=float(confidence))


class PerceptionAdapter:
    """
    Runs both perception models on a frame and builds a FrameSignal.

    Any model failure makes the whole tick yield no signal (None), so the
    engine skips it without touching session state.
    """

    def __init__(self, face_model: FaceModel, object_model: ObjectModel):
        self.face_model = face_model
        self.object_model = object_model
        self.failed_frames = 0

    def collect(self, frame: Any) -> Optional[FrameSignal]:
        """
        Analyze a frame.

        Args:
            frame: Opaque frame handed to the models as-is

        Returns:
            FrameSignal, or None if either model failed
        """
        try:
            faces = list(self.face_model(frame) or [])
            keypoints = self._first_face_keypoints(faces)
        except Exception as e:
            logger.warning(f"Face detection error: {e}")
            self.failed_frames += 1
            return None

        try:
            objects = [_to_object(item) for item in (self.object_model(frame) or [])]
        except Exception as e:
            logger.warning(f"Object detection error: {e}")
            self.failed_frames += 1
            return None

        return FrameSignal(
            face_count=len(faces),
            gaze_keypoints=keypoints,
            detected_objects=tuple(objects),
        )

    @staticmethod
    def _first_face_keypoints(faces: List[Any]) -> Optional[Tuple[Keypoint, ...]]:
        if not faces:
            return None
        raw = _field(faces[0], "keypoints")
        if not raw:
            return None
        return tuple(_to_point(point) for point in raw)
