"""
Gaze Heuristic - Decides whether the candidate is looking away

Uses face-mesh keypoints (468-point MediaPipe layout): compares the nose tip
with the midpoint between the outer corners of both eyes. A large horizontal
offset means the head is turned away from the screen.
"""

import logging
from typing import Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)


class GazeHeuristic:
    """
    Pure keypoints -> bool classifier. Holds no per-frame state.
    """

    # Face-mesh landmark indices
    NOSE_TIP_INDEX = 1
    LEFT_EYE_INDEX = 33
    RIGHT_EYE_INDEX = 362

    # Horizontal offset (in keypoint units, pixels for image-space meshes)
    DEFAULT_OFFSET_THRESHOLD = 50.0

    def __init__(self, offset_threshold: float = DEFAULT_OFFSET_THRESHOLD):
        self.offset_threshold = offset_threshold

    def nose_offset(self, keypoints: Optional[Sequence]) -> Optional[float]:
        """
        Horizontal distance between the nose tip and the eye midpoint.

        Returns:
            The offset, or None if the keypoints are unusable
        """
        if keypoints is None:
            return None

        try:
            points = np.asarray(keypoints, dtype=float)
        except (TypeError, ValueError):
            logger.debug("Keypoints could not be converted to an array")
            return None

        if points.ndim != 2 or points.shape[1] < 2 or points.shape[0] <= self.RIGHT_EYE_INDEX:
            return None

        eye_center_x = (points[self.LEFT_EYE_INDEX, 0] + points[self.RIGHT_EYE_INDEX, 0]) / 2
        offset = abs(points[self.NOSE_TIP_INDEX, 0] - eye_center_x)

        if not np.isfinite(offset):
            return None
        return float(offset)

    def is_looking_away(self, keypoints: Optional[Sequence]) -> bool:
        """
        Decide whether gaze is away from the screen.

        Unusable keypoints count as "not away".
        """
        offset = self.nose_offset(keypoints)
        if offset is None:
            return False
        return offset > self.offset_threshold
