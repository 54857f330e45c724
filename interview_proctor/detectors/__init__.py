"""Detector modules"""

from .gaze_heuristic import GazeHeuristic
from .object_filter import DisallowedObjectFilter
from .adapter import PerceptionAdapter

__all__ = ["GazeHeuristic", "DisallowedObjectFilter", "PerceptionAdapter"]
