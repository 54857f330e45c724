"""
Disallowed Object Filter - Picks out detections of items not allowed in the room
"""

import logging
from typing import Iterable, List, Optional, Sequence

from ..signals import DetectedObject

logger = logging.getLogger(__name__)


class DisallowedObjectFilter:
    """
    Matches detected object labels against a disallowed list.

    Matching is a case-insensitive substring test, so "Cell Phone" and
    "cell phone case" both match "cell phone".
    """

    DISALLOWED_ITEMS: Sequence[str] = ("cell phone", "book", "laptop", "person")

    def __init__(self, disallowed: Optional[Iterable[str]] = None):
        items = self.DISALLOWED_ITEMS if disallowed is None else disallowed
        self.disallowed = tuple(item.strip().lower() for item in items if item.strip())

    def matches(self, label: str) -> bool:
        name_lower = label.lower()
        return any(item in name_lower for item in self.disallowed)

    def filter(self, detections: Iterable[DetectedObject]) -> List[DetectedObject]:
        """
        Keep every matching detection, in input order.

        Repeated detections of the same label are all kept.
        """
        matched = [obj for obj in detections if self.matches(obj.label)]
        if matched:
            logger.debug(f"Disallowed objects in frame: {[obj.label for obj in matched]}")
        return matched
