"""
Violation Events - Immutable violation records and the append-only ledger

Each event kind carries its own details payload:
- face_missing / focus_loss: how long the condition persisted
- multiple_faces: how many faces were in the frame
- unauthorized_object: the detected label and its confidence
"""

import uuid
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Iterator, List, Tuple, Union

from .errors import LedgerFrozenError

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Closed set of violation kinds"""
    FOCUS_LOSS = "focus_loss"
    FACE_MISSING = "face_missing"
    MULTIPLE_FACES = "multiple_faces"
    UNAUTHORIZED_OBJECT = "unauthorized_object"


class Severity(str, Enum):
    """Violation severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Severity is fixed per kind
SEVERITY_BY_KIND: Dict[EventKind, Severity] = {
    EventKind.FACE_MISSING: Severity.HIGH,
    EventKind.MULTIPLE_FACES: Severity.MEDIUM,
    EventKind.FOCUS_LOSS: Severity.MEDIUM,
    EventKind.UNAUTHORIZED_OBJECT: Severity.HIGH,
}


# ============== Details Variants ==============

@dataclass(frozen=True)
class DurationDetails:
    """Details for debounced kinds (face_missing, focus_loss)"""
    duration_seconds: float
    threshold_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "duration",
            "duration_seconds": round(self.duration_seconds, 3),
            "threshold_seconds": self.threshold_seconds,
        }


@dataclass(frozen=True)
class FaceCountDetails:
    """Details for multiple_faces"""
    face_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "face_count", "face_count": self.face_count}


@dataclass(frozen=True)
class ObjectDetails:
    """Details for unauthorized_object"""
    label: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "label": self.label,
            "confidence": round(self.confidence, 4),
        }


EventDetails = Union[DurationDetails, FaceCountDetails, ObjectDetails]

DETAILS_TYPE_BY_KIND = {
    EventKind.FACE_MISSING: DurationDetails,
    EventKind.FOCUS_LOSS: DurationDetails,
    EventKind.MULTIPLE_FACES: FaceCountDetails,
    EventKind.UNAUTHORIZED_OBJECT: ObjectDetails,
}


def describe(kind: EventKind, details: EventDetails) -> str:
    """Build the human-readable summary for an event"""
    if kind == EventKind.FACE_MISSING:
        return f"No face detected for more than {details.threshold_seconds:g} seconds"
    if kind == EventKind.FOCUS_LOSS:
        return f"Candidate looking away for more than {details.threshold_seconds:g} seconds"
    if kind == EventKind.MULTIPLE_FACES:
        return f"{details.face_count} faces detected in frame"
    return f"Detected {details.label} in frame"


def generate_event_id() -> str:
    return f"evt_{uuid.uuid4().hex}"


@dataclass(frozen=True)
class ViolationEvent:
    """A single violation detected during a session"""
    id: str
    kind: EventKind
    timestamp: datetime
    description: str
    severity: Severity
    details: EventDetails

    @classmethod
    def create(cls, kind: EventKind, details: EventDetails, timestamp: datetime) -> "ViolationEvent":
        """
        Create a new event with a fresh id.

        Severity and description are derived from the kind and details.

        Raises:
            TypeError: if the details variant does not belong to the kind
        """
        expected = DETAILS_TYPE_BY_KIND[kind]
        if not isinstance(details, expected):
            raise TypeError(f"{kind.value} expects {expected.__name__}, got {type(details).__name__}")

        return cls(
            id=generate_event_id(),
            kind=kind,
            timestamp=timestamp,
            description=describe(kind, details),
            severity=SEVERITY_BY_KIND[kind],
            details=details,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
            "description": self.description,
            "severity": self.severity.value,
            "details": self.details.to_dict(),
        }


# ============== Ledger ==============

@dataclass
class EventLedger:
    """
    Append-only, ordered record of the events of one session.

    Insertion order is detection order. Once frozen (session closed),
    further appends raise LedgerFrozenError.
    """

    _entries: List[ViolationEvent] = field(default_factory=list)
    _frozen: bool = False

    def append(self, event: ViolationEvent):
        if self._frozen:
            raise LedgerFrozenError(f"Cannot append {event.id}: ledger is frozen")
        self._entries.append(event)
        logger.debug(f"Ledger append: {event.kind.value} ({len(self._entries)} total)")

    def freeze(self):
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def entries(self) -> Tuple[ViolationEvent, ...]:
        return tuple(self._entries)

    def counts_by_kind(self) -> Dict[str, int]:
        """Running count per event kind, recomputed from the entries"""
        return dict(Counter(event.kind.value for event in self._entries))

    def counts_by_severity(self) -> Dict[str, int]:
        return dict(Counter(event.severity.value for event in self._entries))

    def __iter__(self) -> Iterator[ViolationEvent]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
