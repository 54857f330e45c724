"""
Proctor Session - One candidate's monitored session
"""

import uuid
import logging
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .events import EventLedger, ViolationEvent
from .errors import ProctoringError
from .recording import RecordingReference
from .scoring import IntegrityScorer, INITIAL_SCORE

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    CREATED = "created"
    ACTIVE = "active"
    CLOSED = "closed"


class ProctorSession:
    """
    A single proctoring session.

    Owns the event ledger and the integrity score. Lifecycle is
    created -> active -> closed; the ledger and score only change while
    active and are frozen afterwards. Sessions are driven by
    ProctoringEngine; callers treat them as read-only handles.
    """

    def __init__(self, candidate_label: str, started_at: datetime, session_id: Optional[str] = None):
        """
        Args:
            candidate_label: Candidate identifier (already validated, non-empty)
            started_at: Creation time from the engine clock
            session_id: Optional custom session ID (auto-generated if not provided)
        """
        self.id = session_id or f"EXM_{uuid.uuid4().hex[:16].upper()}"
        self.candidate_label = candidate_label
        self.started_at = started_at
        self.ended_at: Optional[datetime] = None
        self.state = SessionState.CREATED
        self.recording: Optional[RecordingReference] = None

        self._ledger = EventLedger()
        self._score = INITIAL_SCORE
        self._score_history: List[int] = []

    # ============== Read-only view ==============

    @property
    def events(self) -> Tuple[ViolationEvent, ...]:
        return self._ledger.entries()

    @property
    def integrity_score(self) -> int:
        return self._score

    @property
    def score_history(self) -> Tuple[int, ...]:
        """Score after each event, aligned with `events`"""
        return tuple(self._score_history)

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    @property
    def is_closed(self) -> bool:
        return self.state == SessionState.CLOSED

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()

    def event_counts(self) -> Dict[str, int]:
        """Running count per event kind, derived from the ledger"""
        return self._ledger.counts_by_kind()

    def severity_counts(self) -> Dict[str, int]:
        return self._ledger.counts_by_severity()

    # ============== Lifecycle (engine only) ==============

    def activate(self):
        self._transition(SessionState.CREATED, SessionState.ACTIVE)

    def record(self, event: ViolationEvent, scorer: IntegrityScorer) -> int:
        """
        Append an event and fold it into the score.

        Returns:
            Score after this event
        """
        if not self.is_active:
            raise ProctoringError(f"Session {self.id} is not active")

        self._ledger.append(event)
        self._score = scorer.deduct(self._score, event.severity)
        self._score_history.append(self._score)
        return self._score

    def close(self, ended_at: datetime, recording: Optional[RecordingReference] = None):
        self._transition(SessionState.ACTIVE, SessionState.CLOSED)
        # Clock may not be monotonic (wall-clock adjustments)
        self.ended_at = max(ended_at, self.started_at)
        self.recording = recording
        self._ledger.freeze()

    def _transition(self, expected: SessionState, target: SessionState):
        if self.state != expected:
            raise ProctoringError(
                f"Session {self.id} cannot go {self.state.value} -> {target.value}"
            )
        logger.debug(f"Session {self.id}: {self.state.value} -> {target.value}")
        self.state = target

    def __repr__(self) -> str:
        return (
            f"ProctorSession(id={self.id!r}, candidate={self.candidate_label!r}, "
            f"state={self.state.value}, score={self._score}, events={len(self._ledger)})"
        )
