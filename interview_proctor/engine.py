"""
Proctoring Engine - Session state machine and detection-to-event pipeline

The engine owns at most one active session. An external driver feeds it
one FrameSignal per tick; the engine updates its debounce timers, emits
violation events into the session ledger and folds each one into the
integrity score.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from .detectors import DisallowedObjectFilter, GazeHeuristic
from .errors import InvalidInputError, NoActiveSessionError, SessionAlreadyActiveError
from .events import (
    DurationDetails,
    EventKind,
    FaceCountDetails,
    ObjectDetails,
    ViolationEvent,
)
from .recording import RecordingReference
from .scoring import IntegrityScorer, INITIAL_SCORE
from .session import ProctorSession
from .signals import FrameSignal
from .timers import DebounceTimer
from .utils.logging import log_session_end, log_session_start, log_violation

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProctoringEngine:
    """
    Drives a single proctoring session at a time.

    States: idle (no session) -> active -> idle. A closed session is
    handed to the caller by end(); the engine keeps no reference to it.
    """

    FACE_ABSENCE_SECONDS = 10.0
    GAZE_AWAY_SECONDS = 5.0

    def __init__(
        self,
        face_absence_seconds: float = FACE_ABSENCE_SECONDS,
        gaze_away_seconds: float = GAZE_AWAY_SECONDS,
        gaze_heuristic: Optional[GazeHeuristic] = None,
        object_filter: Optional[DisallowedObjectFilter] = None,
        scorer: Optional[IntegrityScorer] = None,
        clock: Optional[Clock] = None
    ):
        """
        Initialize the engine.

        Args:
            face_absence_seconds: How long no face may be seen before face_missing fires
            gaze_away_seconds: How long gaze may be away before focus_loss fires
            gaze_heuristic: Keypoints -> looking-away classifier
            object_filter: Disallowed object matcher
            scorer: Severity -> score deduction rule
            clock: Returns the current time; injectable for tests
        """
        self.gaze_heuristic = gaze_heuristic or GazeHeuristic()
        self.object_filter = object_filter or DisallowedObjectFilter()
        self.scorer = scorer or IntegrityScorer()
        self.clock = clock or utc_now

        self.face_timer = DebounceTimer("face_absence", face_absence_seconds)
        self.gaze_timer = DebounceTimer("gaze_away", gaze_away_seconds)

        self._session: Optional[ProctorSession] = None

    @classmethod
    def from_settings(cls, settings, clock: Optional[Clock] = None) -> "ProctoringEngine":
        """Build an engine from the service Settings"""
        return cls(
            face_absence_seconds=settings.FACE_ABSENCE_SECONDS,
            gaze_away_seconds=settings.GAZE_AWAY_SECONDS,
            gaze_heuristic=GazeHeuristic(settings.GAZE_OFFSET_THRESHOLD),
            object_filter=DisallowedObjectFilter(settings.DISALLOWED_OBJECTS),
            clock=clock,
        )

    # ============== Read-only view ==============

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def current_session(self) -> Optional[ProctorSession]:
        return self._session

    @property
    def integrity_score(self) -> int:
        if self._session is None:
            return INITIAL_SCORE
        return self._session.integrity_score

    def event_counts(self) -> Dict[str, int]:
        if self._session is None:
            return {}
        return self._session.event_counts()

    # ============== Lifecycle ==============

    def start(self, candidate_label: str) -> ProctorSession:
        """
        Start a new session.

        Args:
            candidate_label: Candidate identifier, non-empty after trimming

        Returns:
            The active session handle

        Raises:
            InvalidInputError: if the label is empty
            SessionAlreadyActiveError: if a session is already active
        """
        label = (candidate_label or "").strip()
        if not label:
            raise InvalidInputError("Candidate label must not be empty")

        if self._session is not None:
            raise SessionAlreadyActiveError(
                f"Session {self._session.id} is already active for {self._session.candidate_label!r}"
            )

        self.face_timer.reset()
        self.gaze_timer.reset()

        session = ProctorSession(candidate_label=label, started_at=self.clock())
        session.activate()
        self._session = session

        log_session_start(session.id, label)
        return session

    def analyze_frame(self, signal: Optional[FrameSignal]) -> List[ViolationEvent]:
        """
        Process one frame signal.

        A no-op when idle or when the perception tick failed (signal is None).

        Returns:
            Events appended to the ledger during this call, in detection order
        """
        session = self._session
        if session is None or signal is None:
            return []

        now = self.clock()
        emitted: List[ViolationEvent] = []

        def emit(kind: EventKind, details) -> None:
            event = ViolationEvent.create(kind, details, now)
            score = session.record(event, self.scorer)
            emitted.append(event)
            log_violation(session.id, kind.value, event.severity.value, score)

        # 1. Face presence
        if signal.face_count == 0:
            elapsed = self.face_timer.poll(now)
            if elapsed is not None:
                emit(EventKind.FACE_MISSING, DurationDetails(elapsed, self.face_timer.delay_seconds))
        else:
            self.face_timer.cancel()

        # 2. Multiple faces, every qualifying frame
        if signal.face_count > 1:
            emit(EventKind.MULTIPLE_FACES, FaceCountDetails(signal.face_count))

        # 3. Gaze, only with exactly one face and keypoints
        if signal.face_count == 1 and signal.gaze_keypoints is not None and len(signal.gaze_keypoints) > 0:
            if self.gaze_heuristic.is_looking_away(signal.gaze_keypoints):
                elapsed = self.gaze_timer.poll(now)
                if elapsed is not None:
                    emit(EventKind.FOCUS_LOSS, DurationDetails(elapsed, self.gaze_timer.delay_seconds))
            else:
                self.gaze_timer.cancel()

        # 4. Disallowed objects, one event per matching detection
        for obj in self.object_filter.filter(signal.detected_objects):
            emit(EventKind.UNAUTHORIZED_OBJECT, ObjectDetails(obj.label, obj.confidence))

        return emitted

    def analyze_frames(self, signals: Iterable[Optional[FrameSignal]]) -> List[ViolationEvent]:
        """Feed several signals in order; returns every event emitted"""
        events: List[ViolationEvent] = []
        for signal in signals:
            events.extend(self.analyze_frame(signal))
        return events

    def end(self, recording: Optional[bytes] = None) -> ProctorSession:
        """
        End the active session.

        Pending timers are discarded without firing.

        Args:
            recording: Optional recorded media blob, referenced in the report

        Returns:
            The closed session

        Raises:
            NoActiveSessionError: if no session is active
        """
        session = self._session
        if session is None:
            raise NoActiveSessionError("No active proctoring session to end")

        self.face_timer.cancel()
        self.gaze_timer.cancel()

        ended_at = self.clock()
        reference = None
        if recording is not None:
            reference = RecordingReference.from_blob(recording, session.candidate_label, ended_at)

        session.close(ended_at, reference)
        self._session = None

        log_session_end(session.id, session.integrity_score, session.event_counts(), session.duration_seconds)
        return session
