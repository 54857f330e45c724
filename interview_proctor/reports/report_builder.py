"""
Report Builder - Final report of a closed proctoring session

The report is a pure projection of the closed session: building it twice
gives equal results, and nothing on the session is touched.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, Tuple, Union

from ..errors import SessionNotClosedError
from ..events import EventKind, Severity, ViolationEvent
from ..recording import RecordingReference
from ..scoring import get_score_band
from ..session import ProctorSession
from ..utils.filenames import report_filename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionReport:
    """Aggregate of a closed session"""
    session_id: str
    candidate: str
    started_at: datetime
    ended_at: datetime
    duration_seconds: float
    integrity_score: int
    score_band: str
    total_violations: int
    violations_by_type: Dict[str, int]
    violations_by_severity: Dict[str, int]
    score_timeline: Tuple[int, ...]
    events: Tuple[ViolationEvent, ...]
    recording: Optional[RecordingReference] = None

    @property
    def duration_display(self) -> str:
        """Duration as MM:SS"""
        total = int(self.duration_seconds)
        minutes, seconds = divmod(total, 60)
        return f"{minutes:02d}:{seconds:02d}"

    def to_dict(self) -> Dict[str, Any]:
        """Flat, JSON-serializable document"""
        return {
            "session_id": self.session_id,
            "candidate": self.candidate,
            "start_time": self.started_at.isoformat(),
            "end_time": self.ended_at.isoformat(),
            "duration": self.duration_display,
            "duration_seconds": round(self.duration_seconds, 3),
            "integrity_score": self.integrity_score,
            "score_band": self.score_band,
            "total_violations": self.total_violations,
            "violations_by_type": dict(self.violations_by_type),
            "violations_by_severity": dict(self.violations_by_severity),
            "score_timeline": list(self.score_timeline),
            "events": [event.to_dict() for event in self.events],
            "recording": self.recording.to_dict() if self.recording else None,
        }


def build_report(session: ProctorSession) -> SessionReport:
    """
    Build the report for a closed session.

    Raises:
        SessionNotClosedError: if the session is still active
    """
    if not session.is_closed:
        raise SessionNotClosedError(f"Session {session.id} is not closed ({session.state.value})")

    by_kind = session.event_counts()
    by_severity = session.severity_counts()
    events = session.events

    return SessionReport(
        session_id=session.id,
        candidate=session.candidate_label,
        started_at=session.started_at,
        ended_at=session.ended_at,
        duration_seconds=session.duration_seconds,
        integrity_score=session.integrity_score,
        score_band=get_score_band(session.integrity_score),
        total_violations=len(events),
        violations_by_type={kind.value: by_kind.get(kind.value, 0) for kind in EventKind},
        violations_by_severity={
            severity.value: by_severity.get(severity.value, 0)
            for severity in (Severity.HIGH, Severity.MEDIUM, Severity.LOW)
        },
        score_timeline=session.score_history,
        events=events,
        recording=session.recording,
    )


def export_report(report: SessionReport, directory: Union[str, Path]) -> Path:
    """
    Write the report as JSON.

    Args:
        report: Report to export
        directory: Target directory (created if missing)

    Returns:
        Path of the written file
    """
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)

    path = target_dir / report_filename(report.candidate, report.ended_at)
    path.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")

    logger.info(f"Exported report for session {report.session_id} to {path}")
    return path
