"""
Proctoring Logger - Logs session lifecycle and violation events
"""

import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


def log_proctor_event(
    session_id: str,
    event_type: str,
    details: Optional[Dict[str, Any]] = None,
    level: str = "info"
):
    """
    Log a proctoring event.

    Args:
        session_id: Proctoring session ID
        event_type: Type of event (session_start, violation, session_end, ...)
        details: Optional event details
        level: Log level (debug, info, warning, error)
    """
    message = f"[PROCTOR] session={session_id} event={event_type}"

    if details:
        detail_str = " ".join(f"{k}={v}" for k, v in details.items())
        message += f" {detail_str}"

    if level == "debug":
        logger.debug(message)
    elif level == "warning":
        logger.warning(message)
    elif level == "error":
        logger.error(message)
    else:
        logger.info(message)


def log_session_start(session_id: str, candidate_label: str):
    """Log session start event"""
    log_proctor_event(
        session_id=session_id,
        event_type="session_start",
        details={"candidate": candidate_label}
    )


def log_session_end(session_id: str, integrity_score: int, event_counts: Dict[str, int], duration_seconds: float):
    """Log session end event"""
    counts = ",".join(f"{kind}:{count}" for kind, count in sorted(event_counts.items()))
    log_proctor_event(
        session_id=session_id,
        event_type="session_end",
        details={
            "integrity_score": integrity_score,
            "violations": counts or "none",
            "duration_seconds": round(duration_seconds, 2)
        }
    )


def log_violation(session_id: str, kind: str, severity: str, score: int):
    """Log an accepted violation and the score after it"""
    log_proctor_event(
        session_id=session_id,
        event_type="violation",
        details={
            "kind": kind,
            "severity": severity,
            "score": score
        },
        level="warning"
    )
