"""
Monitor Status - Live per-condition status for the monitoring UI

Only the most recent event of each kind matters here; repeated events
are not suppressed upstream, so the view reduces them.
"""

from typing import Dict, Iterable, Optional

from ..events import EventKind, ViolationEvent


def _latest(events: Iterable[ViolationEvent], kind: EventKind) -> Optional[ViolationEvent]:
    latest = None
    for event in events:
        if event.kind == kind:
            latest = event
    return latest


def _status(css_class: str, text: str) -> Dict[str, str]:
    return {"class": css_class, "text": text}


def build_monitor_status(events: Iterable[ViolationEvent]) -> Dict[str, Dict[str, str]]:
    """
    Summarize face, focus and object status from recent events.

    Returns:
        Dict with 'face', 'focus' and 'objects' entries, each {'class', 'text'}
    """
    events = list(events)

    if _latest(events, EventKind.FACE_MISSING):
        face = _status("status-danger", "No Face Detected")
    elif _latest(events, EventKind.MULTIPLE_FACES):
        face = _status("status-warning", "Multiple Faces")
    else:
        face = _status("status-good", "Face Detected")

    if _latest(events, EventKind.FOCUS_LOSS):
        focus = _status("status-warning", "Looking Away")
    else:
        focus = _status("status-good", "Focused")

    last_object = _latest(events, EventKind.UNAUTHORIZED_OBJECT)
    if last_object:
        objects = _status("status-danger", f"{last_object.details.label} Detected")
    else:
        objects = _status("status-good", "No Objects")

    return {"face": face, "focus": focus, "objects": objects}
