"""
Interview Proctor

Monitors a live interview/exam feed and keeps an auditable integrity record:
- Face absence (debounced)
- Gaze diversion (debounced)
- Multiple faces in frame
- Disallowed objects

Produces violation events, an Integrity Score (0-100) and a session report.
"""

from .engine import ProctoringEngine
from .errors import (
    ProctoringError,
    InvalidInputError,
    SessionAlreadyActiveError,
    NoActiveSessionError,
    SessionNotClosedError,
    LedgerFrozenError,
)
from .events import EventKind, Severity, ViolationEvent
from .session import ProctorSession, SessionState
from .signals import DetectedObject, FrameSignal

__all__ = [
    "ProctoringEngine",
    "ProctorSession",
    "SessionState",
    "FrameSignal",
    "DetectedObject",
    "ViolationEvent",
    "EventKind",
    "Severity",
    "ProctoringError",
    "InvalidInputError",
    "SessionAlreadyActiveError",
    "NoActiveSessionError",
    "SessionNotClosedError",
    "LedgerFrozenError",
]
