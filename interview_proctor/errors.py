"""
Proctoring Errors - Exceptions raised by the session engine
"""


class ProctoringError(Exception):
    """Base class for proctoring engine errors"""


class InvalidInputError(ProctoringError):
    """Raised when a caller passes an unusable value (e.g. an empty candidate label)"""


class SessionAlreadyActiveError(ProctoringError):
    """Raised when a session is started while another one is still active"""


class NoActiveSessionError(ProctoringError):
    """Raised when a session is ended while the engine is idle"""


class SessionNotClosedError(ProctoringError):
    """Raised when a report is requested for a session that has not been closed"""


class LedgerFrozenError(ProctoringError):
    """Raised when an event is appended to the ledger of a closed session"""
