"""
Debounce Timers - Polled countdowns for sustained conditions

A timer only fires when its condition has held on every poll until the
deadline. Deadlines are compared against the caller's timestamp on each
poll; nothing is scheduled in the background.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class DebounceTimer:
    """
    Countdown for one monitored condition (face absence, gaze away).

    States:
        idle     - pending=False, tripped=False
        counting - pending=True, deadline set
        tripped  - fired once; stays quiet until the condition clears
    """

    name: str
    delay_seconds: float
    pending: bool = False
    started_at: Optional[datetime] = None
    deadline: Optional[datetime] = None
    tripped: bool = False

    def poll(self, now: datetime) -> Optional[float]:
        """
        Register that the condition holds at `now`.

        Arms the countdown if idle. Returns the elapsed duration in seconds
        when the deadline has been reached, otherwise None.
        """
        if self.tripped:
            return None

        if not self.pending:
            self.pending = True
            self.started_at = now
            self.deadline = now + timedelta(seconds=self.delay_seconds)
            logger.debug(f"Timer {self.name} armed, deadline={self.deadline.isoformat()}")
            return None

        if now < self.deadline:
            return None

        elapsed = (now - self.started_at).total_seconds()
        self.pending = False
        self.deadline = None
        self.tripped = True
        logger.debug(f"Timer {self.name} fired after {elapsed:.2f}s")
        return elapsed

    def cancel(self):
        """Condition cleared: drop any countdown and re-arm for the next occurrence"""
        if self.pending:
            logger.debug(f"Timer {self.name} cancelled")
        self.pending = False
        self.started_at = None
        self.deadline = None
        self.tripped = False

    reset = cancel
