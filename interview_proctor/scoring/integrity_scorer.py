"""
Integrity Scorer - Folds violation severities into the integrity score
"""

import logging
from typing import Dict, Optional

from ..events import Severity

logger = logging.getLogger(__name__)


INITIAL_SCORE = 100
MIN_SCORE = 0


class IntegrityScorer:
    """
    Deducts a fixed penalty per violation.

    Formula (applied once per event, never reversed):
        score = max(0, score - penalty(severity))

    with penalty(high)=10, penalty(medium)=5, penalty(low)=2.
    """

    PENALTIES: Dict[Severity, int] = {
        Severity.HIGH: 10,
        Severity.MEDIUM: 5,
        Severity.LOW: 2,
    }

    # Lower bounds of the score bands
    BANDS = (
        (80, "excellent"),
        (60, "good"),
    )

    def __init__(self, penalties: Optional[Dict[Severity, int]] = None):
        """
        Initialize scorer with optional custom penalties.

        Args:
            penalties: Optional dict overriding default penalties

        Raises:
            ValueError: if a penalty is negative (scores never increase)
        """
        self.penalties = self.PENALTIES.copy()
        if penalties:
            self.penalties.update(penalties)

        for severity, penalty in self.penalties.items():
            if penalty < 0:
                raise ValueError(f"Penalty for {severity.value} must be >= 0, got {penalty}")

    def deduct(self, current_score: int, severity: Severity) -> int:
        """
        Apply one violation to the score.

        Args:
            current_score: Score before the violation
            severity: Severity of the violation

        Returns:
            New score, clamped to 0-100
        """
        penalty = self.penalties[Severity(severity)]
        new_score = max(MIN_SCORE, min(INITIAL_SCORE, current_score - penalty))

        logger.debug(f"Deducted {penalty} for {Severity(severity).value}: {current_score} -> {new_score}")
        return new_score

    def get_band(self, score: int) -> str:
        """
        Convert score to a display band.

        Returns:
            'excellent' (>= 80), 'good' (>= 60) or 'poor'
        """
        for lower_bound, band in self.BANDS:
            if score >= lower_bound:
                return band
        return "poor"


_default_scorer = IntegrityScorer()


def deduct(current_score: int, severity: Severity) -> int:
    """Apply the default penalty table to a score"""
    return _default_scorer.deduct(current_score, severity)


def get_score_band(score: int) -> str:
    return _default_scorer.get_band(score)
