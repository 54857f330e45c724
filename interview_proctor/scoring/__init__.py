"""Scoring modules"""

from .integrity_scorer import IntegrityScorer, deduct, get_score_band, INITIAL_SCORE

__all__ = ["IntegrityScorer", "deduct", "get_score_band", "INITIAL_SCORE"]
