"""Jaccard similarity over fingerprint sets and the verdict bands built on it."""

from __future__ import annotations

from typing import AbstractSet

from .models import Verdict

DEFAULT_THRESHOLD = 70.0
DEFAULT_REVIEW_MARGIN = 15.0


def jaccard_similarity(a: AbstractSet[int], b: AbstractSet[int]) -> float:
    """Percentage of shared fingerprints, in ``[0, 100]``.

    Two empty sets are identical (100); one empty set shares nothing (0).
    """
    if not a and not b:
        return 100.0
    if not a or not b:
        return 0.0
    return 100.0 * len(a & b) / len(a | b)


def is_flagged(score: float, threshold: float = DEFAULT_THRESHOLD) -> bool:
    return score >= threshold


def classify(
    score: float,
    threshold: float = DEFAULT_THRESHOLD,
    review_margin: float = DEFAULT_REVIEW_MARGIN,
) -> Verdict:
    """Map a score onto a verdict band."""
    if is_flagged(score, threshold):
        return Verdict.HIGH_PLAGIARISM if score >= 100.0 else Verdict.SUSPICIOUS
    if score >= threshold - review_margin:
        return Verdict.NEEDS_REVIEW
    return Verdict.likely_clean
