"""
Confidence and normalization module.

Clamps confidences and enforces candidate invariants.
Decides the terminal status of each document.
"""

from .normalizer import CandidateNormalizer, ConfidenceBounds

__all__ = [
    "CandidateNormalizer",
    "ConfidenceBounds",
]
