"""
Rule-based classification of transaction descriptions.

Provides:
- categorize_description: ordered keyword rules -> canonical category
- extract_merchant: ordered regex heuristics -> merchant name
"""

from .merchant import extract_merchant
from .rules import CATEGORY_RULES, categorize_description

__all__ = [
    "CATEGORY_RULES",
    "categorize_description",
    "extract_merchant",
]
