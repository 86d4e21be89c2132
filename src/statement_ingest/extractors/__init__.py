"""
Transaction extractors.

Provides:
- StructuredExtractor: provider-assisted extraction (primary)
- PatternExtractor: regex cascade (fallback)
- ExtractorRouter: primary -> fallback strategy chain
"""

from .base import BaseExtractor
from .pattern_extractor import (
    LINE_MATCHERS,
    LineMatch,
    PatternExtractor,
    match_line,
    parse_amount,
    parse_statement_date,
)
from .router import ExtractorRouter
from .structured_extractor import StructuredExtractor, build_candidate, resolve_type

__all__ = [
    "BaseExtractor",
    "ExtractorRouter",
    "LINE_MATCHERS",
    "LineMatch",
    "PatternExtractor",
    "StructuredExtractor",
    "build_candidate",
    "match_line",
    "parse_amount",
    "parse_statement_date",
    "resolve_type",
]
