"""
Merchant name inference from transaction descriptions.
"""

import re

MERCHANT_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Capital run followed by digits: "SHELL OIL 57442"
    re.compile(r"^([A-Z\s&]+)\s+\d+"),
    # Capitalized leading phrase, up to the first number or end of line
    re.compile(r"^([A-Z][A-Za-z\s&]+?)(?:\s+\d|\s*$)"),
    # First run of ALL-CAPS words anywhere
    re.compile(r"([A-Z]{2,}(?:\s+[A-Z]{2,})*)"),
)

MAX_FALLBACK_LENGTH = 20


def extract_merchant(description: str) -> str:
    """
    Guess the merchant name from a description.

    The first pattern capturing more than two characters wins. Otherwise the
    first three words are used, truncated to 20 characters with an ellipsis.
    """
    desc = description.strip()

    for pattern in MERCHANT_PATTERNS:
        match = pattern.search(desc)
        if match and match.group(1) and len(match.group(1)) > 2:
            return match.group(1).strip()

    words = " ".join(desc.split(" ")[:3])
    if len(words) > MAX_FALLBACK_LENGTH:
        return words[:MAX_FALLBACK_LENGTH] + "..."
    return words
