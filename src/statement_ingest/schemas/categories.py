"""
Category vocabularies.

Two vocabularies exist:
- PROVIDER_CATEGORIES (11 values): canonical. Every TransactionCandidate
  carries one of these, from either extraction path.
- DISPLAY_CATEGORIES (15 values): labels offered for manual entry and
  display. They map onto the canonical vocabulary through
  DISPLAY_TO_CANONICAL; values with no canonical counterpart map to "other".
"""

DEFAULT_CATEGORY = "other"

PROVIDER_CATEGORIES: tuple[str, ...] = (
    "food",
    "transportation",
    "utilities",
    "entertainment",
    "shopping",
    "healthcare",
    "education",
    "housing",
    "income",
    "transfer",
    "other",
)

# Short guidance per canonical category, used in the provider prompt
CATEGORY_DESCRIPTIONS: dict[str, str] = {
    "food": "restaurants, groceries, food delivery",
    "transportation": "gas, ride sharing, public transport, car payments",
    "utilities": "electricity, water, internet, phone bills",
    "entertainment": "movies, games, streaming services",
    "shopping": "retail purchases, clothing, electronics",
    "healthcare": "medical bills, pharmacy, insurance",
    "education": "tuition, books, courses",
    "housing": "rent, mortgage, home maintenance",
    "income": "salary, freelance, business income",
    "transfer": "bank transfers, ATM withdrawals",
    "other": "anything that doesn't fit the categories above",
}

DISPLAY_CATEGORIES: tuple[str, ...] = (
    "Food & Dining",
    "Shopping",
    "Housing",
    "Transportation",
    "Entertainment",
    "Healthcare",
    "Education",
    "Personal Care",
    "Travel",
    "Utilities",
    "Insurance",
    "Investments",
    "Income",
    "Transfer",
    "Other",
)

DISPLAY_TO_CANONICAL: dict[str, str] = {
    "Food & Dining": "food",
    "Shopping": "shopping",
    "Housing": "housing",
    "Transportation": "transportation",
    "Entertainment": "entertainment",
    "Healthcare": "healthcare",
    "Education": "education",
    "Personal Care": "other",
    "Travel": "transportation",
    "Utilities": "utilities",
    "Insurance": "other",
    "Investments": "other",
    "Income": "income",
    "Transfer": "transfer",
    "Other": "other",
}

CANONICAL_TO_DISPLAY: dict[str, str] = {
    "food": "Food & Dining",
    "transportation": "Transportation",
    "utilities": "Utilities",
    "entertainment": "Entertainment",
    "shopping": "Shopping",
    "healthcare": "Healthcare",
    "education": "Education",
    "housing": "Housing",
    "income": "Income",
    "transfer": "Transfer",
    "other": "Other",
}


def is_known_category(value: object) -> bool:
    return isinstance(value, str) and value in PROVIDER_CATEGORIES


def coerce_category(value: object) -> str:
    """Return value if it is a canonical category, else the default."""
    if is_known_category(value):
        return value  # type: ignore[return-value]
    return DEFAULT_CATEGORY


def to_display_category(category: str) -> str:
    """Map a canonical category to its display label."""
    return CANONICAL_TO_DISPLAY.get(category, CANONICAL_TO_DISPLAY[DEFAULT_CATEGORY])


def from_display_category(label: str) -> str:
    """Map a display label (or a canonical value) to the canonical vocabulary."""
    if label in DISPLAY_TO_CANONICAL:
        return DISPLAY_TO_CANONICAL[label]
    return coerce_category(label.strip().lower() if isinstance(label, str) else label)
