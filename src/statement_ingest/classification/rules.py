"""
Keyword categorization rules.

Rules are tried in order and the first category with a keyword contained in
the lowercased description wins. Order matters: "deposit" appears under both
income and transfer, and income is checked first.
"""

from ..schemas.categories import DEFAULT_CATEGORY

CATEGORY_RULES: tuple[tuple[str, frozenset[str]], ...] = (
    (
        "food",
        frozenset(
            {
                "restaurant", "food", "grocery", "starbucks", "mcdonald", "pizza",
                "cafe", "dining", "uber eats", "doordash", "grubhub",
            }
        ),
    ),
    (
        "transportation",
        frozenset({"gas", "fuel", "uber", "lyft", "taxi", "metro", "bus", "parking", "toll"}),
    ),
    (
        "utilities",
        frozenset(
            {
                "electric", "water", "internet", "phone", "cable", "utility",
                "verizon", "at&t", "comcast",
            }
        ),
    ),
    (
        "entertainment",
        frozenset(
            {
                "netflix", "spotify", "movie", "theater", "game", "entertainment",
                "amazon prime", "hulu", "disney",
            }
        ),
    ),
    (
        "shopping",
        frozenset({"amazon", "walmart", "target", "store", "shop", "purchase", "retail", "mall"}),
    ),
    (
        "healthcare",
        frozenset(
            {"medical", "doctor", "pharmacy", "hospital", "health", "cvs", "walgreens", "clinic"}
        ),
    ),
    (
        "housing",
        frozenset({"rent", "mortgage", "property", "home", "apartment", "housing"}),
    ),
    (
        "income",
        frozenset({"salary", "payroll", "deposit", "income", "payment received", "refund"}),
    ),
    (
        "transfer",
        frozenset({"transfer", "atm", "withdrawal", "deposit", "wire"}),
    ),
)


def categorize_description(description: str) -> str:
    """Return the first matching category for a description, else "other"."""
    desc = description.lower()
    for category, keywords in CATEGORY_RULES:
        if any(keyword in desc for keyword in keywords):
            return category
    return DEFAULT_CATEGORY
