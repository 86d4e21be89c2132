"""Prompt template for provider-assisted transaction extraction.

The prompt is versioned so that stored results can be traced back to the
contract they were extracted under.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from statement_ingest.schemas.categories import CATEGORY_DESCRIPTIONS, PROVIDER_CATEGORIES

# v1.0: date/description/amount/type/category/merchant array contract
PROMPT_VERSION = "v1.0"


def _category_lines() -> str:
    return "\n".join(
        f'  * "{name}" - {CATEGORY_DESCRIPTIONS[name]}' for name in PROVIDER_CATEGORIES
    )


def _build_system_prompt() -> str:
    return f"""You are an expert financial transaction extractor and categorizer.
Extract every transaction from the bank statement and return them as a JSON array.

Each transaction must have:
- date: YYYY-MM-DD format
- description: clean transaction description
- amount: number (positive for income/deposits, negative for expenses/withdrawals)
- type: "income", "expense", or "transfer"
- category: one of these categories:
{_category_lines()}
- merchant: merchant/company name if identifiable, otherwise ""

Example:
[
  {{
    "date": "2024-01-15",
    "description": "Salary Deposit - ABC Company",
    "amount": 5000.00,
    "type": "income",
    "category": "income",
    "merchant": "ABC Company"
  }},
  {{
    "date": "2024-01-16",
    "description": "Walmart Grocery Purchase",
    "amount": -150.75,
    "type": "expense",
    "category": "food",
    "merchant": "Walmart"
  }}
]

Return ONLY the JSON array, no other text."""


@dataclass
class ExtractionPrompt:
    """Prompt template for statement transaction extraction.

    Attributes:
        version: Prompt version.
        system_prompt: Fixed extraction contract (schema, vocabulary, example).
        user_template: Template wrapping the statement text.
    """

    version: str = PROMPT_VERSION
    system_prompt: str = field(default_factory=_build_system_prompt)
    user_template: str = "Extract transactions from this bank statement:\n\n{text}"

    def format_user_message(self, text: str) -> str:
        """Wrap (already truncated) statement text in the user message."""
        return self.user_template.format(text=text)
