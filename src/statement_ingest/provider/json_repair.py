"""Recovery of JSON arrays from near-JSON provider output.

The provider is asked for a bare JSON array but regularly wraps it in code
fences, surrounds it with prose, or leaves trailing commas. Decoding runs a
fixed cascade of stages, each a pure function returning a tagged outcome:

1. strip code fences, parse the whole text
2. parse the first "[" ... last "]" span
3. drop trailing commas before "}" / "]" in that span, parse again

Content is only ever handed to json.loads; nothing is evaluated.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


class DecodeStatus(str, Enum):
    """Outcome of one decode stage or of the whole cascade."""

    OK = "ok"
    NEEDS_REPAIR = "needs_repair"
    UNRECOVERABLE = "unrecoverable"


@dataclass
class DecodeOutcome:
    """Tagged decode result. items is set only when status is OK."""

    status: DecodeStatus
    items: list[Any] = field(default_factory=list)
    stage: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == DecodeStatus.OK


def strip_code_fences(content: str) -> str:
    """Remove markdown code fences (```json ... ```) anywhere in the text."""
    return FENCE_RE.sub("", content).strip()


def _loads_array(text: str, stage: int) -> DecodeOutcome:
    try:
        data = json.loads(text, parse_float=Decimal)
    except (json.JSONDecodeError, RecursionError) as e:
        return DecodeOutcome(DecodeStatus.NEEDS_REPAIR, stage=stage, error=str(e))

    if not isinstance(data, list):
        return DecodeOutcome(
            DecodeStatus.NEEDS_REPAIR,
            stage=stage,
            error=f"Expected a JSON array, got {type(data).__name__}",
        )
    return DecodeOutcome(DecodeStatus.OK, items=data, stage=stage)


def _array_span(content: str) -> str | None:
    start = content.find("[")
    end = content.rfind("]")
    if start == -1 or end <= start:
        return None
    return content[start : end + 1]


def parse_direct(content: str) -> DecodeOutcome:
    """Stage 1: the whole (fence-stripped) text is the array."""
    return _loads_array(content, stage=1)


def parse_array_span(content: str) -> DecodeOutcome:
    """Stage 2: the array is embedded in surrounding text."""
    span = _array_span(content)
    if span is None:
        return DecodeOutcome(DecodeStatus.NEEDS_REPAIR, stage=2, error="No JSON array found")
    return _loads_array(span, stage=2)


def parse_repaired_span(content: str) -> DecodeOutcome:
    """Stage 3: the embedded array has trailing commas."""
    span = _array_span(content)
    if span is None:
        return DecodeOutcome(DecodeStatus.NEEDS_REPAIR, stage=3, error="No JSON array found")
    return _loads_array(TRAILING_COMMA_RE.sub(r"\1", span), stage=3)


DECODE_STAGES: tuple[Callable[[str], DecodeOutcome], ...] = (
    parse_direct,
    parse_array_span,
    parse_repaired_span,
)


def decode_transaction_array(raw: str | None) -> DecodeOutcome:
    """Run the decode cascade over raw provider output.

    Args:
        raw: Raw response text.

    Returns:
        The first OK outcome, or UNRECOVERABLE carrying the last error.
    """
    if not raw or not raw.strip():
        return DecodeOutcome(DecodeStatus.UNRECOVERABLE, error="Empty response")

    content = strip_code_fences(raw)
    last = DecodeOutcome(DecodeStatus.UNRECOVERABLE, error="No decode stage ran")
    for stage in DECODE_STAGES:
        last = stage(content)
        if last.ok:
            return last

    return DecodeOutcome(DecodeStatus.UNRECOVERABLE, stage=last.stage, error=last.error)
