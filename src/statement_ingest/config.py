"""
Configuration management (SSOT).

This module defines ALL configuration for the ingestion pipeline.
All config keys are defined here; no other module should invent config keys.

Key invariants:
- The provider credential comes from the environment or the config file, never
  from code. Without it the structured extraction path is unavailable and the
  pipeline degrades to the pattern extractor.
- Column role patterns are ordered: the first matching header wins.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class ProviderConfig:
    """Structured extraction provider (OpenAI-compatible chat completions).

    temperature and max_tokens are fixed low for determinism and cost control.
    max_input_chars is the per-document text budget; timeout_seconds is the
    caller-side deadline for the whole call.
    """

    api_key: str | None = None
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-3.5-turbo"
    temperature: float = 0.1
    max_tokens: int = 2000
    max_input_chars: int = 15000
    timeout_seconds: int = 120

    def has_credential(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.api_key and self.api_key.strip())


@dataclass
class ColumnRolePatterns:
    """Ordered header patterns per semantic column role.

    Patterns are case-insensitive regular expressions, searched anywhere in
    the header name.
    """

    date: list[str] = field(default_factory=lambda: [r"date"])
    description: list[str] = field(
        default_factory=lambda: [r"desc", r"memo", r"narrative", r"details", r"payee"]
    )
    amount: list[str] = field(default_factory=lambda: [r"amount", r"debit", r"credit"])
    type: list[str] = field(default_factory=lambda: [r"type"])
    debit: list[str] = field(
        default_factory=lambda: [r"debit.*amount", r"^debits?$", r"withdrawals?"]
    )
    credit: list[str] = field(
        default_factory=lambda: [r"credit.*amount", r"^credits?$", r"deposits?"]
    )


@dataclass
class ExtractionConfig:
    """Text extraction and pattern extraction settings."""

    # Any extracted document shorter than this (trimmed) is empty
    min_text_length: int = 10
    # Spreadsheets: only this worksheet is read
    worksheet_index: int = 0
    # Pattern extractor: shorter lines are skipped
    min_line_length: int = 10
    min_description_length: int = 3
    # Fixed confidence per extraction path
    structured_confidence: float = 0.85
    fallback_confidence: float = 0.6
    columns: ColumnRolePatterns = field(default_factory=ColumnRolePatterns)


@dataclass
class UploadConfig:
    """Limits applied when statement files are registered."""

    max_file_size: int = 10 * 1024 * 1024  # bytes


@dataclass
class Config:
    """Application configuration (SSOT)."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    state_db_path: Path = field(default_factory=lambda: Path("data/state.db"))

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if not self.provider.base_url:
            errors.append("provider.base_url is required")
        if not 0.0 <= self.provider.temperature <= 2.0:
            errors.append("provider.temperature must be between 0 and 2")
        if self.provider.max_tokens <= 0:
            errors.append("provider.max_tokens must be positive")
        if self.provider.max_input_chars <= 0:
            errors.append("provider.max_input_chars must be positive")
        if self.provider.timeout_seconds <= 0:
            errors.append("provider.timeout_seconds must be positive")

        if self.extraction.worksheet_index < 0:
            errors.append("extraction.worksheet_index must be >= 0")
        for name in ("structured_confidence", "fallback_confidence"):
            value = getattr(self.extraction, name)
            if not 0.0 <= value <= 1.0:
                errors.append(f"extraction.{name} must be between 0 and 1")

        if self.upload.max_file_size <= 0:
            errors.append("upload.max_file_size must be positive")

        return errors


def load_config(config_path: Path) -> Config:
    """
    Load configuration from YAML file.

    Environment variables can override config values:
    - OPENAI_API_KEY
    - OPENAI_BASE_URL
    - OPENAI_MODEL
    - INGEST_PROVIDER_TIMEOUT (seconds)
    - INGEST_STATE_DB
    """
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    # Provider config
    provider_data = data.get("provider", {})
    timeout = provider_data.get("timeout_seconds", 120)
    timeout_env = os.environ.get("INGEST_PROVIDER_TIMEOUT", "")
    if timeout_env:
        try:
            timeout = int(timeout_env)
        except ValueError:
            raise ConfigValidationError(
                f"INGEST_PROVIDER_TIMEOUT is not an integer: {timeout_env!r}"
            ) from None

    provider = ProviderConfig(
        api_key=os.environ.get("OPENAI_API_KEY", provider_data.get("api_key")),
        base_url=os.environ.get(
            "OPENAI_BASE_URL", provider_data.get("base_url", "https://api.openai.com/v1")
        ).rstrip("/"),
        model=os.environ.get("OPENAI_MODEL", provider_data.get("model", "gpt-3.5-turbo")),
        temperature=float(provider_data.get("temperature", 0.1)),
        max_tokens=int(provider_data.get("max_tokens", 2000)),
        max_input_chars=int(provider_data.get("max_input_chars", 15000)),
        timeout_seconds=int(timeout),
    )

    # Extraction config
    extraction_data = data.get("extraction", {})
    columns_data = extraction_data.get("columns", {})
    defaults = ColumnRolePatterns()
    columns = ColumnRolePatterns(
        date=columns_data.get("date", defaults.date),
        description=columns_data.get("description", defaults.description),
        amount=columns_data.get("amount", defaults.amount),
        type=columns_data.get("type", defaults.type),
        debit=columns_data.get("debit", defaults.debit),
        credit=columns_data.get("credit", defaults.credit),
    )

    extraction = ExtractionConfig(
        min_text_length=extraction_data.get("min_text_length", 10),
        worksheet_index=extraction_data.get("worksheet_index", 0),
        min_line_length=extraction_data.get("min_line_length", 10),
        min_description_length=extraction_data.get("min_description_length", 3),
        structured_confidence=extraction_data.get("structured_confidence", 0.85),
        fallback_confidence=extraction_data.get("fallback_confidence", 0.6),
        columns=columns,
    )

    # Upload limits
    upload_data = data.get("upload", {})
    upload = UploadConfig(
        max_file_size=int(upload_data.get("max_file_size", 10 * 1024 * 1024)),
    )

    # State DB
    state_db = os.environ.get("INGEST_STATE_DB", data.get("state_db_path", "data/state.db"))

    return Config(
        provider=provider,
        extraction=extraction,
        upload=upload,
        state_db_path=Path(state_db),
    )


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# Statement ingestion pipeline configuration
#
# The provider API key is normally supplied via OPENAI_API_KEY.
# Without a key, every document goes through the pattern extractor.

provider:
  api_key: null                            # Or set OPENAI_API_KEY
  base_url: "https://api.openai.com/v1"    # Any OpenAI-compatible endpoint
  model: "gpt-3.5-turbo"
  temperature: 0.1                         # Fixed low for repeatable output
  max_tokens: 2000
  max_input_chars: 15000                   # Statement text is truncated to this
  timeout_seconds: 120                     # Deadline for one provider call

extraction:
  min_text_length: 10                      # Shorter documents count as empty
  worksheet_index: 0                       # Spreadsheets: sheet to read
  min_line_length: 10                      # Pattern extractor: skip shorter lines
  min_description_length: 3
  structured_confidence: 0.85
  fallback_confidence: 0.6
  columns:                                 # Ordered header patterns (regex, case-insensitive)
    date: ["date"]
    description: ["desc", "memo", "narrative", "details", "payee"]
    amount: ["amount", "debit", "credit"]
    type: ["type"]
    debit: ["debit.*amount", "^debits?$", "withdrawals?"]
    credit: ["credit.*amount", "^credits?$", "deposits?"]

upload:
  max_file_size: 10485760                  # 10 MB per statement file

# State database path
state_db_path: "data/state.db"
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
