"""
CLI runner module.

Provides commands:
- extract: Run the pipeline on files directly
- upload: Store statement files
- process: Batch-process stored statements
- transactions: List stored transactions
- status: Store statistics
"""

from .main import create_cli, main
from .pipeline import StatementPipeline

__all__ = [
    "StatementPipeline",
    "create_cli",
    "main",
]
