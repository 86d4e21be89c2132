"""
CLI main entry point.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from ..config import Config, create_default_config, load_config
from ..schemas.categories import to_display_category
from ..schemas.transaction import SourceDocument
from ..state_store import StateStore
from .pipeline import StatementPipeline

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="statement-ingest",
        description="Extract transactions from bank statement files",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # extract command
    extract_parser = subparsers.add_parser(
        "extract", help="Extract transactions from files without storing them"
    )
    extract_parser.add_argument("files", nargs="+", type=Path, help="Statement files")
    extract_parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )

    # upload command
    upload_parser = subparsers.add_parser("upload", help="Store statement files for processing")
    upload_parser.add_argument("files", nargs="+", type=Path, help="Statement files")

    # process command
    process_parser = subparsers.add_parser("process", help="Process stored statements by id")
    process_parser.add_argument("ids", nargs="+", type=int, help="Statement ids")

    # transactions command
    tx_parser = subparsers.add_parser("transactions", help="List stored transactions")
    tx_parser.add_argument(
        "--statement",
        type=int,
        help="Only transactions from this statement id",
    )

    # status command
    subparsers.add_parser("status", help="Show statement and transaction statistics")

    # init-config command
    subparsers.add_parser("init-config", help="Write a default config file")

    return parser


def cmd_extract(config: Config, files: list[Path], as_json: bool = False) -> int:
    """Run the pipeline on files directly and print the results."""
    documents = []
    for path in files:
        try:
            documents.append(SourceDocument.from_path(path))
        except (OSError, ValueError) as e:
            print(f"❌ {path}: {e}", file=sys.stderr)

    if not documents:
        print("No files to process")
        return 1

    with StatementPipeline(config) as pipeline:
        batch = pipeline.process_batch(documents)

    if as_json:
        print(
            json.dumps(
                {
                    "total_transactions": batch.total_transactions,
                    "results": [r.to_dict() for r in batch.results],
                },
                indent=2,
            )
        )
        return 0

    for result in batch.results:
        if result.succeeded:
            print(f"  📄 {result.document_ref}: {result.transaction_count} transactions ({result.strategy})")
            for c in result.candidates:
                print(
                    f"     {c.date.isoformat()}  {c.amount:>12}  {c.type.value:<8} "
                    f"{to_display_category(c.category):<22} {c.description}"
                )
        else:
            print(f"  ❌ {result.document_ref}: {result.error}")

    print(f"\n✓ Transactions: {batch.total_transactions}, Failed documents: {len(batch.failed)}")
    return 0


def cmd_upload(config: Config, files: list[Path]) -> int:
    """Register statement files in the state store."""
    store = StateStore(config.state_db_path, max_file_size=config.upload.max_file_size)
    uploaded = 0

    for path in files:
        try:
            document = SourceDocument.from_path(path)
        except (OSError, ValueError) as e:
            print(f"  ❌ {path}: {e}")
            continue

        try:
            statement_id = store.add_statement(
                filename=document.filename,
                content=document.content,
                file_type=document.format,
                mime_type=document.mime_type,
            )
        except ValueError as e:
            print(f"  ❌ {path}: {e}")
            continue
        print(f"  📄 [{statement_id}] {document.filename} ({document.size} bytes)")
        uploaded += 1

    print(f"\n✓ Uploaded: {uploaded}")
    return 0 if uploaded else 1


def cmd_process(config: Config, ids: list[int]) -> int:
    """Process stored statements and record their results."""
    print("📊 Processing statements...")

    store = StateStore(config.state_db_path)
    with StatementPipeline(config) as pipeline:
        batch = pipeline.process_stored(store, ids)

    for result in batch.results:
        if result.succeeded:
            print(f"  ✓ [{result.document_ref}] {result.transaction_count} transactions ({result.strategy})")
        else:
            print(f"  ❌ [{result.document_ref}] {result.error}")
    for missing in batch.missing:
        print(f"  ⚠️  [{missing}] Not found")

    print(f"\n✓ Processed {len(batch.results)} statements, {batch.total_transactions} transactions")
    return 0 if batch.results else 1


def cmd_transactions(config: Config, statement_id: int | None = None) -> int:
    """List stored transactions."""
    store = StateStore(config.state_db_path)
    records = store.list_transactions(statement_id)

    if not records:
        print("No transactions")
        return 0

    for tx in records:
        print(
            f"  {tx.date}  {tx.amount:>12}  {tx.type:<8} "
            f"{to_display_category(tx.category):<22} {tx.description}"
        )
    print(f"\n{len(records)} transactions")
    return 0


def cmd_status(config: Config) -> int:
    """Show pipeline status."""
    store = StateStore(config.state_db_path)
    stats = store.get_stats()

    print("\n📊 Pipeline Status")
    print("=" * 40)
    print(f"  Statements total:       {stats['statements_total']}")
    print(f"  Pending:                {stats['statements_pending']}")
    print(f"  Completed:              {stats['statements_completed']}")
    print(f"  Failed:                 {stats['statements_failed']}")
    print(f"  Transactions total:     {stats['transactions_total']}")
    print()

    return 0


def cmd_init_config(config_path: Path) -> int:
    """Write the default configuration file."""
    if config_path.exists():
        print(f"⚠️  {config_path} already exists")
        return 1
    create_default_config(config_path)
    print(f"✓ Wrote {config_path}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init-config":
        return cmd_init_config(parsed.config)

    # Load config
    try:
        config = load_config(parsed.config)
    except Exception as e:
        print(f"❌ Failed to load config: {e}")
        return 1

    errors = config.validate()
    if errors:
        print("❌ Invalid configuration:")
        for error in errors:
            print(f"   - {error}")
        return 1

    # Route to command
    if parsed.command == "extract":
        return cmd_extract(config, parsed.files, parsed.json)
    elif parsed.command == "upload":
        return cmd_upload(config, parsed.files)
    elif parsed.command == "process":
        return cmd_process(config, parsed.ids)
    elif parsed.command == "transactions":
        return cmd_transactions(config, parsed.statement)
    elif parsed.command == "status":
        return cmd_status(config)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
