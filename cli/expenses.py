#!/usr/bin/env python3

import sys
from pathlib import Path

from errors import ImporterError
from ingestion import get_available_formats
from logger import get_logger

logger = get_logger()


def _parse(args, services):
    csv_path = Path(args.csv_file)
    if not csv_path.exists():
        logger.error(f"File not found: {args.csv_file}")
        sys.exit(1)

    try:
        return services.imports.parse_export(csv_path.read_bytes(), args.format)
    except ImporterError as e:
        logger.error(f"Error parsing {csv_path.name}: {e.message}")
        sys.exit(1)


def cmd_preview(args, services):
    """Parse a CSV export and show the records with pre-filled categories."""
    records = _parse(args, services)

    logger.info(f"{'Date':<10}  {'Amount':>10}  {'Category':<12}  Description")
    logger.info("-" * 80)
    for record in records:
        if record.is_categorized:
            category = f"{record.macro_category}/{record.micro_category}"
        else:
            category = "?"
        logger.info(
            f"{record.date:<10}  {record.amount:>10}  {category:<12}  {record.description[:40]}"
        )

    uncategorized = [r for r in records if not r.is_categorized]
    logger.info(f"\nParsed {len(records)} records, {len(uncategorized)} need a category")
    for label in sorted({r.merchant_category for r in uncategorized}):
        logger.info(f"  unbound merchant category: {label!r}")


def cmd_import(args, services):
    """Parse a CSV export and save it. Every record must have a binding."""
    records = _parse(args, services)

    uncategorized = [r for r in records if not r.is_categorized]
    if uncategorized:
        labels = sorted({r.merchant_category for r in uncategorized})
        logger.error(
            f"{len(uncategorized)} record(s) have no category binding: "
            + ", ".join(repr(label) for label in labels)
        )
        logger.info("Use 'python -m cli bindings add' to bind them, then retry.")
        sys.exit(1)

    try:
        summary = services.imports.submit([r.to_dict() for r in records])
    except ImporterError as e:
        logger.error(e.message)
        sys.exit(1)

    logger.info(f"✓ {summary.message}")


def cmd_counters(args, services):
    """Show the next ID for each record kind."""
    counters = services.counters.find_all()
    if not counters:
        logger.info("No records have been imported yet.")
        return
    for counter in counters:
        logger.info(f"{counter.kind}: next id {counter.seq}")


def setup_parser(subparsers):
    """Setup expenses subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "expenses",
        help="Import expenses and incomes",
        description="Parse bank exports and save them as expenses and incomes",
    )

    expenses_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available expense commands",
        dest="subcommand",
        required=True,
    )

    for name, func, help_text in (
        ("preview", cmd_preview, "Parse a CSV export without saving"),
        ("import", cmd_import, "Parse a CSV export and save it"),
    ):
        sub = expenses_subparsers.add_parser(name, help=help_text)
        sub.add_argument("csv_file", help="Path to the semicolon-delimited export")
        sub.add_argument(
            "--format",
            choices=get_available_formats(),
            help="Skip format detection",
        )
        sub.set_defaults(func=func)

    counters_parser = expenses_subparsers.add_parser(
        "counters", help="Show ID counters"
    )
    counters_parser.set_defaults(func=cmd_counters)
