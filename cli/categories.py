#!/usr/bin/env python3

import sys
from pathlib import Path

from errors import ImporterError
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List macro categories with their micro categories."""
    macros = services.categories.find_all_macro()
    micros = services.categories.find_all_micro()

    if not macros:
        logger.info("No categories found. Use 'python -m cli categories seed FILE' to load them.")
        return

    children = {}
    for micro in micros:
        children.setdefault(micro.macro_category_id, []).append(micro)

    for macro in macros:
        logger.info(f"[{macro.id}] {macro.name}")
        for micro in children.get(macro.id, []):
            logger.info(f"    [{micro.id}] {micro.name}")

    logger.info(f"\nTotal: {len(macros)} macro, {len(micros)} micro categories")


def cmd_seed(args, services):
    """Replace all categories with the taxonomy in a YAML file."""
    path = Path(args.yaml_file)
    if not path.exists():
        logger.error(f"File not found: {args.yaml_file}")
        sys.exit(1)

    try:
        with open(path, "r", encoding="utf-8") as f:
            count = services.categories.seed(f)
    except ImporterError as e:
        logger.error(e.message)
        sys.exit(1)

    logger.info(f"✓ Loaded {count} categories from {path.name}")


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage categories",
        description="List and seed macro/micro categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    list_parser = categories_subparsers.add_parser("list", help="List all categories")
    list_parser.set_defaults(func=cmd_list)

    seed_parser = categories_subparsers.add_parser(
        "seed", help="Load categories from a YAML file (replaces existing ones)"
    )
    seed_parser.add_argument("yaml_file", help="Path to the YAML taxonomy")
    seed_parser.set_defaults(func=cmd_seed)
