#!/usr/bin/env python3

import json
import sys
from pathlib import Path

from errors import ImporterError
from logger import get_logger
from models.binding import CategoryBinding

logger = get_logger()


def cmd_list(args, services):
    """List all category bindings."""
    bindings = services.bindings.find_all()

    if not bindings:
        logger.info("No category bindings found.")
        return

    for binding in bindings:
        micro = binding.micro_category if binding.micro_category is not None else "-"
        logger.info(
            f"{binding.merchant_category!r} -> macro {binding.macro_category}, micro {micro}"
        )

    logger.info(f"\nTotal bindings: {len(bindings)}")


def cmd_add(args, services):
    """Bind a merchant category to a macro (and optionally micro) category."""
    if services.categories.find_macro(args.macro) is None:
        logger.error(f"Macro category with ID {args.macro} not found.")
        sys.exit(1)
    if args.micro is not None:
        micro = services.categories.find_micro(args.micro)
        if micro is None or micro.macro_category_id != args.macro:
            logger.error(f"Micro category {args.micro} does not belong to macro {args.macro}.")
            sys.exit(1)

    binding = CategoryBinding(
        merchant_category=args.merchant_category,
        macro_category=args.macro,
        micro_category=args.micro,
    )
    try:
        services.bindings.add(binding)
    except ImporterError as e:
        logger.error(e.message)
        sys.exit(1)

    logger.info(f"✓ Bound {binding.merchant_category!r}")


def cmd_delete(args, services):
    """Delete the binding for a merchant category."""
    if not services.bindings.delete(args.merchant_category):
        logger.error(f"No binding for merchant category {args.merchant_category!r}.")
        sys.exit(1)
    logger.info(f"✓ Deleted binding for {args.merchant_category!r}")


def cmd_import(args, services):
    """Replace all bindings with the contents of a JSON file."""
    path = Path(args.json_file)
    if not path.exists():
        logger.error(f"File not found: {args.json_file}")
        sys.exit(1)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path.name}: {e}")
        sys.exit(1)

    # Accept both a bare array and the API's {"bindings": [...]} shape
    if isinstance(data, dict):
        data = data.get("bindings")
    if not isinstance(data, list):
        logger.error("Expected a JSON array of bindings.")
        sys.exit(1)

    try:
        stored = services.bindings.replace_all(data)
    except ImporterError as e:
        logger.error(e.message)
        sys.exit(1)

    logger.info(f"✓ Replaced bindings with {len(stored)} entries")


def setup_parser(subparsers):
    """Setup bindings subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "bindings",
        help="Manage merchant category bindings",
        description="Remembered merchant category -> category assignments",
    )

    bindings_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available binding commands",
        dest="subcommand",
        required=True,
    )

    list_parser = bindings_subparsers.add_parser("list", help="List all bindings")
    list_parser.set_defaults(func=cmd_list)

    add_parser = bindings_subparsers.add_parser("add", help="Add a binding")
    add_parser.add_argument("merchant_category", help="Label as it appears in exports")
    add_parser.add_argument("--macro", type=int, required=True, help="Macro category ID")
    add_parser.add_argument("--micro", type=int, help="Micro category ID")
    add_parser.set_defaults(func=cmd_add)

    delete_parser = bindings_subparsers.add_parser("delete", help="Delete a binding")
    delete_parser.add_argument("merchant_category", help="Label as it appears in exports")
    delete_parser.set_defaults(func=cmd_delete)

    import_parser = bindings_subparsers.add_parser(
        "import", help="Replace all bindings from a JSON file"
    )
    import_parser.add_argument("json_file", help="Path to the JSON file")
    import_parser.set_defaults(func=cmd_import)
