#!/usr/bin/env python3
"""
Easy Budget CLI - import bank exports as expenses and incomes.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    categories   List and seed categories
    bindings     Manage merchant category bindings
    expenses     Preview and import CSV exports
    migrate      Database migrations
    serve        Run the HTTP API

Examples:
    python -m cli migrate apply
    python -m cli categories seed categories.yaml
    python -m cli bindings add "Supermercati" --macro 1 --micro 10
    python -m cli expenses preview statement.csv
    python -m cli expenses import statement.csv --format zak
    python -m cli serve --port 8000
"""

import sys
import argparse
from cli import bindings, categories, expenses, migrate, serve
from config import load_config
from errors import ImporterError
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Easy Budget - bank export importer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    categories.setup_parser(subparsers)
    bindings.setup_parser(subparsers)
    expenses.setup_parser(subparsers)
    migrate.setup_parser(subparsers)
    serve.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            if args.command == "migrate":
                # Migrate commands need db_manager for raw database operations
                args.func(args, DatabaseManager(config))
            else:
                args.func(args, Services(config))
        except ImporterError as e:
            print(f"Error: {e.message}")
            sys.exit(1)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
