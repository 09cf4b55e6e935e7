#!/usr/bin/env python3

from db.manager import applied_migrations
from logger import get_logger

logger = get_logger()


def cmd_status(args, db_manager):
    """Show which bundled migrations the database has."""
    if not db_manager.get_db_path().exists():
        logger.info(
            "Database does not exist. Run 'python -m cli migrate apply' to create it."
        )
        return

    with db_manager.connect() as conn:
        applied = applied_migrations(conn)

    available = db_manager.available_migrations()
    if not available:
        logger.info("No migrations found.")
        return

    pending = [m for m in available if m not in applied]
    for migration in available:
        logger.info(f"  {migration}: {'PENDING' if migration in pending else 'APPLIED'}")
    logger.info(f"Applied: {len(available) - len(pending)}, pending: {len(pending)}")


def cmd_apply(args, db_manager):
    """Apply pending migrations."""
    applied = db_manager.migrate()
    if applied:
        logger.info(f"Successfully applied {len(applied)} migration(s).")
    else:
        logger.info("No pending migrations.")


def setup_parser(subparsers):
    """Setup migrate subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "migrate",
        help="Database migrations",
        description="Create or upgrade the expense ledger schema",
    )

    migrate_subparsers = parser.add_subparsers(
        title="subcommands",
        dest="subcommand",
        required=True,
    )

    migrate_subparsers.add_parser(
        "status", help="List applied and pending migrations"
    ).set_defaults(func=cmd_status)
    migrate_subparsers.add_parser(
        "apply", help="Apply pending migrations"
    ).set_defaults(func=cmd_apply)
