#!/usr/bin/env python3

from logger import get_logger

logger = get_logger()


def cmd_serve(args, services):
    """Run the import API with Flask's built-in server."""
    from web import create_app

    applied = services.db_manager.migrate()
    if applied:
        logger.info(f"Applied {len(applied)} pending migration(s)")

    host = args.host or services.config.server_host
    port = args.port or services.config.server_port

    app = create_app(services.config, services=services)
    logger.info(f"Serving import API on http://{host}:{port}/api")
    app.run(host=host, port=port, debug=args.debug)


def setup_parser(subparsers):
    """Setup serve subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP API",
        description="Serve the JSON API used by the import UI",
    )
    parser.add_argument("--host", help="Interface to bind (default from config)")
    parser.add_argument("--port", type=int, help="Port to bind (default from config)")
    parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    parser.set_defaults(func=cmd_serve)
