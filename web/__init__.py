"""Flask application exposing the import API to the browser UI."""

from typing import Optional

from flask import Flask, jsonify

from config import Config, load_config
from errors import ImporterError
from logger import get_logger
from services.base import Services

logger = get_logger()


def create_app(config: Optional[Config] = None, services: Optional[Services] = None) -> Flask:
    """Create the Flask application.

    Args:
        config: Application configuration; loaded from the config file when None.
        services: Services container; built from config when None (tests inject one).

    Returns:
        Configured Flask app with the API blueprint registered.
    """
    if services is None:
        config = config or load_config()
        services = Services(config)

    app = Flask(__name__)
    app.config["SERVICES"] = services
    # CSV exports are small; anything bigger is not a bank statement
    app.config["MAX_CONTENT_LENGTH"] = 10 * 1024 * 1024

    from web.api import api

    app.register_blueprint(api)

    @app.errorhandler(ImporterError)
    def handle_importer_error(error: ImporterError):
        if error.http_status >= 500:
            logger.error(f"{type(error).__name__}: {error.message}")
        else:
            logger.warning(f"{type(error).__name__}: {error.message}")
        return jsonify({"error": error.message}), error.http_status

    return app
