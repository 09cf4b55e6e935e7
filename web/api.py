"""JSON endpoints used by the import UI."""

from flask import Blueprint, current_app, jsonify, request

from errors import InputFormatError, PersistenceError, ValidationError
from logger import get_logger

logger = get_logger()

api = Blueprint("api", __name__, url_prefix="/api")


def _services():
    return current_app.config["SERVICES"]


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


@api.get("/health")
def health():
    return jsonify({"status": "ok"})


@api.get("/categories")
def list_categories():
    """All macro and micro categories; micro categories reference their macro by id."""
    try:
        return jsonify(_services().categories.list_categories())
    except PersistenceError as e:
        logger.error(f"Error fetching categories: {e.message}")
        return jsonify({"error": "Failed to fetch categories"}), 500


@api.get("/categoryBindings")
def list_bindings():
    try:
        bindings = _services().bindings.find_all()
    except PersistenceError as e:
        logger.error(f"Error fetching category bindings: {e.message}")
        return jsonify({"error": "Failed to fetch category bindings"}), 500
    return jsonify({"bindings": [b.to_dict() for b in bindings]})


@api.post("/categoryBindings")
def save_bindings():
    """Replace the whole binding set with the submitted array."""
    bindings = _json_body().get("bindings")
    if not isinstance(bindings, list):
        return jsonify({"error": "Invalid data format"}), 400

    try:
        _services().bindings.replace_all(bindings)
    except PersistenceError as e:
        logger.error(f"Error saving category bindings: {e.message}")
        return jsonify({"error": "Failed to save category bindings"}), 500

    return jsonify({"message": "Category bindings saved successfully"})


@api.post("/imports")
def parse_upload():
    """Parse an uploaded CSV export into records with categories pre-filled.

    Form fields: ``file`` (required) and ``format`` (optional, skips detection).
    Nothing is stored; the UI submits the confirmed records to /api/expenses.
    """
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise ValidationError("No file uploaded")
    if not upload.filename.lower().endswith(".csv"):
        raise InputFormatError("Please upload a CSV file")

    format_name = request.form.get("format") or None
    records = _services().imports.parse_export(upload.read(), format_name)

    logger.info(f"Parsed {len(records)} records from {upload.filename}")
    return jsonify(
        {
            "expenses": [r.to_dict() for r in records],
            "uncategorizedCount": sum(1 for r in records if not r.is_categorized),
        }
    )


@api.post("/expenses")
def submit_expenses():
    """Save confirmed records; negative amounts are stored as incomes."""
    summary = _services().imports.submit(_json_body().get("expenses"))
    return jsonify(summary.to_dict())
