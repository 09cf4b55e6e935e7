"""Error taxonomy for importing and saving transactions.

Every failure that can reach a user is one of these classes. The web layer
turns them into ``{"error": message}`` responses using ``http_status``; the
CLI logs the message and exits with status 1. Nothing is retried.
"""

from typing import Optional


class ImporterError(Exception):
    """Base class for all import errors.

    Attributes:
        message: Human readable description, safe to show to users.
        http_status: HTTP status code the API responds with.
    """

    http_status = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InputFormatError(ImporterError):
    """The file is not a CSV or its columns match no known layout."""

    http_status = 400


class ParseError(ImporterError):
    """A cell failed numeric or date parsing.

    Attributes:
        line: 1-based line number in the source file, when known.
    """

    http_status = 400

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"Line {line}: {message}"
        super().__init__(message)


class PersistenceError(ImporterError):
    """The database or the bindings file could not be read or written."""

    http_status = 500


class ValidationError(ImporterError):
    """A submitted payload has the wrong shape."""

    http_status = 400
