"""
Exception types for the comment query compiler.

Compiling a filter request never raises for request content: malformed
optional values are skipped or coerced. These exceptions cover the parts that
can genuinely fail, namely loading settings and the demo HTTP round-trip.
"""

from typing import Optional


class CommentQueryError(Exception):
    """Base exception for the comment_query package."""


class ConfigurationError(CommentQueryError):
    """Raised when a settings value from the environment cannot be used."""


class SearchRequestError(CommentQueryError):
    """Raised when executing a compiled query against a search endpoint fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
