"""
Reporting Custom Exceptions

Every error raised by the template store, the executor and the saved
report archive derives from ReportingError, which carries the HTTP status
the API layer answers with.
"""

from typing import Optional


class ReportingError(Exception):
    """Base exception for the reporting module."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class ValidationError(ReportingError):
    """Missing or malformed input (required field, bad parameter value)."""
    status_code = 400


class NotFoundError(ReportingError):
    """Unknown template, saved report or predefined template index."""
    status_code = 404


class ConflictError(ReportingError):
    """Operation blocked by existing references."""
    status_code = 400


class SecurityError(ReportingError):
    """Query text rejected by the SELECT-only gate."""
    status_code = 403

    def __init__(self, message: str = 'Only SELECT queries are allowed'):
        super().__init__(message)


class UnsupportedFormatError(ReportingError):
    """Export requested in a format other than csv or json."""
    status_code = 400

    def __init__(self, export_format: str):
        self.export_format = export_format
        super().__init__(f"Unsupported export format: {export_format}")


class ExecutionError(ReportingError):
    """The database rejected or failed the compiled query."""
    status_code = 500

    def __init__(self, driver_message: str):
        self.driver_message = driver_message
        super().__init__(f"Query execution failed: {driver_message}")
