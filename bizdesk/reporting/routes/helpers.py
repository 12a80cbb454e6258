"""Response helpers shared by the reporting routes."""
from reporting.exceptions import ReportingError
from core.utils.api_helpers import error_response, safe_error_response


def failure_response(e):
    """Typed reporting errors keep their message and status; anything else is generic."""
    if isinstance(e, ReportingError):
        return error_response(e.message, e.status_code)
    return safe_error_response(e)
