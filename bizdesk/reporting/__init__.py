"""BizDesk Reporting Module.

Stored, parameterized query templates, their execution, and saved report
snapshots that can be regenerated and exported.
"""
from flask import Blueprint

reporting_bp = Blueprint('reporting', __name__)

from .routes import templates, saved_reports, custom_query  # noqa: F401, E402
