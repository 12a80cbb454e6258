"""Reporting services."""
from .executor import ReportExecutor
from .template_service import ReportTemplateService
from .saved_report_service import SavedReportService

__all__ = ['ReportExecutor', 'ReportTemplateService', 'SavedReportService']
