"""Reporting repositories package."""
from .template_repository import ReportTemplateRepository
from .saved_report_repository import SavedReportRepository

__all__ = ['ReportTemplateRepository', 'SavedReportRepository']
