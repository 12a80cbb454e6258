"""Saved Report Service — execute-and-save, regenerate, export."""

import logging

from core.utils.api_helpers import pagination_meta
from ..exceptions import NotFoundError, ValidationError
from ..export import export_rows
from ..repositories import SavedReportRepository
from .executor import ReportExecutor, utc_now_iso

logger = logging.getLogger('bizdesk.reporting.saved_reports')


def _require_int(value, message):
    if isinstance(value, bool):
        raise ValidationError(message)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(message)


def _require_name(name):
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('Report name is required')
    return name.strip()


def _require_object(value, message):
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(message)
    return value


class SavedReportService:
    def __init__(self, saved_repo=None, executor=None):
        self.saved_repo = saved_repo or SavedReportRepository()
        self.executor = executor or ReportExecutor()

    # ── Reads ──

    def list_reports(self, page=1, limit=10, template_id=None, created_by=None, search=None):
        reports, total = self.saved_repo.list_reports(
            page=page, limit=limit, template_id=template_id,
            created_by=created_by, search=search)
        return {'reports': reports, 'pagination': pagination_meta(total, page, limit)}

    def get_by_template(self, template_id, page=1, limit=10):
        return self.list_reports(page=page, limit=limit, template_id=template_id)

    def get_by_user(self, user_id, page=1, limit=10):
        return self.list_reports(page=page, limit=limit, created_by=user_id)

    def get_report(self, report_id):
        report = self.saved_repo.get_by_id(report_id)
        if not report:
            raise NotFoundError('Saved report not found')
        return report

    def get_stats(self):
        return self.saved_repo.get_stats()

    # ── Writes ──

    def create_report(self, data, user_id):
        """Store a report snapshot supplied by the caller."""
        template_id = _require_int(data.get('template_id'), 'Valid template ID is required')
        name = _require_name(data.get('name'))
        parameters = _require_object(data.get('parameters'), 'Parameters must be an object')
        result_data = _require_object(data.get('result_data'), 'Result data must be an object')

        self.executor.load_template(template_id)
        return self.saved_repo.create(
            template_id=template_id, name=name, created_by=user_id,
            parameters=parameters, result_data=result_data)

    def update_report(self, report_id, data):
        changes = {}
        if data.get('name') is not None:
            changes['name'] = _require_name(data['name'])
        if data.get('parameters') is not None:
            changes['parameters'] = _require_object(data['parameters'], 'Parameters must be an object')
        if data.get('result_data') is not None:
            changes['result_data'] = _require_object(data['result_data'], 'Result data must be an object')

        report = self.saved_repo.update(report_id, **changes)
        if not report:
            raise NotFoundError('Saved report not found')
        return report

    def delete_report(self, report_id):
        if not self.saved_repo.delete(report_id):
            raise NotFoundError('Saved report not found')
        return True

    def execute_and_save(self, template_id, parameters, name, user_id):
        """Run a template and persist the result. Nothing is written if execution fails."""
        template_id = _require_int(template_id, 'Valid template ID is required')
        name = _require_name(name)
        parameters = _require_object(parameters, 'Parameters must be an object')

        execution = self.executor.execute_template(template_id, parameters)
        report = self.saved_repo.create(
            template_id=template_id,
            name=name,
            created_by=user_id,
            parameters=execution['parameters'],
            result_data={
                'data': execution['data'],
                'executedAt': execution['executedAt'],
                'rowCount': len(execution['data']),
            },
        )
        logger.info(f"Saved report {report['id']} created from template {template_id} "
                    f"({len(execution['data'])} rows)")
        return report

    def regenerate(self, report_id):
        """Re-run a saved report with its stored parameters; only result_data changes."""
        report = self.get_report(report_id)
        execution = self.executor.execute_template(report['template_id'], report.get('parameters') or {})

        updated = self.saved_repo.update(report_id, result_data={
            'data': execution['data'],
            'executedAt': execution['executedAt'],
            'rowCount': len(execution['data']),
            'regeneratedAt': utc_now_iso(),
        })
        if not updated:
            raise NotFoundError('Saved report not found')
        logger.info(f'Saved report {report_id} regenerated ({len(execution["data"])} rows)')
        return updated

    def export_data(self, report_id, export_format='json'):
        """Serialise a saved report's rows. Returns (content, mimetype, filename)."""
        report = self.get_report(report_id)
        rows = (report.get('result_data') or {}).get('data') or []
        content, mimetype = export_rows(rows, export_format)
        return content, mimetype, f'report-{report_id}.{export_format.lower()}'
