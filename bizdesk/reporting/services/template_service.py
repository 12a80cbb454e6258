"""Report Template Service — validation and orchestration for the template store."""

import logging

from core.utils.api_helpers import pagination_meta
from ..config import get_config
from ..engine import validate_schema
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..predefined import REPORT_TYPES, get_predefined_templates
from ..repositories import ReportTemplateRepository

logger = logging.getLogger('bizdesk.reporting.templates')

_EDITABLE_FIELDS = ('name', 'description', 'report_type', 'query_template', 'parameters')


def _check_fields(data, partial=False):
    """Validate template fields. With partial=True only present keys are checked."""
    if not partial or 'name' in data:
        name = data.get('name')
        if not isinstance(name, str) or not name.strip():
            raise ValidationError('Template name is required')
    if not partial or 'report_type' in data:
        report_type = data.get('report_type')
        if not report_type:
            raise ValidationError('Report type is required')
        if report_type not in REPORT_TYPES:
            raise ValidationError(
                f"Invalid report type '{report_type}'. Expected one of: {', '.join(REPORT_TYPES)}")
    if data.get('query_template') is not None and not str(data['query_template']).strip():
        raise ValidationError('Query template cannot be empty')
    if 'parameters' in data:
        validate_schema(data['parameters'])


class ReportTemplateService:
    def __init__(self, template_repo=None, config=None):
        self.template_repo = template_repo or ReportTemplateRepository()
        self.config = config or get_config()

    def list_templates(self, page=1, limit=10, report_type=None, search=None):
        templates, total = self.template_repo.list_templates(
            page=page, limit=limit, report_type=report_type, search=search)
        return {'templates': templates, 'pagination': pagination_meta(total, page, limit)}

    def get_template(self, template_id):
        """Template plus its most recent saved reports."""
        template = self.template_repo.get_by_id(template_id)
        if not template:
            raise NotFoundError('Report template not found')
        template['saved_reports'] = self.template_repo.get_recent_saved_reports(
            template_id, limit=self.config.RECENT_SAVED_LIMIT)
        return template

    def get_by_type(self, report_type):
        return self.template_repo.get_by_type(report_type)

    def create_template(self, data, user_id):
        _check_fields(data)
        template = self.template_repo.create(
            name=data['name'].strip(),
            report_type=data['report_type'],
            created_by=user_id,
            description=data.get('description'),
            query_template=data.get('query_template'),
            parameters=data.get('parameters') or {},
        )
        logger.info(f"Report template {template['id']} created by user {user_id}")
        return template

    def update_template(self, template_id, data):
        changes = {k: v for k, v in data.items() if k in _EDITABLE_FIELDS and v is not None}
        _check_fields(changes, partial=True)
        if 'name' in changes:
            changes['name'] = changes['name'].strip()

        template = self.template_repo.update(template_id, **changes)
        if not template:
            raise NotFoundError('Report template not found')
        return template

    def delete_template(self, template_id):
        if not self.template_repo.get_by_id(template_id):
            raise NotFoundError('Report template not found')
        if self.template_repo.count_saved_reports(template_id) > 0:
            raise ConflictError('Cannot delete template with saved reports. Delete saved reports first.')
        if not self.template_repo.delete(template_id):
            raise NotFoundError('Report template not found')
        logger.info(f'Report template {template_id} deleted')
        return True

    def get_predefined_templates(self):
        return get_predefined_templates()

    def install_predefined_template(self, index, user_id):
        """Copy predefined template `index` into the store for `user_id`."""
        catalog = get_predefined_templates()
        try:
            position = int(index)
        except (TypeError, ValueError):
            raise NotFoundError('Predefined template not found')
        if position < 0 or position >= len(catalog):
            raise NotFoundError('Predefined template not found')
        return self.create_template(catalog[position], user_id)

    def get_stats(self):
        return self.template_repo.get_stats()
