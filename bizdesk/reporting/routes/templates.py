"""Report template routes — CRUD, predefined catalog, execution."""
from flask import jsonify, request
from flask_login import current_user

from reporting import reporting_bp
from reporting.config import get_config
from reporting.services import ReportExecutor, ReportTemplateService
from reporting.routes.helpers import failure_response
from core.auth.models import ROLE_ADMIN, ROLE_MANAGER
from core.utils.api_helpers import (
    api_login_required, role_required, get_json_or_error, get_pagination_args,
)

_service = ReportTemplateService()
_executor = ReportExecutor()


@reporting_bp.route('/api/report-templates', methods=['GET'])
@api_login_required
def api_list_report_templates():
    config = get_config()
    page, limit = get_pagination_args(config.DEFAULT_PAGE_SIZE, config.MAX_PAGE_SIZE)
    try:
        result = _service.list_templates(
            page=page, limit=limit,
            report_type=request.args.get('report_type'),
            search=request.args.get('search'),
        )
        return jsonify({'success': True, 'data': result})
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/report-templates/stats', methods=['GET'])
@api_login_required
def api_report_template_stats():
    try:
        return jsonify({'success': True, 'data': _service.get_stats()})
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/report-templates/predefined', methods=['GET'])
@api_login_required
def api_predefined_templates():
    return jsonify({'success': True, 'data': _service.get_predefined_templates()})


@reporting_bp.route('/api/report-templates/predefined/<index>/install', methods=['POST'])
@role_required(ROLE_ADMIN, ROLE_MANAGER)
def api_install_predefined_template(index):
    try:
        template = _service.install_predefined_template(index, current_user.id)
        return jsonify({
            'success': True,
            'message': 'Predefined template installed successfully',
            'data': template,
        }), 201
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/report-templates/type/<report_type>', methods=['GET'])
@api_login_required
def api_report_templates_by_type(report_type):
    try:
        return jsonify({'success': True, 'data': _service.get_by_type(report_type)})
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/report-templates/<int:template_id>', methods=['GET'])
@api_login_required
def api_get_report_template(template_id):
    try:
        return jsonify({'success': True, 'data': _service.get_template(template_id)})
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/report-templates', methods=['POST'])
@role_required(ROLE_ADMIN, ROLE_MANAGER)
def api_create_report_template():
    data, error = get_json_or_error()
    if error:
        return error
    try:
        template = _service.create_template(data, current_user.id)
        return jsonify({
            'success': True,
            'message': 'Report template created successfully',
            'data': template,
        }), 201
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/report-templates/<int:template_id>', methods=['PUT'])
@role_required(ROLE_ADMIN, ROLE_MANAGER)
def api_update_report_template(template_id):
    data, error = get_json_or_error()
    if error:
        return error
    try:
        template = _service.update_template(template_id, data)
        return jsonify({
            'success': True,
            'message': 'Report template updated successfully',
            'data': template,
        })
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/report-templates/<int:template_id>', methods=['DELETE'])
@role_required(ROLE_ADMIN)
def api_delete_report_template(template_id):
    try:
        _service.delete_template(template_id)
        return jsonify({'success': True, 'message': 'Report template deleted successfully'})
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/report-templates/<int:template_id>/execute', methods=['POST'])
@api_login_required
def api_execute_report_template(template_id):
    data = request.get_json(silent=True) or {}
    try:
        result = _executor.execute_template(template_id, data.get('parameters') or {})
        return jsonify({
            'success': True,
            'message': 'Template executed successfully',
            'data': result,
        })
    except Exception as e:
        return failure_response(e)
