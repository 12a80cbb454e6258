"""Saved report routes — archive CRUD, execute-and-save, regenerate, export."""
from flask import Response, jsonify, request
from flask_login import current_user

from reporting import reporting_bp
from reporting.config import get_config
from reporting.services import SavedReportService
from reporting.routes.helpers import failure_response
from core.utils.api_helpers import (
    api_login_required, get_json_or_error, get_pagination_args,
)

_service = SavedReportService()


def _page_args():
    config = get_config()
    return get_pagination_args(config.DEFAULT_PAGE_SIZE, config.MAX_PAGE_SIZE)


@reporting_bp.route('/api/saved-reports', methods=['GET'])
@api_login_required
def api_list_saved_reports():
    page, limit = _page_args()
    try:
        result = _service.list_reports(
            page=page, limit=limit,
            template_id=request.args.get('template_id', type=int),
            created_by=request.args.get('created_by', type=int),
            search=request.args.get('search'),
        )
        return jsonify({'success': True, 'data': result})
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/saved-reports/stats', methods=['GET'])
@api_login_required
def api_saved_report_stats():
    try:
        return jsonify({'success': True, 'data': _service.get_stats()})
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/saved-reports/my-reports', methods=['GET'])
@api_login_required
def api_my_saved_reports():
    page, limit = _page_args()
    try:
        result = _service.get_by_user(current_user.id, page=page, limit=limit)
        return jsonify({'success': True, 'data': result})
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/saved-reports/template/<int:template_id>', methods=['GET'])
@api_login_required
def api_saved_reports_by_template(template_id):
    page, limit = _page_args()
    try:
        result = _service.get_by_template(template_id, page=page, limit=limit)
        return jsonify({'success': True, 'data': result})
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/saved-reports/user/<int:user_id>', methods=['GET'])
@api_login_required
def api_saved_reports_by_user(user_id):
    page, limit = _page_args()
    try:
        result = _service.get_by_user(user_id, page=page, limit=limit)
        return jsonify({'success': True, 'data': result})
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/saved-reports/<int:report_id>', methods=['GET'])
@api_login_required
def api_get_saved_report(report_id):
    try:
        return jsonify({'success': True, 'data': _service.get_report(report_id)})
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/saved-reports', methods=['POST'])
@api_login_required
def api_create_saved_report():
    data, error = get_json_or_error()
    if error:
        return error
    try:
        report = _service.create_report(data, current_user.id)
        return jsonify({
            'success': True,
            'message': 'Saved report created successfully',
            'data': report,
        }), 201
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/saved-reports/execute-and-save', methods=['POST'])
@api_login_required
def api_execute_and_save_report():
    data, error = get_json_or_error()
    if error:
        return error
    try:
        report = _service.execute_and_save(
            data.get('templateId'),
            data.get('parameters'),
            data.get('name'),
            current_user.id,
        )
        return jsonify({
            'success': True,
            'message': 'Report executed and saved successfully',
            'data': report,
        }), 201
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/saved-reports/<int:report_id>/regenerate', methods=['POST'])
@api_login_required
def api_regenerate_saved_report(report_id):
    try:
        report = _service.regenerate(report_id)
        return jsonify({
            'success': True,
            'message': 'Report regenerated successfully',
            'data': report,
        })
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/saved-reports/<int:report_id>/export', methods=['GET'])
@api_login_required
def api_export_saved_report(report_id):
    export_format = request.args.get('format', 'json')
    try:
        content, mimetype, filename = _service.export_data(report_id, export_format)
    except Exception as e:
        return failure_response(e)
    return Response(
        content,
        mimetype=mimetype,
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


@reporting_bp.route('/api/saved-reports/<int:report_id>', methods=['PUT'])
@api_login_required
def api_update_saved_report(report_id):
    data, error = get_json_or_error()
    if error:
        return error
    try:
        report = _service.update_report(report_id, data)
        return jsonify({
            'success': True,
            'message': 'Saved report updated successfully',
            'data': report,
        })
    except Exception as e:
        return failure_response(e)


@reporting_bp.route('/api/saved-reports/<int:report_id>', methods=['DELETE'])
@api_login_required
def api_delete_saved_report(report_id):
    try:
        _service.delete_report(report_id)
        return jsonify({'success': True, 'message': 'Saved report deleted successfully'})
    except Exception as e:
        return failure_response(e)
