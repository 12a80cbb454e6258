"""Ad-hoc SELECT execution for administrators."""
import logging
from flask import jsonify
from flask_login import current_user

from reporting import reporting_bp
from reporting.services import ReportExecutor
from reporting.routes.helpers import failure_response
from core.auth.models import ROLE_ADMIN
from core.utils.api_helpers import role_required, get_json_or_error, error_response

logger = logging.getLogger('bizdesk.reporting.routes.custom_query')

_executor = ReportExecutor()


@reporting_bp.route('/api/reports/custom-query', methods=['POST'])
@role_required(ROLE_ADMIN)
def api_custom_query():
    data, error = get_json_or_error()
    if error:
        return error
    query = data.get('query')
    if not isinstance(query, str) or not query.strip():
        return error_response('Query is required')
    try:
        logger.info(f'Custom query requested by user {current_user.id}')
        result = _executor.execute_custom_query(query, data.get('parameters') or {})
        return jsonify({
            'success': True,
            'message': 'Query executed successfully',
            'data': result,
        })
    except Exception as e:
        return failure_response(e)
