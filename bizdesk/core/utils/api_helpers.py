"""Shared API utilities — auth decorators, request parsing, error helpers, pagination."""
import math
import logging
from functools import wraps

from flask import jsonify, request
from flask_login import current_user

logger = logging.getLogger('bizdesk.api')


# ============== Decorators ==============

def api_login_required(f):
    """Like @login_required but returns JSON 401 instead of redirect."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({'success': False, 'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated


def role_required(*roles):
    """Decorator requiring authentication and one of the given roles.

    Usage:
        @role_required('admin', 'manager')
        def api_create_thing(): ...
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'success': False, 'error': 'Authentication required'}), 401
            if not current_user.has_role(*roles):
                return jsonify({'success': False, 'error': 'Permission denied'}), 403
            return f(*args, **kwargs)
        return decorated
    return decorator


# ============== Request Validation ==============

def get_json_or_error():
    """Get JSON from request body with null check.

    Returns (data, error_response) tuple. Caller pattern:
        data, error = get_json_or_error()
        if error:
            return error
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, (jsonify({
            'success': False,
            'error': 'Invalid or missing JSON body',
        }), 400)
    return data, None


def get_pagination_args(default_limit=10, max_limit=100):
    """Read ?page=&limit= with sane bounds. Returns (page, limit)."""
    page = request.args.get('page', 1, type=int) or 1
    limit = request.args.get('limit', default_limit, type=int) or default_limit
    return max(page, 1), min(max(limit, 1), max_limit)


def pagination_meta(total, page, limit):
    return {
        'total': total,
        'page': page,
        'limit': limit,
        'totalPages': math.ceil(total / limit) if limit else 0,
    }


# ============== Error Handling ==============

def error_response(message, status_code=400):
    return jsonify({'success': False, 'error': message}), status_code


def safe_error_response(e, status_code=500):
    """Return error response without leaking DB internals.

    - ValueError/KeyError: returns str(e) as 400 (business validation, safe to expose)
    - Everything else: logs full exception, returns generic message
    """
    if isinstance(e, (ValueError, KeyError)):
        return error_response(str(e), 400)

    logger.exception('Unhandled error in API route')
    return error_response('An internal error occurred', status_code)
