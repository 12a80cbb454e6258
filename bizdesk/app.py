import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from datetime import timedelta

from flask import Flask, request, jsonify

# Structured logging
from core.utils.logging_config import setup_logging, get_logger
logger = setup_logging(level=os.environ.get('LOG_LEVEL', 'INFO'))
app_logger = get_logger('bizdesk.app')

from flask_compress import Compress
from flask_login import LoginManager
from core.auth.models import User
from core.auth.repositories import UserRepository
from database import ping_db

_user_repo = UserRepository()


def _secret_key(testing):
    # Secret key — required in production, dev fallback only when FLASK_DEBUG=true
    secret = os.environ.get('FLASK_SECRET_KEY', os.environ.get('SECRET_KEY'))
    if secret:
        return secret
    if testing:
        return 'test-secret-key'
    if os.environ.get('FLASK_DEBUG', 'false').lower() == 'true':
        app_logger.warning('Using development secret key — set FLASK_SECRET_KEY for production')
        return 'dev-secret-key-for-local-only'
    raise RuntimeError('FLASK_SECRET_KEY environment variable is required')


def create_app(testing=None):
    """Build the BizDesk reporting application.

    With testing enabled (or TESTING set) the schema bootstrap and the
    report scheduler are skipped.
    """
    if testing is None:
        testing = bool(os.environ.get('TESTING'))

    app = Flask(__name__)
    app.secret_key = _secret_key(testing)
    app.config['TESTING'] = testing

    Compress().init_app(app)

    login_manager = LoginManager()
    login_manager.init_app(app)

    # Remember Me / session cookie hardening
    app.config['REMEMBER_COOKIE_DURATION'] = timedelta(days=30)
    app.config['REMEMBER_COOKIE_SECURE'] = True
    app.config['REMEMBER_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SECURE'] = True
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

    @login_manager.user_loader
    def load_user(user_id):
        user_data = _user_repo.get_by_id(int(user_id))
        return User(user_data) if user_data else None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Authentication required'}), 401

    # ============== Blueprint Registrations ==============

    from reporting import reporting_bp
    app.register_blueprint(reporting_bp)

    # ============== Global Error Handlers ==============

    @app.errorhandler(404)
    def handle_404(e):
        if request.path.startswith('/api/'):
            return jsonify({'success': False, 'error': 'Not found'}), 404
        return e

    @app.errorhandler(405)
    def handle_405(e):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def handle_500(e):
        app_logger.exception('Unhandled 500 error')
        return jsonify({'success': False, 'error': 'An internal error occurred'}), 500

    @app.route('/health')
    def health():
        if ping_db():
            return jsonify({'status': 'ok', 'database': 'ok'})
        return jsonify({'status': 'degraded', 'database': 'unreachable'}), 503

    # ============== Schema & Background Scheduler ==============

    if not testing:
        from database import init_db
        init_db()
        try:
            from tasks.report_generation import start_scheduler
            start_scheduler()
        except Exception as e:
            app_logger.warning(f'Failed to start report scheduler: {e}')

    app_logger.info(f'BizDesk startup complete — {len(app.url_map._rules)} routes registered')
    return app
