"""
Back Office API - Flask Backend Application
Main entry point
"""
import atexit
import os
from pathlib import Path

from flask import Flask, jsonify, request
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError
from werkzeug.exceptions import HTTPException, MethodNotAllowed

# Load environment variables
# Always load `.env` next to this file (if it exists) regardless of the
# current working directory.
#
# IMPORTANT for production: do NOT override real environment variables
# injected by the host.
_is_production = os.getenv('FLASK_ENV', 'development') == 'production'
_dotenv_path = Path(__file__).resolve().parent / '.env'
if _dotenv_path.exists():
    load_dotenv(dotenv_path=_dotenv_path, override=(not _is_production))

# Import extensions and routes
from extensions import init_extensions, shutdown_extensions, db
from config.database import SQLALCHEMY_DATABASE_URI, SQLALCHEMY_TRACK_MODIFICATIONS, get_engine_options
from config.settings import get_config
from routes import register_blueprints
from utils.errors import (
    ApiError,
    AuthorizationError,
    ConfigurationError,
    PoolExhausted,
)


def _check_required_config(app):
    """Fatal startup checks; the app must not serve without a signing secret."""
    if not app.config.get('JWT_SECRET_KEY'):
        raise ConfigurationError(
            'JWT_SECRET_KEY is not configured; set JWT_SECRET_KEY (or JWT_SECRET) in the environment'
        )


def _register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(error):
        # Authentication failures are logged by the gate with their reason
        if isinstance(error, AuthorizationError):
            app.logger.info('Forbidden %s %s: %s', request.method, request.path, error.message)
        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        if isinstance(error, PoolExhausted):
            response.headers['Retry-After'] = str(error.retry_after)
        return response

    @app.errorhandler(PoolTimeoutError)
    def handle_pool_timeout(error):
        db.session.rollback()
        app.logger.error('Connection pool exhausted on %s %s: %s', request.method, request.path, error)
        return handle_api_error(PoolExhausted())

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(error):
        db.session.rollback()
        app.logger.exception('Storage error on %s %s', request.method, request.path)
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(404)
    def not_found(error):
        # Collection rules end in '/'; without strict slashes the bare path
        # only matches allowed methods, so re-match to report a 405.
        if not request.path.endswith('/'):
            adapter = app.create_url_adapter(request)
            try:
                adapter.match(request.path + '/', method=request.method)
            except MethodNotAllowed as exc:
                return method_not_allowed(exc)
            except HTTPException:
                pass
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        allowed = getattr(error, 'valid_methods', None)
        allowed_str = f" Allowed: {', '.join(sorted(set(allowed)))}" if allowed else ''

        # Include method/path so client logs immediately reveal what endpoint
        # was actually called.
        msg = f"Method not allowed ({request.method} {request.path}).{allowed_str}".strip()
        return jsonify({'error': msg}), 405

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'error': error.description}), error.code
        db.session.rollback()
        app.logger.exception('Unhandled error on %s %s', request.method, request.path)
        return jsonify({'error': 'Internal server error'}), 500


def create_app(config_class=None):
    """Application factory pattern"""
    app = Flask(__name__)

    # Disable strict slashes to prevent 308 redirects
    app.url_map.strict_slashes = False

    # Load configuration
    if config_class is None:
        config_class = get_config()

    app.config.from_object(config_class)
    app.config.setdefault('SQLALCHEMY_DATABASE_URI', SQLALCHEMY_DATABASE_URI)
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = SQLALCHEMY_TRACK_MODIFICATIONS
    app.config.setdefault(
        'SQLALCHEMY_ENGINE_OPTIONS',
        get_engine_options(
            app.config['SQLALCHEMY_DATABASE_URI'],
            pool_size=app.config.get('DB_POOL_SIZE', 10),
            pool_timeout=app.config.get('DB_POOL_TIMEOUT', 30),
        ),
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    _check_required_config(app)

    # Initialize extensions
    init_extensions(app)

    # Import models so create_all / migrations see every table
    import models  # noqa: F401

    # Register blueprints
    register_blueprints(app)
    _register_error_handlers(app)

    # Health check endpoint
    @app.route('/api/health', methods=['GET'])
    def health_check():
        return jsonify({
            'success': True,
            'message': f"{app.config['APP_NAME']} is running",
            'version': app.config['APP_VERSION']
        }), 200

    # Root endpoint (API info)
    @app.route('/api', methods=['GET'])
    def api_index():
        return jsonify({
            'name': app.config['APP_NAME'],
            'version': app.config['APP_VERSION'],
            'description': 'Back office records API',
            'endpoints': {
                'auth': '/api/auth',
                'sales': '/api/sales',
                'expenses': '/api/expenses',
                'company_expenses': '/api/company-expenses',
                'inventory': '/api/inventory',
                'stock_adjustments': '/api/stock-adjustments',
                'stock_movements': '/api/stock-movements',
                'payroll': '/api/payroll',
                'customers': '/api/customers',
                'customer_ledger': '/api/customer-ledger',
                'suppliers': '/api/suppliers',
                'supplier_ledger': '/api/supplier-ledger',
                'deposits': '/api/deposits'
            }
        }), 200

    return app


# Create application instance
app = create_app()


if __name__ == '__main__':
    # Development server
    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('DEBUG', 'False').lower() == 'true'

    atexit.register(shutdown_extensions, app)

    print(f"""
    ╔══════════════════════════════════════════════════════════╗
    ║              Back Office API - Backend Server            ║
    ╠══════════════════════════════════════════════════════════╣
    ║  Local: http://localhost:{port:<32}║
    ║  Debug mode: {debug!s:<44}║
    ║  Health: /api/health                                     ║
    ║  • POST /api/auth/login      - Login                     ║
    ║  • GET  /api/auth/me         - Current principal         ║
    ║  • GET  /api/sales           - List sales                ║
    ║  • GET  /api/inventory       - List inventory            ║
    ╚══════════════════════════════════════════════════════════╝
    """)

    app.run(host='0.0.0.0', port=port, debug=debug, use_reloader=False)
