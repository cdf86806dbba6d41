"""
Post manager application package

``create_app`` builds the Flask application: settings, database and
migrations, logging, the page and API blueprints, response security
headers and JSON error bodies.
"""
import os
import logging
from logging.handlers import RotatingFileHandler

from flask import Flask, request, redirect, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from config import get_config

db = SQLAlchemy()
migrate = Migrate()

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'migrations')
LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'


def _log_handler(app: 'Flask') -> logging.Handler:
    """Console while debugging or testing, a rotating file otherwise"""
    if app.debug or app.testing:
        handler = logging.StreamHandler()
        handler.setLevel(logging.DEBUG)
        return handler

    log_file = app.config.get('LOG_FILE', 'logs/app.log')
    log_dir = os.path.dirname(log_file)
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
        except OSError as e:
            app.logger.error(f"Cannot create log directory {log_dir}: {e}; writing to app.log")
            log_file = 'app.log'

    handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=10)
    handler.setLevel(logging.INFO)
    return handler


def configure_logging(app: 'Flask') -> None:
    """Install the single log handler for this application"""
    # app.logger is shared by name across apps, so replace rather than append
    for previous in list(app.logger.handlers):
        app.logger.removeHandler(previous)
        previous.close()
    handler = _log_handler(app)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app.logger.addHandler(handler)
    app.logger.setLevel(handler.level)
    app.logger.info(f'Logging to {type(handler).__name__}')


def register_blueprints(app: 'Flask') -> None:
    """Mount the page (`/`) and the JSON API (`/posts`)"""
    from post_manager.routes.main import bp as main_bp
    from post_manager.routes.api import bp as api_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp)


def _content_security_policy(csp: dict) -> str:
    return '; '.join(
        f"{directive} {' '.join(sources)}" if sources else directive
        for directive, sources in csp.items()
    )


def setup_security_headers(app: 'Flask') -> None:
    """HTTPS redirect for plain GETs and security headers on every response"""

    @app.before_request
    def require_https():
        # TLS terminates at the proxy, which reports the original scheme
        if app.debug or app.testing or not app.config.get('FORCE_HTTPS'):
            return None
        if request.method != 'GET' or request.is_secure:
            return None
        if request.headers.get('X-Forwarded-Proto') == 'https':
            return None
        return redirect(request.url.replace('http://', 'https://', 1), code=301)

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        if not app.debug and app.config.get('FORCE_HTTPS'):
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains; preload'
        if app.config.get('CSP'):
            response.headers['Content-Security-Policy'] = _content_security_policy(app.config['CSP'])
        return response


def register_error_handlers(app: 'Flask') -> None:
    """Every error leaves the application as `{"error": ...}` JSON"""
    from post_manager.errors import PostError

    @app.errorhandler(PostError)
    def post_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def http_error(error):
        """Unknown routes, wrong methods and other Werkzeug errors"""
        if error.code == 404:
            app.logger.info(f"No route for {request.method} {request.path}")
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(500)
    def internal_error(error):
        """Anything not raised as a PostError"""
        db.session.rollback()
        original = getattr(error, 'original_exception', None) or error
        app.logger.error(f"Unhandled error on {request.method} {request.path}: {original!r}")
        return jsonify({'error': 'Internal server error'}), 500


def register_shell_context(app: 'Flask') -> None:
    """Expose db and Post in `flask shell`"""

    @app.shell_context_processor
    def make_shell_context():
        from post_manager.models import Post
        return {'db': db, 'Post': Post}


def create_app(config_name: str = None, config_class=None) -> 'Flask':
    """
    Build the post manager application

    Args:
        config_name (str): 'development', 'testing' or 'production'
        config_class: settings class; takes precedence over config_name

    Returns:
        Flask: the configured application
    """
    app = Flask(__name__)

    if config_class is None:
        config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.json.sort_keys = False

    configure_logging(app)
    config_class.init_app(app)

    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR)

    register_blueprints(app)
    setup_security_headers(app)
    register_error_handlers(app)
    register_shell_context(app)

    app.logger.info(f'Post manager started with {config_class.__name__}')
    return app


def create_tables(app: 'Flask') -> None:
    """
    Create the posts table without running migrations

    For local development and one-off setups; deployed databases are
    managed with `flask db upgrade`.
    """
    with app.app_context():
        try:
            db.create_all()
        except SQLAlchemyError as e:
            app.logger.error(f'Could not create tables: {e}')
            raise
        app.logger.info('Tables created')
