"""
Post manager settings

One class per environment. ``get_config`` picks the class by name or by
``FLASK_ENV``; values are read from the process environment and from a
``.env`` file next to the working directory.
"""
import os
from urllib.parse import urlparse

from dotenv import load_dotenv

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read an on/off flag from the environment."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 'yes', 'on'}


class Config:
    """Settings shared by every environment"""

    DEBUG = False
    TESTING = False
    SECRET_KEY = os.environ.get('SECRET_KEY')
    VERSION = os.environ.get('APP_VERSION', '1.0.0')

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///posts.db')
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_FILE = os.environ.get('LOG_FILE', 'logs/app.log')

    # Request bodies are JSON sent by the bundled page; there is no HTML form to protect
    WTF_CSRF_ENABLED = False

    FORCE_HTTPS = env_bool('FORCE_HTTPS', False)
    PREFERRED_URL_SCHEME = 'https' if FORCE_HTTPS else 'http'

    # directive -> sources; an empty list emits the bare directive
    CSP = {
        'default-src': ["'self'"],
        'script-src': ["'self'"],
        'style-src': ["'self'"],
        'img-src': ["'self'", "data:"],
        'connect-src': ["'self'"],
        'object-src': ["'none'"],
        'frame-ancestors': ["'none'"]
    }

    @classmethod
    def init_app(cls, app):
        """Hook run by the factory once the settings are loaded"""


class DevelopmentConfig(Config):
    """Local development: debug on, SQLite under instance/"""

    DEBUG = True
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    FORCE_HTTPS = False

    if os.environ.get('DATABASE_URL'):
        SQLALCHEMY_DATABASE_URI = os.environ['DATABASE_URL']
    else:
        instance_dir = os.path.join(os.path.dirname(__file__), 'instance')
        os.makedirs(instance_dir, exist_ok=True)
        SQLALCHEMY_DATABASE_URI = 'sqlite:///' + os.path.join(instance_dir, 'posts.db')

    @classmethod
    def init_app(cls, app):
        super().init_app(app)
        app.config['SQLALCHEMY_ECHO'] = env_bool('SQLALCHEMY_ECHO', False)
        # JSON 500 bodies instead of the interactive debugger
        app.config['PROPAGATE_EXCEPTIONS'] = False


class TestingConfig(Config):
    """In-memory SQLite, no HTTPS enforcement"""

    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    FORCE_HTTPS = False
    PREFERRED_URL_SCHEME = 'http'


class ProductionConfig(Config):
    """Served behind a TLS-terminating proxy; SECRET_KEY and DATABASE_URL are required"""

    HTTPS_ENABLED = env_bool('HTTPS_ENABLED', True)
    FORCE_HTTPS = HTTPS_ENABLED
    PREFERRED_URL_SCHEME = 'https' if HTTPS_ENABLED else 'http'

    REQUIRED_ENV = ('SECRET_KEY', 'DATABASE_URL')

    @classmethod
    def _validate_production_config(cls):
        """Raise ValueError when a required variable is unset or DATABASE_URL is malformed"""
        missing = [name for name in cls.REQUIRED_ENV if not os.environ.get(name)]
        if missing:
            raise ValueError(f"Missing required environment variables for production: {', '.join(missing)}")

        parsed = urlparse(os.environ['DATABASE_URL'])
        if not parsed.scheme or not parsed.path:
            raise ValueError("Invalid DATABASE_URL format")

    @classmethod
    def init_app(cls, app):
        super().init_app(app)
        cls._validate_production_config()

        # Read at startup so the process environment wins over import-time values
        app.config['SECRET_KEY'] = os.environ['SECRET_KEY']
        app.config['SQLALCHEMY_DATABASE_URI'] = os.environ['DATABASE_URL']

        if cls.HTTPS_ENABLED:
            app.logger.info('HTTPS enforcement enabled; plain HTTP GETs are redirected.')
        else:
            app.logger.warning('HTTPS enforcement is disabled in production. Set HTTPS_ENABLED=true once TLS is configured.')

        import logging
        from logging.handlers import SysLogHandler

        try:
            syslog_handler = SysLogHandler(address='/dev/log')
        except OSError as e:
            app.logger.warning(f"Syslog unavailable, logging to file only: {e}")
            return
        syslog_handler.setLevel(logging.WARNING)
        syslog_handler.setFormatter(logging.Formatter(f'{app.name}: %(levelname)s in %(module)s: %(message)s'))
        app.logger.addHandler(syslog_handler)


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name=None):
    """
    Look up a configuration class

    Args:
        config_name (str): 'development', 'testing' or 'production';
            defaults to FLASK_ENV, and unknown names fall back to development

    Returns:
        The configuration class
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'default')
    return config.get(config_name, config['default'])
