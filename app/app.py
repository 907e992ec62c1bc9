"""
AtCreator - Contact tagging and @-handle generation
Application Factory and initialization
"""
import warnings
import os
import sys
import logging

# Suppress Flask-Limiter in-memory storage warning
warnings.filterwarnings("ignore", category=UserWarning, module="flask_limiter")

import flask.cli
flask.cli.show_server_banner = lambda *args: None

# Core Flask imports
from flask import Flask
import structlog

# Local imports
from constants import BUILD_VERSION
from settings import load_settings
from db import db, init_db
from utils import ColoredFormatter, FilterRemoveDateFromWerkzeugLogs, get_or_create_secret_key
from auth import auth_blueprint, login_manager, limiter, init_users
from exceptions import register_exception_handlers
from metrics import init_metrics
from services.contact_book import ContactBook

# Routes
from routes.people import people_bp
from routes.tags import tags_bp
from routes.generation import generation_bp
from routes.system import system_bp

# Logging configuration
formatter = ColoredFormatter(
    '[%(asctime)s.%(msecs)03d] %(levelname)s (%(module)s) %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(formatter)

logging.basicConfig(
    level=logging.INFO,
    handlers=[handler]
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if os.environ.get('LOG_FORMAT') == 'json' else structlog.dev.ConsoleRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger('main')

# Apply filter to hide date from http access logs
logging.getLogger('werkzeug').addFilter(FilterRemoveDateFromWerkzeugLogs())


def create_app(test_config=None):
    """Application factory"""
    test_config = test_config or {}
    app = Flask(__name__)

    app_settings = load_settings(force=True, config_file=test_config.get("CONFIG_FILE"))

    app.config["SQLALCHEMY_DATABASE_URI"] = app_settings["database"]["uri"]
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config.update(test_config)
    if not app.config.get('SECRET_KEY'):
        app.config['SECRET_KEY'] = get_or_create_secret_key()

    # Initialize components
    db.init_app(app)

    # Initialize login manager
    login_manager.init_app(app)

    limiter.init_app(app)

    # Register exception handlers
    register_exception_handlers(app)

    # Contact book services, reachable as current_app.contacts
    ContactBook(db).init_app(app)

    # Register blueprints
    app.register_blueprint(auth_blueprint)
    app.register_blueprint(people_bp)
    app.register_blueprint(tags_bp)
    app.register_blueprint(generation_bp)
    app.register_blueprint(system_bp)

    # Initialize metrics
    init_metrics(app)

    # Initialize database
    init_db(app)
    init_users(app)

    logger.info(f'Build Version: {BUILD_VERSION}')
    return app


if __name__ == '__main__':
    app = create_app()
    logger.info('Starting server on port 8466...')
    app.run(debug=False, use_reloader=False, host="0.0.0.0", port=8466)
