import logging
import os

from flask import Flask

from chitfund.extensions import db
from config import Config

logger = logging.getLogger(__name__)


def configure_logging(app):
    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    logging.getLogger('chitfund').setLevel(app.config['LOG_LEVEL'])


def default_database_uri(app):
    """SQLite file inside the app's instance folder"""
    return 'sqlite:///' + os.path.join(app.instance_path, 'chit_fund.db')


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)
    os.makedirs(app.instance_path, exist_ok=True)
    if not app.config.get('SQLALCHEMY_DATABASE_URI'):
        app.config['SQLALCHEMY_DATABASE_URI'] = default_database_uri(app)

    # Initialize extensions
    db.init_app(app)

    # Register blueprints
    from chitfund.routes.chits import chits_bp
    from chitfund.routes.loans import loans_bp
    from chitfund.routes.payments import payments_bp
    from chitfund.routes.reports import reports_bp
    from chitfund.routes.users import users_bp

    app.register_blueprint(reports_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(loans_bp)
    app.register_blueprint(chits_bp)

    from chitfund.errors import register_error_handlers
    from chitfund.cli import register_commands

    register_error_handlers(app)
    register_commands(app)

    with app.app_context():
        from chitfund import models  # noqa: F401
        db.create_all()
        logger.info("Database tables ready (%s)", app.config['APP_ENV'])

    return app
