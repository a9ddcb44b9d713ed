import os


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'your-secret-key-here-make-it-long'
    # Unset means a SQLite file in the Flask instance folder (see create_app)
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    APP_ENV = os.environ.get('APP_ENV', 'development')
    APP_VERSION = os.environ.get('APP_VERSION', '1.0.0')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # How many times a ledger update is re-applied after losing a version race
    LEDGER_MAX_ATTEMPTS = int(os.environ.get('LEDGER_MAX_ATTEMPTS', 3))

    # Week number written by `flask seed-week` when the counter is missing
    INITIAL_WEEK = int(os.environ.get('INITIAL_WEEK', 1))


class TestConfig(Config):
    TESTING = True
    APP_ENV = 'test'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    LOG_LEVEL = 'WARNING'
