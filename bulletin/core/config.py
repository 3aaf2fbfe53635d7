import os
from dotenv import load_dotenv

load_dotenv(override=True)


def _env_flag(name, default='false'):
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """
    Base configuration for Bulletin.
    Every value can be provided via environment variables (or a .env file).
    """
    # Flask settings
    SECRET_KEY = os.getenv('SESSION_SECRET') or os.getenv('FLASK_SECRET_KEY')
    BRAND_NAME = os.getenv('BRAND_NAME', 'Bulletin')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    DATABASE_URL = os.getenv('DATABASE_URL') or 'sqlite:///' + os.path.join(DB_DIR, 'bulletin.db')
    LOG_DB = os.getenv('LOG_DB', os.path.join(DB_DIR, 'app_logs.db'))

    # Table names
    USERS_TABLE = "users"
    NEWS_TABLE = "news"
    SESSIONS_TABLE = "user_sessions"
    LOGS_TABLE = "app_logs"

    # Sessions and password hashing
    SESSION_LIFETIME_HOURS = int(os.getenv('SESSION_LIFETIME_HOURS', '24'))
    BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', '10'))

    # API modules
    APIS_DIR = os.getenv('APIS_DIR', os.path.join(os.path.dirname(os.path.dirname(__file__)), 'apis'))
    API_HOT_RELOAD = _env_flag('API_HOT_RELOAD')
    API_CORS_ORIGINS = [o.strip() for o in os.getenv('API_CORS_ORIGINS', '*').split(',') if o.strip()]

    # Port for local server
    PORT = int(os.getenv('PORT', '3000'))


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val is not None:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val is not None:
        return val
    return os.getenv(key, default)
