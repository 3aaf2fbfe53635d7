"""
Bulletin - A small Flask news site
==================================

News feed, user accounts, an admin panel, and a plugin-style API router
that serves Python modules dropped into a directory as /api/config.<name>.

Usage:
    from flask import Flask
    from bulletin import Bulletin

    app = Flask(__name__)
    Bulletin(app)
"""

__version__ = '0.1.0'

import os
from datetime import timedelta

import click
from flask_cors import CORS

from .core import BulletinError, Config, Database, ForbiddenError, db, logger
from .modules.api import api_bp, api_pages_bp, ApiRegistry
from .modules.auth import auth_bp, AuthDatabase
from .modules.dashboard import dashboard_bp
from .modules.home import home_bp
from .modules.news import news_bp
from .modules.profile import profile_bp

# Config keys copied from Config into app.config unless the app already set them
_CONFIG_DEFAULTS = (
    'SECRET_KEY', 'BRAND_NAME', 'DB_DIR', 'APIS_DIR', 'API_HOT_RELOAD',
    'API_CORS_ORIGINS', 'BCRYPT_ROUNDS', 'SESSION_LIFETIME_HOURS', 'PORT',
)

_BLUEPRINTS = (
    ('auth', auth_bp),
    ('home', home_bp),
    ('profile', profile_bp),
    ('dashboard', dashboard_bp),
    ('news', news_bp),
    ('api', api_bp),
    ('api_pages', api_pages_bp),
)


class Bulletin:
    """Flask extension wiring the Bulletin modules into an app."""

    def __init__(self, app=None):
        self.apis = ApiRegistry()
        self._registered = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        for key in _CONFIG_DEFAULTS:
            if app.config.get(key) is None:
                app.config[key] = getattr(Config, key)
        # Database files live under the app's DB_DIR unless given explicitly
        db_dir = app.config['DB_DIR']
        if app.config.get('LOG_DB') is None:
            app.config['LOG_DB'] = os.getenv('LOG_DB') or os.path.join(db_dir, 'app_logs.db')
        if app.config.get('SQLALCHEMY_DATABASE_URI') is None:
            app.config['SQLALCHEMY_DATABASE_URI'] = (
                os.getenv('DATABASE_URL') or 'sqlite:///' + os.path.join(db_dir, 'bulletin.db')
            )
        app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(hours=int(app.config['SESSION_LIFETIME_HOURS']))
        app.config.setdefault('SESSION_COOKIE_HTTPONLY', True)
        app.config.setdefault('SESSION_COOKIE_SAMESITE', 'Lax')

        Database.ensure_dir_for(app.config['SQLALCHEMY_DATABASE_URI'])
        db.init_app(app)

        for name, blueprint in _BLUEPRINTS:
            app.register_blueprint(blueprint)
            self._registered.append(name)

        CORS(app, resources={r"/api/*": {"origins": app.config['API_CORS_ORIGINS']}})

        app.register_error_handler(ForbiddenError, self._forbidden)
        app.context_processor(self._inject_template_context)
        self._register_commands(app)

        app.extensions['bulletin'] = self

        with app.app_context():
            db.create_all()
            self.apis.init_app(app)

    def get_registered_modules(self):
        return list(self._registered)

    @staticmethod
    def _forbidden(e):
        return 'Forbidden', 403

    @staticmethod
    def _inject_template_context():
        from flask import current_app
        return {'brand_name': current_app.config.get('BRAND_NAME') or 'Bulletin'}

    def _register_commands(self, app):
        @app.cli.command('create-admin')
        @click.argument('username')
        @click.argument('password')
        @click.argument('email', required=False)
        def create_admin(username, password, email=None):
            """Create an admin account."""
            try:
                user = AuthDatabase.create_user(username, password, email=email, role='admin')
            except BulletinError as e:
                raise click.ClickException(e.message)
            logger.info('cli', f"Admin account created: {user.username}")
            click.echo(f"Admin account created: {user.username}")

        @app.cli.command('promote-admin')
        @click.argument('username')
        def promote_admin(username):
            """Give an existing user the admin role."""
            user = AuthDatabase.set_role(username, 'admin')
            if user is None:
                raise click.ClickException(f"No such user: {username}")
            logger.info('cli', f"User promoted to admin: {username}")
            click.echo(f"{username} is now an admin")

        @app.cli.command('reload-apis')
        def reload_apis():
            """Re-read API modules and list them."""
            names = self.apis.reload()
            click.echo(', '.join(names) if names else 'No API modules found')

        @app.cli.command('prune-logs')
        @click.option('--days', default=30, show_default=True, help='Keep entries newer than this.')
        def prune_logs(days):
            """Delete old log entries."""
            deleted = logger.cleanup_old_logs(days)
            click.echo(f"Deleted {deleted} log entries")


__all__ = ['Bulletin', 'db', '__version__']
