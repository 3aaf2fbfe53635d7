"""
Shared fixtures for the Bulletin test suite.

Each test gets a throwaway directory holding the SQLite database, the log
database, and an API module directory filled from API_MODULES.
"""

import os
import shutil
import tempfile
import textwrap

import pytest
from flask import Flask

from bulletin import Bulletin
from bulletin.core import db
from bulletin.modules.auth import AuthDatabase

PASSWORD = 'correct-horse-9'

API_MODULES = {
    'echo': '''
        def get(params, request, response):
            return {'x': 1}
    ''',
    'getonly': '''
        config = {'name': 'getonly', 'methods': ['get']}

        def get(params, request, response):
            return 'got'

        def post(params, request, response):
            return 'posted'
    ''',
    'fallback': '''
        def api(params, request, response):
            return {'via': 'api'}

        def execute(params, request, response):
            return {'via': 'execute'}
    ''',
    'execonly': '''
        def execute(params, request, response):
            return {'via': 'execute'}
    ''',
    'nohandler': '''
        config = {'name': 'nohandler', 'description': 'Metadata only'}
    ''',
    'boom': '''
        def post(params, request, response):
            raise ValueError('kaboom')

        def home_page(user):
            raise RuntimeError('widget failed')
    ''',
    'widget': '''
        home_page = '<div class="widget">static widget</div>'
    ''',
    'greeter': '''
        def home_page(user):
            name = user.username if user is not None else 'stranger'
            return f'<div class="widget">hello {name}</div>'
    ''',
    'params': '''
        def api(params, request, response):
            return {'method': request.method, 'params': params}
    ''',
    'headers': '''
        def get(params, request, response):
            response.headers['X-Api-Module'] = 'headers'
            return 'ok'
    ''',
}


def write_api_module(apis_dir, name, source):
    path = os.path.join(apis_dir, f"{name}.py")
    with open(path, 'w', encoding='utf-8') as fh:
        fh.write(textwrap.dedent(source).lstrip())
    return path


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="bulletin-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def apis_dir(tmp_db_dir):
    d = os.path.join(tmp_db_dir, 'apis')
    os.makedirs(d)
    for name, source in API_MODULES.items():
        write_api_module(d, name, source)
    return d


def make_app(tmp_db_dir, apis_dir, **overrides):
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = tmp_db_dir
    app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///" + os.path.join(tmp_db_dir, "bulletin.db")
    app.config["LOG_DB"] = os.path.join(tmp_db_dir, "app_logs.db")
    app.config["APIS_DIR"] = apis_dir
    app.config["BCRYPT_ROUNDS"] = 4
    app.config.update(overrides)
    Bulletin(app)
    return app


@pytest.fixture
def app(tmp_db_dir, apis_dir):
    """Fully initialised Flask app with all Bulletin modules registered."""
    app = make_app(tmp_db_dir, apis_dir)
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    """An admin account created directly in the database."""
    with app.app_context():
        user = AuthDatabase.create_user('editor', PASSWORD, email='editor@example.com', role='admin')
        return user.id


def register(client, username, password=PASSWORD, email=None):
    return client.post('/register', data={
        'username': username,
        'password': password,
        'email': email or f"{username}@example.com",
    })


def login(client, username, password=PASSWORD):
    return client.post('/login', data={'username': username, 'password': password})
