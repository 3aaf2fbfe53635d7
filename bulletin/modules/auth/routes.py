from flask import render_template, request, redirect, url_for, g

from bulletin.core import AuthError, ConflictError
from . import auth_bp
from . import service


@auth_bp.before_app_request
def load_auth_context():
    """Resolve the session's user once per request"""
    g.auth = service.resolve_auth_context()


@auth_bp.app_context_processor
def inject_auth():
    return {'auth': g.get('auth', service.ANONYMOUS)}


@auth_bp.route('/login', methods=['GET'])
def login():
    """Login page route"""
    return render_template('auth/login.html', error=None)


@auth_bp.route('/login', methods=['POST'])
def login_form():
    """Handle username/password sign-in"""
    username = request.form.get('username', '').strip()
    password = request.form.get('password', '')

    try:
        g.auth = service.login(username, password)
    except AuthError as e:
        return render_template('auth/login.html', error=e.message, username=username)

    return redirect(url_for('home.index'))


@auth_bp.route('/register', methods=['GET'])
def register():
    """Register page route"""
    return render_template('auth/register.html', error=None)


@auth_bp.route('/register', methods=['POST'])
def register_form():
    """Create an account and sign it in"""
    username = request.form.get('username', '').strip()
    password = request.form.get('password', '')
    email = request.form.get('email', '').strip().lower() or None

    try:
        g.auth = service.register(username, password, email)
    except (ConflictError, AuthError) as e:
        return render_template('auth/register.html', error=e.message, username=username, email=email)

    return redirect(url_for('home.index'))


@auth_bp.route('/logout')
def logout():
    """Sign out user"""
    service.logout()
    g.auth = service.ANONYMOUS
    return redirect(url_for('home.index'))
