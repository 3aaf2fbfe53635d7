from functools import wraps

from flask import g, redirect, url_for

from bulletin.core import ForbiddenError
from .service import ANONYMOUS


def current_auth():
    """The AuthContext resolved for this request (anonymous outside one)"""
    return g.get('auth', ANONYMOUS)


def with_auth(f):
    """Pass the request's AuthContext to the view as ``auth``"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        return f(*args, auth=current_auth(), **kwargs)
    return decorated_function


def login_required(f):
    """Decorator to require authentication; anonymous requests go to /login"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth = current_auth()
        if not auth.is_authenticated:
            return redirect(url_for('auth.login'))
        return f(*args, auth=auth, **kwargs)
    return decorated_function


def admin_required(f):
    """Decorator to require the admin role; anything else is a bare 403"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth = current_auth()
        if not auth.is_admin:
            raise ForbiddenError()
        return f(*args, auth=auth, **kwargs)
    return decorated_function
