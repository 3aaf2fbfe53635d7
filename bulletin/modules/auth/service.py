"""
Session/auth operations.

The session cookie only carries a token; the user binding lives in the
user_sessions table and is re-resolved on every request.
"""

from flask import session

from bulletin.core import logger, AuthError
from .database import AuthDatabase

SESSION_KEY = 'session_token'


class AuthContext:
    """Who is making the current request. Resolved once per request."""

    def __init__(self, user=None, token=None):
        self.user = user
        self.token = token

    @property
    def is_authenticated(self):
        return self.user is not None

    @property
    def is_admin(self):
        return self.user is not None and self.user.is_admin

    def __repr__(self):
        return f"<AuthContext {self.user.username if self.user else 'anonymous'}>"


ANONYMOUS = AuthContext()


def establish_session(user):
    """Bind the browser session to a fresh server-side session record"""
    old_token = session.get(SESSION_KEY)
    if old_token:
        AuthDatabase.delete_session(old_token)

    record = AuthDatabase.create_session(user.id)
    session.clear()
    session[SESSION_KEY] = record.token
    session.permanent = True
    return AuthContext(user, record.token)


def register(username, password, email=None):
    user = AuthDatabase.create_user(username, password, email=email, role='user')
    logger.log_user_action('auth', 'register', user_id=str(user.id), details={'username': username})
    return establish_session(user)


def login(username, password):
    try:
        user = AuthDatabase.verify_user_credentials(username, password)
    except AuthError:
        logger.log_security_event('Failed login attempt', {'username': username})
        raise
    logger.log_user_action('auth', 'login', user_id=str(user.id))
    return establish_session(user)


def logout():
    """Destroy the session unconditionally. Safe to call when logged out."""
    token = session.get(SESSION_KEY)
    if token:
        AuthDatabase.delete_session(token)
        logger.log_user_action('auth', 'logout')
    session.clear()


def resolve_auth_context():
    """
    Look up the user behind the current session cookie.

    A missing or expired session, or a session whose user no longer
    exists, yields an anonymous context. The session record is left
    alone when only the user lookup fails.
    """
    token = session.get(SESSION_KEY)
    if not token:
        return ANONYMOUS

    record = AuthDatabase.get_session(token)
    if record is None:
        return ANONYMOUS

    user = AuthDatabase.get_user_by_id(record.user_id)
    if user is None:
        return AuthContext(None, token)
    return AuthContext(user, token)

