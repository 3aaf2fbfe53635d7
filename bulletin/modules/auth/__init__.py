"""
Bulletin Auth Module

Provides user authentication functionality including:
- Username/password registration and login (bcrypt hashes)
- Server-side session records with a fixed lifetime
- Per-request auth context and view decorators
"""

from flask import Blueprint

auth_bp = Blueprint(
    'auth',
    __name__,
    template_folder='templates'
)

from . import routes
from .database import User, UserSession, AuthDatabase
from .service import AuthContext, register, login, logout, resolve_auth_context
from .utils import with_auth, login_required, admin_required, current_auth

__all__ = [
    'auth_bp', 'User', 'UserSession', 'AuthDatabase', 'AuthContext',
    'register', 'login', 'logout', 'resolve_auth_context',
    'with_auth', 'login_required', 'admin_required', 'current_auth',
]
