"""
Profile Module
==============

Signed-in users view and replace their profile (name, bio, avatar).
"""

from flask import Blueprint

profile_bp = Blueprint(
    'profile',
    __name__,
    template_folder='templates'
)

from . import routes

__all__ = ['profile_bp']
