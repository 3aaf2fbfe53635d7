"""
Dashboard Module
================

Admin panel: post news, see loaded API modules, reload them, and read
recent log entries. Admin role required.
"""

from flask import Blueprint

# Note: Blueprint name is 'admin'
dashboard_bp = Blueprint(
    'admin',
    __name__,
    url_prefix='/admin',
    template_folder='templates'
)

# Import routes after blueprint is created
from . import routes

__all__ = ['dashboard_bp']
