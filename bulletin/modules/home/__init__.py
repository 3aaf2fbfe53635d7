"""
Home Module
===========

Front page: the news feed plus widgets contributed by API modules.
Also ships the shared page layout.
"""

from flask import Blueprint

home_bp = Blueprint(
    'home',
    __name__,
    template_folder='templates'
)

from . import routes

__all__ = ['home_bp']
