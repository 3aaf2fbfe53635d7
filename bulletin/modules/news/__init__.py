"""
News Module
===========

News articles shown on the home page. Articles are created by admins
only and are immutable once posted.
"""

from flask import Blueprint

news_bp = Blueprint(
    'news',
    __name__,
    template_folder='templates'
)

from . import routes
from .database import News, NewsDatabase

__all__ = ['news_bp', 'News', 'NewsDatabase']
