"""
Bulletin Modules
================

Flask blueprint modules that make up the site.
"""

__all__ = ['api', 'auth', 'dashboard', 'home', 'news', 'profile']
