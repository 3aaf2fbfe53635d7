"""
Dynamic API Module
==================

Serves the API modules found in APIS_DIR.

Endpoints:
- {GET,POST,PUT,PATCH,DELETE} /api/config.<name> - run the module's handler
- GET /api/info.<name> - the module's declared config
- GET /api - every module's config
- GET /apitest - in-browser tester (signed-in users)
- POST /admin/apis/reload - re-read modules from disk (admins)
"""

from flask import Blueprint

# JSON endpoints
api_bp = Blueprint(
    'api',
    __name__,
    url_prefix='/api'
)

# HTML pages around the API
api_pages_bp = Blueprint(
    'api_pages',
    __name__,
    template_folder='templates'
)

from . import routes
from .registry import ApiModule, ApiRegistry

__all__ = ['api_bp', 'api_pages_bp', 'ApiModule', 'ApiRegistry']
