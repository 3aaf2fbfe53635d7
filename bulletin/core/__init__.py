"""
Bulletin Core
=============

Core utilities and shared functionality for Bulletin modules.
"""

from .config import Config, get_config_value
from .database import Database, db, utcnow
from .errors import (
    BulletinError, ConflictError, AuthError, ForbiddenError, NotFoundError,
    MethodNotAllowedError, BadRequestError, HandlerError,
)
from .logging_service import LoggingService, logger

__all__ = [
    'Config', 'get_config_value', 'Database', 'db', 'utcnow',
    'BulletinError', 'ConflictError', 'AuthError', 'ForbiddenError', 'NotFoundError',
    'MethodNotAllowedError', 'BadRequestError', 'HandlerError',
    'LoggingService', 'logger',
]
