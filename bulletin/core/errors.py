"""
Bulletin error taxonomy.

Page-level errors (ConflictError, AuthError) are caught by the view and
re-rendered into the form. API-level errors are turned into
``{"error": message}`` JSON with the matching status code.
"""


class BulletinError(Exception):
    status_code = 500

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.__class__.__doc__ or 'Error')
        self.message = message or self.__class__.__doc__ or 'Error'
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class ConflictError(BulletinError):
    """Username taken"""
    status_code = 409


class AuthError(BulletinError):
    """Invalid credentials"""
    status_code = 401


class ForbiddenError(BulletinError):
    """Forbidden"""
    status_code = 403


class NotFoundError(BulletinError):
    """API not found"""
    status_code = 404


class MethodNotAllowedError(BulletinError):
    """Method not allowed"""
    status_code = 405


class BadRequestError(BulletinError):
    """Bad request"""
    status_code = 400


class HandlerError(BulletinError):
    """API handler failed"""
    status_code = 500

    # original: the exception raised inside the module handler

    def __init__(self, message=None, original=None):
        super().__init__(message)
        self.original = original
