"""
Error taxonomy shared by the service layer

Services raise these before touching the database; the handlers in
middleware/errors.py turn them into JSON responses.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class ValidationError(ServiceError):
    """Rejected input (empty message, missing profile fields, ...)"""
    status_code = 400


class AuthorizationError(ServiceError):
    """Action attempted by a non-participant or non-owner"""
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    """Uniqueness or state-machine violation"""
    status_code = 409


class DependencyError(ServiceError):
    """Store, cache or auth provider unavailable"""
    status_code = 503
