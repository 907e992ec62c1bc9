"""
AtCreator - Custom Exceptions and Exception Handlers
"""
import structlog
from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = structlog.get_logger('exceptions')


class AtCreatorException(Exception):
    """Base exception for AtCreator"""
    status_code = 400

    def __init__(self, message: str, code: str = "ATCREATOR_ERROR", details=None):
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    def to_dict(self):
        response = {
            'success': False,
            'code': self.code,
            'message': self.message
        }
        if self.details:
            response['details'] = self.details
        return response


class ValidationException(AtCreatorException):
    """Bad input shape, rejected before anything is written"""
    status_code = 400

    def __init__(self, message: str, field: str = None):
        super().__init__(message, code="VALIDATION_ERROR", details={'field': field} if field else None)
        self.field = field
        logger.warning(f"Validation error: {message}")


class NotFoundException(AtCreatorException):
    """Operation targets an id or name that doesn't exist"""
    status_code = 404

    def __init__(self, resource_type: str, identifier=None):
        if identifier is not None:
            message = f"{resource_type} '{identifier}' not found"
        else:
            message = f"{resource_type} not found"
        super().__init__(message, code="NOT_FOUND")
        self.resource_type = resource_type
        self.identifier = identifier
        logger.info(f"Not found: {message}")


class DuplicateException(AtCreatorException):
    """Uniqueness violation on a tag name or a person identity"""
    status_code = 409

    def __init__(self, message: str, existing=None):
        super().__init__(message, code="CONFLICT")
        self.existing = existing
        logger.info(f"Duplicate: {message}")


class PersistenceException(AtCreatorException):
    """The backing store call failed (network, constraint, ...)"""
    status_code = 500

    def __init__(self, message: str, failed_ids=None, applied_ids=None):
        self.failed_ids = list(failed_ids or [])
        self.applied_ids = list(applied_ids or [])
        details = None
        if self.failed_ids or self.applied_ids:
            details = {'failed_ids': self.failed_ids, 'applied_ids': self.applied_ids}
        super().__init__(message, code="PERSISTENCE_ERROR", details=details)
        logger.error(f"Persistence error: {message}", failed_ids=self.failed_ids)


class AuthenticationException(AtCreatorException):
    """Authentication-related exceptions"""
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHORIZED")
        logger.warning(f"Authentication error: {message}")


class AuthorizationException(AtCreatorException):
    """Authorization-related exceptions"""
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, code="FORBIDDEN")
        logger.warning(f"Authorization error: {message}")


def register_exception_handlers(app):
    """Register exception handlers with Flask app"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions"""
        return jsonify({
            'success': False,
            'code': e.name.upper().replace(' ', '_'),
            'message': e.description
        }), e.code

    @app.errorhandler(AtCreatorException)
    def handle_atcreator_exception(e):
        """Handle AtCreator custom exceptions"""
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """Handle all other exceptions"""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'code': 'INTERNAL_ERROR',
            'message': 'An unexpected error occurred'
        }), 500
