"""Error taxonomy and the JSON error handlers that render it."""
from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from activity_tracker.extensions import db


class TrackerError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500

    def __init__(self, message=None, status_code=None):
        super().__init__(message)
        self.message = message or 'Server error'
        if status_code is not None:
            self.status_code = status_code

    @property
    def name(self):
        return type(self).__name__

    def to_dict(self):
        return {'error': self.name, 'message': self.message}


class ValidationError(TrackerError):
    status_code = 400


class DuplicateKey(ValidationError):
    pass


class InvalidState(TrackerError):
    status_code = 400


class Unauthorized(TrackerError):
    status_code = 401


class InvalidCredentials(Unauthorized):
    pass


class Forbidden(TrackerError):
    status_code = 403


class NotFound(TrackerError):
    status_code = 404


class ServerError(TrackerError):
    status_code = 500


def register_error_handlers(app):
    """Every failure leaves a request as JSON; nothing propagates past here."""

    @app.errorhandler(TrackerError)
    def handle_tracker_error(error):
        if error.status_code >= 500:
            current_app.logger.error('%s on %s %s: %s', error.name, request.method, request.path, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        body = {'error': error.name.replace(' ', ''), 'message': error.description}
        return jsonify(body), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        current_app.logger.exception('Unhandled error on %s %s', request.method, request.path)
        db.session.rollback()
        return jsonify(ServerError('Server error').to_dict()), 500
