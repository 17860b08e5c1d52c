# Error taxonomy shared by the stores, the social graph and the routes
from flask import jsonify


class WaveFormError(Exception):
    """Base class for errors reported to the client as ``{"error": message}``."""
    status_code = 500
    default_message = 'Internal server error.'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_response(self):
        return jsonify({"error": self.message}), self.status_code


class InvalidInput(WaveFormError):
    status_code = 400
    default_message = 'Invalid input.'


class InvalidOperation(WaveFormError):
    status_code = 400
    default_message = 'Operation not allowed.'


class Unauthenticated(WaveFormError):
    status_code = 401
    default_message = 'Authentication required.'


class NotFound(WaveFormError):
    status_code = 404
    default_message = 'Not found.'


class Conflict(WaveFormError):
    status_code = 409
    default_message = 'Already exists.'


class InternalFailure(WaveFormError):
    status_code = 500
