"""
ERROR HANDLERS
==============

Turns service exceptions into the JSON error envelope.
"""

import logging

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from chitfund.services.exceptions import (
    AlreadyInactiveError, ConfigError, ConflictError, DataIntegrityError,
    InvalidAmountError, LedgerError, NotFoundError, PersistenceError,
    ValidationError
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    ValidationError: 400,
    InvalidAmountError: 400,
    AlreadyInactiveError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    DataIntegrityError: 500,
    ConfigError: 500,
    PersistenceError: 500,
}


def error_response(error, status, message=None):
    body = {'success': False, 'error': error}
    if message:
        body['message'] = message
    return jsonify(body), status


def status_for(exc):
    for exc_type in type(exc).__mro__:
        if exc_type in STATUS_CODES:
            return STATUS_CODES[exc_type]
    return 500


def register_error_handlers(app):

    @app.errorhandler(LedgerError)
    def handle_ledger_error(exc):
        status = status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, exc)
        else:
            logger.warning("%s %s rejected: %s", request.method, request.path, exc)

        if isinstance(exc, ValidationError):
            return error_response("Validation failed", status, str(exc))
        return error_response(str(exc), status, exc.detail)

    @app.errorhandler(404)
    def handle_not_found(exc):
        return error_response("Route not found", 404, f"Cannot {request.method} {request.path}")

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return error_response(exc.description, exc.code, exc.name)

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response(
            str(exc) or "Internal server error", 500,
            "An error occurred while processing your request"
        )
