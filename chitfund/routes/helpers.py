"""
Request parsing and the JSON response envelope shared by all blueprints.
"""

from flask import jsonify, request

from chitfund.services.exceptions import InvalidAmountError, ValidationError


def api_response(data=None, message=None, status=200):
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    return jsonify(body), status


def json_body():
    """Request JSON as a dict; a missing or malformed body counts as empty."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def require_fields(payload, *names):
    """Values for `names`, rejecting any that are missing or empty."""
    values = [payload.get(name) for name in names]
    if any(value in (None, '', 0) for value in values):
        raise ValidationError(f"Missing required fields: {', '.join(names)}")
    return values


def positive_amount(value, field='Amount'):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(f"{field} must be a whole number")
    if value <= 0:
        raise InvalidAmountError(f"{field} must be greater than 0")
    return value
