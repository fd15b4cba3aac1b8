"""
Standardized API Error Responses

All API errors return: {"error": "code", "message": "human readable message"}
"""
from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException

from relevance_engine.relevance.exceptions import OrganizationNotFoundError, TrendNotFoundError


def api_error(code: str, message: str, status_code: int = 400):
    """
    Create a standardized API error response.

    Example:
        return api_error('invalid_limit', 'limit must be a positive integer.', 400)
    """
    response = jsonify({
        'error': code,
        'message': message
    })
    response.status_code = status_code
    return response


def register_error_handlers(blueprint):
    """
    Register error handlers for the API blueprint.
    Ensures all errors return JSON, not HTML.
    """

    @blueprint.errorhandler(OrganizationNotFoundError)
    def organization_not_found(e):
        return api_error('organization_not_found', str(e), 404)

    @blueprint.errorhandler(TrendNotFoundError)
    def trend_not_found(e):
        return api_error('trend_not_found', str(e), 404)

    @blueprint.errorhandler(401)
    def unauthorized(e):
        return api_error('unauthorized', 'Authentication required.', 401)

    @blueprint.errorhandler(429)
    def rate_limited(e):
        return api_error('rate_limited', 'Too many requests. Please retry in 60 seconds.', 429)

    @blueprint.errorhandler(500)
    def internal_error(e):
        current_app.logger.error(f'API Internal Error: {e}')
        return api_error('internal_error', 'An internal error occurred. Please try again later.', 500)

    @blueprint.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle any other HTTP exceptions with JSON response."""
        return api_error(
            e.name.lower().replace(' ', '_'),
            e.description or str(e),
            e.code
        )
