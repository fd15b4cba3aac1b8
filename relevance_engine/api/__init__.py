"""
Relevance API Blueprint

- Ranked trend slates per organization
- Per-trend relevance explanation
- Job triggers for an external scheduler

All endpoints return JSON with the standardized error format and are
rate limited.
"""
from flask_cors import CORS

from relevance_engine.api.errors import register_error_handlers
from relevance_engine.api.routes import api_bp


def init_api(app):
    """
    Initialize the API blueprint with CORS and error handlers.

    Args:
        app: Flask application instance
    """
    # Blueprint objects are module singletons; guard against re-registering
    # handlers when create_app() is called multiple times in tests.
    if not getattr(api_bp, "_relevance_error_handlers_registered", False):
        register_error_handlers(api_bp)
        api_bp._relevance_error_handlers_registered = True

    app.register_blueprint(api_bp, url_prefix='/api')

    CORS(
        app,
        resources={
            r"/api/*": {
                "origins": "*",
                "methods": ['GET', 'POST', 'OPTIONS'],
                "allow_headers": ['Content-Type', 'X-Requested-With'],
                "max_age": 86400,
            }
        },
        supports_credentials=False,
    )

    app.logger.info("Relevance API initialized")


__all__ = ['init_api', 'api_bp']
