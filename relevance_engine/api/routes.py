"""
Relevance API Endpoints

Read endpoints for ranked slates and score explanations, plus job triggers
for an external cron (guarded by the X-Cron-Secret header).
"""
import hmac
import logging
from functools import wraps

from flask import Blueprint, request, jsonify, current_app

from relevance_engine import limiter
from relevance_engine.api.errors import api_error
from relevance_engine.db_retry import cleanup_db_session

logger = logging.getLogger(__name__)

api_bp = Blueprint('relevance_api', __name__)


def require_cron_secret(view):
    """Reject job triggers without the configured shared secret."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        expected = current_app.config.get('CRON_SECRET')
        provided = request.headers.get('X-Cron-Secret', '')
        if not expected or not hmac.compare_digest(provided, expected):
            logger.warning(f"Rejected job trigger {request.path} from {request.remote_addr}")
            return api_error('unauthorized', 'A valid X-Cron-Secret header is required.', 401)
        return view(*args, **kwargs)
    return wrapper


@api_bp.route('/organizations/<int:organization_id>/trends', methods=['GET'])
@limiter.limit("120 per minute")
def ranked_trends(organization_id):
    """
    Ranked trend slate for an organization.

    Query Parameters:
        limit (optional): slate size, capped at MAX_SLATE_SIZE

    Returns:
        200: {"organization_id", "limit", "count", "trends": [...]}
        400: Invalid limit
        404: Unknown organization
    """
    from relevance_engine.relevance.service import get_ranked_trends

    limit = request.args.get('limit')
    if limit is not None:
        try:
            limit = int(limit)
        except ValueError:
            return api_error('invalid_limit', 'The limit parameter must be a positive integer.', 400)
        if limit < 1:
            return api_error('invalid_limit', 'The limit parameter must be a positive integer.', 400)

    return jsonify(get_ranked_trends(organization_id, limit))


@api_bp.route('/organizations/<int:organization_id>/trends/<int:trend_id>/relevance', methods=['GET'])
@limiter.limit("60 per minute")
def trend_relevance(organization_id, trend_id):
    """Explain how a trend scores for an organization."""
    from relevance_engine.relevance.service import explain_relevance

    return jsonify(explain_relevance(organization_id, trend_id))


@api_bp.route('/jobs/refresh-relevance', methods=['POST'])
@limiter.limit("10 per hour")
@require_cron_secret
def trigger_refresh():
    from relevance_engine.relevance.batch import refresh_relevance

    try:
        run = refresh_relevance()
        return jsonify({
            'run_id': run.id,
            'status': run.status,
            'reference_version': run.reference_version,
            'trends_tagged': run.trends_tagged,
            'organizations_processed': run.organizations_processed,
            'organizations_failed': run.organizations_failed,
        })
    finally:
        cleanup_db_session()


@api_bp.route('/jobs/run-learning', methods=['POST'])
@limiter.limit("10 per hour")
@require_cron_secret
def trigger_learning():
    from relevance_engine.relevance.feedback import run_learning_pipeline

    try:
        stats = run_learning_pipeline(
            lookback_days=current_app.config.get('FEEDBACK_LOOKBACK_DAYS', 7),
            batch_size=current_app.config.get('FEEDBACK_BATCH_SIZE', 50),
        )
        return jsonify(stats)
    finally:
        cleanup_db_session()


@api_bp.route('/jobs/decay-affinities', methods=['POST'])
@limiter.limit("10 per hour")
@require_cron_secret
def trigger_decay():
    from relevance_engine.relevance.decay import decay_stale_affinities

    try:
        return jsonify(decay_stale_affinities())
    finally:
        cleanup_db_session()
