"""
Ingress: ranked trend slates for one organization.

Slates are built from the cached relevance results, recomputing on demand
when the organization has no results yet or when its profile or any cached
trend changed after the results were computed. Finished slates are held in
Flask-Caching under a per-organization generation key, which the batch
refresh bumps to invalidate them.
"""

import logging
from typing import Iterable, List, Optional

from flask import current_app

from relevance_engine import cache, db
from relevance_engine.lib.time import utcnow_naive
from relevance_engine.models import OrganizationProfile, RelevanceResult, Trend
from relevance_engine.relevance.batch import (
    load_organization_context,
    recompute_organization,
    selector_for,
)
from relevance_engine.relevance.exceptions import OrganizationNotFoundError, TrendNotFoundError
from relevance_engine.relevance.records import OrganizationContext, ScoredTrend, TrendSnapshot
from relevance_engine.relevance.scorer import score_trend
from relevance_engine.relevance.store import load_results

logger = logging.getLogger(__name__)


def _generation_key(organization_id: int) -> str:
    return f"slate_gen_{organization_id}"


def slate_cache_key(organization_id: int, limit: int, profile_version=None) -> str:
    """Changes whenever the batch refresh runs or the profile is edited."""
    generation = cache.get(_generation_key(organization_id)) or 0
    return f"slate_{organization_id}_{generation}_{profile_version or 0}_{limit}"


def _profile_version(profile: OrganizationProfile) -> int:
    return int(profile.updated_at.timestamp()) if profile.updated_at else 0


def invalidate_slates(organization_ids: Iterable[int]) -> None:
    stamp = utcnow_naive().timestamp()
    for organization_id in organization_ids:
        try:
            cache.set(_generation_key(organization_id), stamp, timeout=0)
        except Exception as e:
            logger.warning(f"Could not invalidate slate cache for organization {organization_id}: {e}")


def cache_is_stale(profile: OrganizationProfile, rows: List[RelevanceResult]) -> bool:
    if not rows:
        return True
    computed = [r.computed_at for r in rows]
    if any(c is None for c in computed):
        return True
    oldest = min(computed)
    if profile.updated_at and profile.updated_at > oldest:
        return True
    return any(
        r.trend is not None and r.trend.updated_at and r.computed_at and r.trend.updated_at > r.computed_at
        for r in rows
    )


def clamp_limit(limit: Optional[int]) -> int:
    config = current_app.config
    default = config.get('DEFAULT_SLATE_SIZE', 10)
    maximum = config.get('MAX_SLATE_SIZE', 50)
    if limit is None:
        return default
    return max(1, min(int(limit), maximum))


def get_ranked_trends(organization_id: int, limit: Optional[int] = None) -> dict:
    """
    Ranked, annotated slate for an organization.
    Raises OrganizationNotFoundError.
    """
    profile = db.session.get(OrganizationProfile, organization_id)
    if profile is None:
        raise OrganizationNotFoundError(organization_id)

    limit = clamp_limit(limit)
    key = slate_cache_key(organization_id, limit, _profile_version(profile))
    cached = cache.get(key)
    if cached is not None:
        return cached

    rows = load_results(organization_id)
    if cache_is_stale(profile, rows):
        logger.info(f"Relevance cache stale for organization {organization_id}, recomputing")
        results = recompute_organization(organization_id)
        invalidate_slates([organization_id])
        key = slate_cache_key(organization_id, limit, _profile_version(profile))
    else:
        results = [ScoredTrend.from_model(r) for r in rows]

    org = OrganizationContext.from_model(profile)
    selection = selector_for(org, slate_size=limit).select(results, org.policy_domains)

    payload = {
        'organization_id': organization_id,
        'limit': limit,
        'count': len(selection.selected),
        'trends': [r.to_dict() for r in selection.selected],
    }
    cache.set(key, payload, timeout=current_app.config.get('SLATE_CACHE_TIMEOUT', 300))
    return payload


def explain_relevance(organization_id: int, trend_id: int) -> dict:
    """
    Live score for one (organization, trend) pair with the cached result
    alongside, for debugging and the explain endpoint.
    """
    org = load_organization_context(organization_id)
    trend = db.session.get(Trend, trend_id)
    if trend is None:
        raise TrendNotFoundError(trend_id)

    live = score_trend(TrendSnapshot.from_model(trend), org)
    cached = RelevanceResult.query.filter_by(organization_id=organization_id, trend_id=trend_id).first()

    return {
        'organization_id': organization_id,
        'trend': {
            'id': trend.id,
            'title': trend.title,
            'policy_domains': list(trend.policy_domains or []),
            'geographies': list(trend.geographies or []),
            'geo_level': trend.geo_level,
            'politicians': list(trend.politicians_mentioned or []),
            'organizations': list(trend.organizations_mentioned or []),
            'legislation': list(trend.legislation_mentioned or []),
            'evidence_by_domain': dict(trend.evidence_by_domain or {}),
            'is_breaking': bool(trend.is_breaking),
            'tagger_version': trend.tagger_version,
        },
        'relevance': live.to_dict(),
        'cached_score': cached.score if cached else None,
        'cached_at': cached.computed_at.isoformat() if cached and cached.computed_at else None,
    }
