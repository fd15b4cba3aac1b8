"""
Batch relevance refresh (hourly).

1. Tagging pass: classify active, unresolved trends whose content or
   reference snapshot changed since they were last tagged.
2. Scoring: one pure task per active organization, run on a thread pool
   over an in-memory snapshot of the trend set.
3. Persistence (main thread): per organization, supersede cached results
   and append filter-log entries for trends left off the slate. A failing
   organization is rolled back, recorded on the run row and skipped.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from flask import current_app

from relevance_engine import db
from relevance_engine.db_retry import with_db_retry
from relevance_engine.lib.time import utcnow_naive
from relevance_engine.models import (
    OrganizationProfile,
    RelevanceRefreshRun,
    TopicAffinity,
    Trend,
)
from relevance_engine.relevance.classifier import (
    DomainClassifier,
    apply_tags,
    content_hash,
    needs_tagging,
    trend_inputs,
)
from relevance_engine.relevance.exceptions import OrganizationNotFoundError
from relevance_engine.relevance.records import OrganizationContext, ScoredTrend, TrendSnapshot
from relevance_engine.relevance.reference import ReferenceTables, load_reference_tables
from relevance_engine.relevance.scorer import score_organization
from relevance_engine.relevance.selector import DiversitySelector
from relevance_engine.relevance.semantic_fallback import build_semantic_fallback
from relevance_engine.relevance.store import append_filter_log, replace_results

logger = logging.getLogger(__name__)


# =============================================================================
# TAGGING PASS
# =============================================================================

def build_classifier(reference: ReferenceTables, app_config=None) -> DomainClassifier:
    app_config = app_config if app_config is not None else current_app.config
    fallback = build_semantic_fallback(app_config, reference.policy_domains)
    return DomainClassifier(reference, semantic_fallback=fallback)


def tag_trends(classifier: DomainClassifier, force: bool = False) -> Dict[str, int]:
    """Tag active, unresolved trends; unchanged ones are skipped unless forced."""
    stats = {'tagged': 0, 'skipped': 0, 'failed': 0}
    trend_ids = [row.id for row in Trend.query.with_entities(Trend.id).filter(
        Trend.is_active.is_(True),
        Trend.resolved_at.is_(None),
    ).order_by(Trend.id).all()]

    for trend_id in trend_ids:
        try:
            trend = db.session.get(Trend, trend_id)
            inputs = trend_inputs(trend)
            inputs_hash = content_hash(inputs)
            if not force and not needs_tagging(trend, classifier.version, inputs_hash):
                stats['skipped'] += 1
                continue

            tags = classifier.classify(**inputs)
            apply_tags(trend, tags, classifier.version, inputs_hash)
            db.session.commit()
            stats['tagged'] += 1
        except Exception as e:
            db.session.rollback()
            stats['failed'] += 1
            logger.error(f"Tagging failed for trend {trend_id}: {e}", exc_info=True)
            continue

    logger.info(f"Tagging pass: {stats}")
    return stats


# =============================================================================
# SNAPSHOTS
# =============================================================================

def load_trend_snapshots() -> List[TrendSnapshot]:
    trends = Trend.query.filter(Trend.is_active.is_(True)).order_by(Trend.id).all()
    return [TrendSnapshot.from_model(t) for t in trends]


def load_organization_context(organization_id: int) -> OrganizationContext:
    profile = db.session.get(OrganizationProfile, organization_id)
    if profile is None:
        raise OrganizationNotFoundError(organization_id)
    affinities = TopicAffinity.query.filter_by(organization_id=organization_id).all()
    return OrganizationContext.from_model(profile, affinities)


def load_organization_contexts() -> List[OrganizationContext]:
    profiles = OrganizationProfile.query.filter(
        OrganizationProfile.is_active.is_(True)
    ).order_by(OrganizationProfile.id).all()
    if not profiles:
        return []

    by_org: Dict[int, list] = {p.id: [] for p in profiles}
    for affinity in TopicAffinity.query.filter(TopicAffinity.organization_id.in_(list(by_org))).all():
        by_org[affinity.organization_id].append(affinity)

    return [OrganizationContext.from_model(p, by_org[p.id]) for p in profiles]


def selector_for(org: OrganizationContext, app_config=None, slate_size: Optional[int] = None) -> DiversitySelector:
    app_config = app_config if app_config is not None else current_app.config
    min_score = org.min_relevance_score
    if min_score is None:
        min_score = app_config.get('MIN_SLATE_SCORE', DiversitySelector.DEFAULT_MIN_SCORE)
    if slate_size is None:
        slate_size = app_config.get('DEFAULT_SLATE_SIZE', DiversitySelector.DEFAULT_SLATE_SIZE)
    return DiversitySelector(slate_size=slate_size, min_score=min_score)


# =============================================================================
# SCORING
# =============================================================================

def score_all(orgs: Sequence[OrganizationContext], trends: Sequence[TrendSnapshot],
              max_workers: int = 4) -> Tuple[Dict[int, List[ScoredTrend]], Dict[int, str]]:
    """
    Score every organization in parallel. Returns (results by org id,
    error message by org id); one organization failing never affects others.
    """
    results: Dict[int, List[ScoredTrend]] = {}
    errors: Dict[int, str] = {}
    if not orgs:
        return results, errors

    trends = tuple(trends)
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(orgs)))) as executor:
        future_to_org = {
            executor.submit(score_organization, org, trends): org.id
            for org in orgs
        }
        for future in as_completed(future_to_org):
            org_id = future_to_org[future]
            try:
                results[org_id] = future.result()
            except Exception as e:
                errors[org_id] = str(e)
                logger.error(f"Scoring failed for organization {org_id}: {e}", exc_info=True)

    return results, errors


def persist_organization(org: OrganizationContext, results: List[ScoredTrend], run_id: Optional[int] = None,
                         app_config=None, now: Optional[datetime] = None, log_filtered: bool = True) -> Dict[str, int]:
    """Supersede cached results and log what the slate left out. Caller commits."""
    selection = selector_for(org, app_config).select(results, org.policy_domains)
    stored = replace_results(org.id, results, now)
    logged = append_filter_log(org.id, selection.filtered, run_id, now) if log_filtered else 0
    return {'stored': stored, 'selected': len(selection.selected), 'filtered': logged}


def recompute_organization(organization_id: int, app_config=None) -> List[ScoredTrend]:
    """
    On-demand recompute for one organization (ingress cache miss).
    Raises OrganizationNotFoundError.
    """
    org = load_organization_context(organization_id)
    results = score_organization(org, load_trend_snapshots())
    try:
        persist_organization(org, results, app_config=app_config, log_filtered=False)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info(f"Recomputed {len(results)} relevance results for organization {organization_id}")
    return results


# =============================================================================
# ENTRY POINT
# =============================================================================

@with_db_retry()
def refresh_relevance(reference: Optional[ReferenceTables] = None, classifier: Optional[DomainClassifier] = None,
                      now: Optional[datetime] = None) -> RelevanceRefreshRun:
    """Tag, score and persist relevance for every active organization."""
    app_config = current_app.config
    now = now or utcnow_naive()

    reference = reference or load_reference_tables()
    classifier = classifier or build_classifier(reference, app_config)

    run = RelevanceRefreshRun(reference_version=reference.version, status='running', started_at=now)
    db.session.add(run)
    db.session.commit()
    run_id = run.id

    tag_stats = tag_trends(classifier)
    # results must postdate the trend rows the tagging pass just wrote
    scored_at = max(now, utcnow_naive())

    trends = load_trend_snapshots()
    orgs = load_organization_contexts()
    logger.info(f"Refresh run {run_id}: scoring {len(trends)} trends for {len(orgs)} organizations")

    results, errors = score_all(orgs, trends, max_workers=app_config.get('RELEVANCE_WORKERS', 4))

    failures = [{'organization_id': org_id, 'error': message} for org_id, message in sorted(errors.items())]
    processed = 0
    for org in orgs:
        if org.id not in results:
            continue
        try:
            persist_organization(org, results[org.id], run_id, app_config, scored_at)
            db.session.commit()
            processed += 1
        except Exception as e:
            db.session.rollback()
            failures.append({'organization_id': org.id, 'error': str(e)})
            logger.error(f"Persisting relevance failed for organization {org.id}: {e}", exc_info=True)
            continue

    run = db.session.get(RelevanceRefreshRun, run_id)
    run.trends_tagged = tag_stats['tagged']
    run.trends_considered = len(trends)
    run.organizations_processed = processed
    run.organizations_failed = len(failures)
    run.failures = failures
    if not failures:
        run.status = 'completed'
    elif processed:
        run.status = 'partial'
    else:
        run.status = 'failed'
    run.finished_at = utcnow_naive()
    db.session.commit()

    from relevance_engine.relevance.service import invalidate_slates
    invalidate_slates([org.id for org in orgs])

    logger.info(
        f"Refresh run {run_id} {run.status}: {processed} organizations, "
        f"{len(failures)} failed, {tag_stats['tagged']} trends tagged"
    )
    return run
