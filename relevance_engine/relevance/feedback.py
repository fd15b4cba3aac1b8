"""
Affinity Feedback Loop

Daily learning pipeline over completed campaigns that have not been
feedback-processed yet:

1. Work out how the campaign performed against its baseline (explicit
   performance_vs_baseline, else derived from open/click/conversion rates).
2. Correlate it with the trends active in the 48 hours before it was sent.
   A link needs at least one shared policy domain or topic term and a
   minimum strength; accepted links are stored as correlation records.
3. For every domain/topic shared through an accepted link, fold the
   outcome into the organization's affinity with an EMA:

       new = old * (1 - 0.3) + signal * 0.3,   signal = 0.5 + delta / 100

   clamped into [0.2, 0.95]. So a +40% campaign moves 0.5 to 0.62.

Each topic upsert runs in its own savepoint under a row lock, so one failed
update does not undo the others.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from relevance_engine import db
from relevance_engine.lib.time import utcnow_naive, hours_between
from relevance_engine.models import (
    Campaign,
    Trend,
    TopicAffinity,
    TrendCampaignCorrelation,
)
from relevance_engine.relevance.constants import (
    DEFAULT_AFFINITY,
    AFFINITY_EMA_ALPHA,
    AFFINITY_MIN,
    AFFINITY_MAX,
    CORRELATION_WINDOW_HOURS,
    CORRELATION_MAX_TRENDS,
    CORRELATION_DOMAIN_WEIGHT,
    CORRELATION_TOPIC_WEIGHT,
    CORRELATION_BREAKING_WEIGHT,
    CORRELATION_POSITIVE_WEIGHT,
    CORRELATION_MIN_SCORE,
    OUTCOME_HIGH_PERFORMER,
    OUTCOME_PERFORMER,
    OUTCOME_NEUTRAL,
    OUTCOME_UNDERPERFORMER,
    PERFORMANCE_OPEN_WEIGHT,
    PERFORMANCE_CLICK_WEIGHT,
    PERFORMANCE_CONVERSION_WEIGHT,
    BASELINE_WINDOW_DAYS,
    BASELINE_MIN_CAMPAIGNS,
    DEFAULT_CHANNEL_BASELINES,
    DEFAULT_BASELINE,
)
from relevance_engine.relevance.records import topic_key

logger = logging.getLogger(__name__)


# =============================================================================
# PURE HELPERS
# =============================================================================

def performance_signal(performance_vs_baseline: float) -> float:
    """Map a percent delta onto [0, 1]; 0% is neutral (0.5)."""
    return max(0.0, min(1.0, 0.5 + (performance_vs_baseline or 0.0) / 100.0))


def ema_update(current: float, signal: float, alpha: float = AFFINITY_EMA_ALPHA) -> float:
    updated = current * (1 - alpha) + signal * alpha
    return max(AFFINITY_MIN, min(AFFINITY_MAX, updated))


def outcome_label(performance_vs_baseline: float) -> str:
    if performance_vs_baseline > 30:
        return OUTCOME_HIGH_PERFORMER
    if performance_vs_baseline > 0:
        return OUTCOME_PERFORMER
    if performance_vs_baseline > -20:
        return OUTCOME_NEUTRAL
    return OUTCOME_UNDERPERFORMER


def domain_overlap(trend_domains: Sequence[str], campaign_domains: Sequence[str]) -> List[str]:
    """Case-insensitive equality, in trend order."""
    wanted = {topic_key(d) for d in campaign_domains or []}
    return [d for d in trend_domains or [] if topic_key(d) in wanted]


def topic_overlap(trend_terms: Sequence[str], campaign_topics: Sequence[str]) -> List[str]:
    """Trend terms that contain, or are contained in, a campaign topic."""
    topics = [topic_key(t) for t in campaign_topics or [] if topic_key(t)]
    matched = []
    for term in trend_terms or []:
        key = topic_key(term)
        if not key:
            continue
        if any(key in topic or topic in key for topic in topics):
            matched.append(term)
    return matched


def correlation_strength(domain_count: int, topic_count: int, is_breaking: bool,
                         performance_vs_baseline: float) -> float:
    return min(1.0, (
        domain_count * CORRELATION_DOMAIN_WEIGHT
        + topic_count * CORRELATION_TOPIC_WEIGHT
        + (CORRELATION_BREAKING_WEIGHT if is_breaking else 0.0)
        + (CORRELATION_POSITIVE_WEIGHT if (performance_vs_baseline or 0) > 0 else 0.0)
    ))


def engagement_score(sends: int, opens: int, clicks: int, conversions: int) -> Optional[float]:
    """Weighted open/click/conversion rate, None when nothing was sent."""
    if not sends:
        return None
    open_rate = (opens or 0) / sends
    click_rate = (clicks or 0) / opens if opens else 0.0
    conversion_rate = (conversions or 0) / clicks if clicks else 0.0
    return (
        open_rate * PERFORMANCE_OPEN_WEIGHT
        + click_rate * PERFORMANCE_CLICK_WEIGHT
        + conversion_rate * PERFORMANCE_CONVERSION_WEIGHT
    )


# =============================================================================
# CAMPAIGN PERFORMANCE
# =============================================================================

def organization_baseline(organization_id: int, campaign_type: str, now: Optional[datetime] = None) -> float:
    """
    Rolling 30-day engagement baseline for the organization, or the channel
    default when it has fewer than three measurable campaigns.
    """
    now = now or utcnow_naive()
    since = now - timedelta(days=BASELINE_WINDOW_DAYS)
    recent = Campaign.query.filter(
        Campaign.organization_id == organization_id,
        Campaign.sent_at.isnot(None),
        Campaign.sent_at >= since,
        Campaign.sends > 0,
    ).all()

    scores = [
        s for s in (engagement_score(c.sends, c.opens, c.clicks, c.conversions) for c in recent)
        if s is not None
    ]
    if len(scores) >= BASELINE_MIN_CAMPAIGNS:
        return sum(scores) / len(scores)
    return DEFAULT_CHANNEL_BASELINES.get(campaign_type, DEFAULT_BASELINE)


def campaign_performance(campaign: Campaign, now: Optional[datetime] = None) -> float:
    """Percent above (+) or below (-) baseline; 0 when there is no data."""
    if campaign.performance_vs_baseline is not None:
        return float(campaign.performance_vs_baseline)

    score = engagement_score(campaign.sends, campaign.opens, campaign.clicks, campaign.conversions)
    if score is None:
        logger.info(f"No metrics for campaign {campaign.id}, using neutral performance")
        return 0.0

    baseline = organization_baseline(campaign.organization_id, campaign.campaign_type, now)
    if baseline <= 0:
        return 0.0
    return (score - baseline) / baseline * 100.0


# =============================================================================
# CORRELATION
# =============================================================================

def candidate_trends(sent_at: datetime) -> List[Trend]:
    """Trends active in the window before a send, highest confidence first."""
    window_start = sent_at - timedelta(hours=CORRELATION_WINDOW_HOURS)
    return Trend.query.filter(
        Trend.last_seen_at >= window_start,
        Trend.first_seen_at <= sent_at,
    ).order_by(
        Trend.confidence_score.desc(), Trend.id.asc()
    ).limit(CORRELATION_MAX_TRENDS).all()


def correlate_campaign(campaign: Campaign, performance: float) -> List[TrendCampaignCorrelation]:
    """
    Build (and add to the session) correlation records for one campaign.
    Existing records for the same (trend, campaign) are reused.
    """
    if campaign.sent_at is None:
        return []

    campaign_topics = list(campaign.extracted_topics or [])
    campaign_domains = list(campaign.policy_domains or [])
    correlations = []

    for trend in candidate_trends(campaign.sent_at):
        domains = domain_overlap(trend.policy_domains, campaign_domains)
        topics = topic_overlap(trend.context_terms, campaign_topics)
        if not domains and not topics:
            continue

        strength = correlation_strength(len(domains), len(topics), bool(trend.is_breaking), performance)
        if strength < CORRELATION_MIN_SCORE:
            continue

        record = TrendCampaignCorrelation.query.filter_by(
            trend_id=trend.id, campaign_id=campaign.id
        ).first()
        if record is None:
            record = TrendCampaignCorrelation(trend_id=trend.id, campaign_id=campaign.id)
            db.session.add(record)

        record.organization_id = campaign.organization_id
        record.correlation_score = round(strength, 4)
        record.domain_overlap = domains
        record.topic_overlap = topics
        record.time_delta_hours = round(hours_between(trend.first_seen_at or campaign.sent_at, campaign.sent_at), 1)
        record.campaign_performance = performance
        record.outcome_label = outcome_label(performance)
        correlations.append(record)

    return correlations


# =============================================================================
# AFFINITY UPDATES
# =============================================================================

def apply_outcome(affinity: TopicAffinity, performance: float, now: datetime) -> None:
    """
    Fold one campaign outcome into an affinity row.
    Manually overridden scores keep their value; usage stats still update.
    """
    if affinity.source != TopicAffinity.SOURCE_OVERRIDE:
        current = affinity.affinity_score if affinity.affinity_score is not None else DEFAULT_AFFINITY
        affinity.affinity_score = round(ema_update(current, performance_signal(performance)), 4)

    uses = affinity.times_used or 0
    previous_avg = affinity.avg_performance or 0.0
    affinity.avg_performance = (previous_avg * uses + performance) / (uses + 1)
    affinity.best_performance = performance if uses == 0 else max(affinity.best_performance or 0.0, performance)
    affinity.times_used = uses + 1
    affinity.last_used_at = now


def upsert_affinity(organization_id: int, topic: str, performance: float, now: datetime) -> TopicAffinity:
    """Atomic per-(organization, topic) upsert inside a savepoint."""
    key = topic_key(topic)
    with db.session.begin_nested():
        affinity = TopicAffinity.query.filter_by(
            organization_id=organization_id, topic=key
        ).with_for_update().first()
        if affinity is None:
            affinity = TopicAffinity(
                organization_id=organization_id,
                topic=key,
                affinity_score=DEFAULT_AFFINITY,
                times_used=0,
                source=TopicAffinity.SOURCE_LEARNED,
            )
            db.session.add(affinity)
        apply_outcome(affinity, performance, now)
    return affinity


def learned_topics(correlations: Iterable[TrendCampaignCorrelation]) -> List[str]:
    """Distinct affinity keys shared through the accepted correlations."""
    keys = []
    for record in correlations:
        for value in list(record.domain_overlap or []) + list(record.topic_overlap or []):
            key = topic_key(value)
            if key and key not in keys:
                keys.append(key)
    return keys


def process_campaign(campaign: Campaign, now: Optional[datetime] = None) -> Dict[str, int]:
    """Correlate one campaign and update affinities. Caller commits."""
    now = now or utcnow_naive()
    performance = campaign_performance(campaign, now)
    correlations = correlate_campaign(campaign, performance)
    db.session.flush()

    updated, failed = 0, 0
    for topic in learned_topics(correlations):
        try:
            upsert_affinity(campaign.organization_id, topic, performance, now)
            updated += 1
        except SQLAlchemyError as e:
            failed += 1
            logger.error(f"Affinity update failed for org {campaign.organization_id} topic {topic!r}: {e}")

    campaign.feedback_processed_at = now
    return {'correlations': len(correlations), 'affinities_updated': updated, 'affinities_failed': failed}


def pending_campaigns(now: datetime, lookback_days: int, limit: int) -> List[Campaign]:
    since = now - timedelta(days=lookback_days)
    return Campaign.query.filter(
        Campaign.status == 'completed',
        Campaign.sent_at.isnot(None),
        Campaign.sent_at >= since,
        Campaign.feedback_processed_at.is_(None),
    ).order_by(Campaign.sent_at.asc(), Campaign.id.asc()).limit(limit).all()


def run_learning_pipeline(now: Optional[datetime] = None, lookback_days: int = 7, batch_size: int = 50) -> Dict[str, int]:
    """
    Process pending campaigns one at a time, committing after each.
    A failing campaign is rolled back and left for the next run.
    """
    now = now or utcnow_naive()
    stats = {
        'campaigns_processed': 0,
        'campaigns_failed': 0,
        'correlations': 0,
        'affinities_updated': 0,
        'affinities_failed': 0,
    }

    campaign_ids = [c.id for c in pending_campaigns(now, lookback_days, batch_size)]
    logger.info(f"Learning pipeline: {len(campaign_ids)} campaigns pending")

    for campaign_id in campaign_ids:
        try:
            campaign = db.session.get(Campaign, campaign_id)
            result = process_campaign(campaign, now)
            db.session.commit()
            stats['campaigns_processed'] += 1
            for key in ('correlations', 'affinities_updated', 'affinities_failed'):
                stats[key] += result[key]
        except Exception as e:
            db.session.rollback()
            stats['campaigns_failed'] += 1
            logger.error(f"Learning failed for campaign {campaign_id}: {e}", exc_info=True)
            continue

    logger.info(f"Learning pipeline complete: {stats}")
    return stats
