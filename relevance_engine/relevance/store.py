"""
Relevance cache and filter log persistence.

Relevance results are superseded per organization: a recompute deletes the
organization's rows and writes the new set in the same transaction. The
filter log is append-only apart from the retention cleanup.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from relevance_engine import db
from relevance_engine.lib.time import utcnow_naive
from relevance_engine.models import FilterLogEntry, RelevanceResult, Trend
from relevance_engine.relevance.records import ScoredTrend

logger = logging.getLogger(__name__)


def replace_results(organization_id: int, results: Iterable[ScoredTrend], now: Optional[datetime] = None) -> int:
    """Replace the organization's cached results. Caller commits."""
    now = now or utcnow_naive()
    # 'fetch' evicts superseded rows from the identity map before the new ones flush
    RelevanceResult.query.filter_by(organization_id=organization_id).delete(synchronize_session='fetch')

    count = 0
    for result in results:
        db.session.add(RelevanceResult(
            organization_id=organization_id,
            trend_id=result.trend_id,
            score=result.score,
            reasons=list(result.reasons),
            flags=list(result.flags),
            matched_domains=list(result.matched_domains),
            matched_watchlist=list(result.matched_watchlist),
            matched_geographies=list(result.matched_geographies),
            score_breakdown=dict(result.breakdown),
            priority_bucket=result.priority_bucket,
            computed_at=now,
        ))
        count += 1
    return count


def load_results(organization_id: int) -> List[RelevanceResult]:
    return RelevanceResult.query.join(Trend).filter(
        RelevanceResult.organization_id == organization_id,
        Trend.is_active.is_(True),
    ).order_by(RelevanceResult.score.desc(), RelevanceResult.trend_id.asc()).all()


def append_filter_log(organization_id: int, filtered: Iterable[Tuple[ScoredTrend, str]],
                      run_id: Optional[int] = None, now: Optional[datetime] = None) -> int:
    """Record trends left off the slate. Caller commits."""
    now = now or utcnow_naive()
    count = 0
    for result, reason in filtered:
        db.session.add(FilterLogEntry(
            organization_id=organization_id,
            trend_id=result.trend_id,
            score=result.score,
            reason=reason,
            run_id=run_id,
            logged_at=now,
        ))
        count += 1
    return count


def cleanup_filter_logs(retention_days: int = 30, now: Optional[datetime] = None) -> int:
    """Delete filter-log entries older than the retention window."""
    now = now or utcnow_naive()
    cutoff = now - timedelta(days=retention_days)
    try:
        deleted = FilterLogEntry.query.filter(
            FilterLogEntry.logged_at < cutoff
        ).delete(synchronize_session=False)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Filter log cleanup failed: {e}", exc_info=True)
        raise
    logger.info(f"Deleted {deleted} filter log entries older than {retention_days} days")
    return deleted
