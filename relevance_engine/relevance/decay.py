"""
Decay Scheduler

Weekly attenuation of learned affinities that have not been reinforced for
30 days: score *= 0.95, never below 0.3. Declared and manually overridden
affinities are exempt. A row decayed within the last six days is skipped,
so re-running a week's job is harmless. last_used_at is never touched.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

from relevance_engine import db
from relevance_engine.lib.time import utcnow_naive
from relevance_engine.models import TopicAffinity
from relevance_engine.relevance.constants import (
    DECAY_FACTOR,
    DECAY_FLOOR,
    DECAY_STALE_DAYS,
    DECAY_MIN_INTERVAL_DAYS,
)

logger = logging.getLogger(__name__)


def decayed_score(score: float) -> float:
    """One decay step. Scores at or below the floor are returned unchanged."""
    if score <= DECAY_FLOOR:
        return score
    return max(DECAY_FLOOR, round(score * DECAY_FACTOR, 4))


def decay_stale_affinities(now: Optional[datetime] = None, batch_size: int = 500) -> Dict[str, int]:
    now = now or utcnow_naive()
    stale_before = now - timedelta(days=DECAY_STALE_DAYS)
    recently_decayed = now - timedelta(days=DECAY_MIN_INTERVAL_DAYS)

    query = TopicAffinity.query.filter(
        TopicAffinity.source == TopicAffinity.SOURCE_LEARNED,
        TopicAffinity.last_used_at.isnot(None),
        TopicAffinity.last_used_at < stale_before,
        TopicAffinity.affinity_score > DECAY_FLOOR,
        db.or_(
            TopicAffinity.last_decayed_at.is_(None),
            TopicAffinity.last_decayed_at < recently_decayed,
        ),
    ).order_by(TopicAffinity.id)

    stats = {'decayed': 0, 'failed': 0}
    last_id = 0
    while True:
        batch = query.filter(TopicAffinity.id > last_id).limit(batch_size).all()
        if not batch:
            break
        last_id = batch[-1].id

        for affinity in batch:
            affinity.affinity_score = decayed_score(affinity.affinity_score)
            affinity.last_decayed_at = now

        try:
            db.session.commit()
            stats['decayed'] += len(batch)
        except Exception as e:
            db.session.rollback()
            stats['failed'] += len(batch)
            logger.error(f"Decay batch ending at affinity {last_id} failed: {e}", exc_info=True)

    logger.info(f"Affinity decay complete: {stats['decayed']} decayed, {stats['failed']} failed")
    return stats
