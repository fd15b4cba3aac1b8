"""
Relevance Scorer

Scores one tagged trend for one organization on a 0-100 scale. The score
is a sum of independently capped terms, each of which appends a reason:

    policy-domain overlap      20/domain, max 35
    focus-area phrase match    10/phrase, max 20
    watchlist entity match     10/entity, max 15   -> "watchlist-match"
    learned affinity           mean of shared affinities x 20, max 20
    exploration bonus          +10                 -> "new-opportunity"
    geography match            +5
    breaking news              +5 once score >= 20 -> "breaking"

The affinity term averages every shared topic rather than taking the best
one, and its cap is applied regardless of the affinity values, so learned
history can never outweigh declared interests.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from relevance_engine.relevance.constants import (
    DOMAIN_POINTS_PER_MATCH,
    DOMAIN_MAX_POINTS,
    FOCUS_POINTS_PER_MATCH,
    FOCUS_MAX_POINTS,
    WATCHLIST_POINTS_PER_MATCH,
    WATCHLIST_MAX_POINTS,
    AFFINITY_SCALE,
    AFFINITY_MAX_POINTS,
    EXPLORATION_BONUS,
    EXPLORATION_MAX_USES,
    GEOGRAPHY_BONUS,
    BREAKING_BONUS,
    BREAKING_MIN_SCORE,
    MAX_SCORE,
    PRIORITY_HIGH_THRESHOLD,
    PRIORITY_MEDIUM_THRESHOLD,
    PRIORITY_HIGH,
    PRIORITY_MEDIUM,
    PRIORITY_LOW,
    PROVEN_TOPIC_MIN_USES,
    PROVEN_TOPIC_MIN_SCORE,
    FLAG_NEW_OPPORTUNITY,
    FLAG_PROVEN_TOPIC,
    FLAG_WATCHLIST_MATCH,
    FLAG_BREAKING,
    FLAG_BLOCKED,
)
from relevance_engine.relevance.exceptions import OrganizationNotFoundError
from relevance_engine.relevance.records import (
    OrganizationContext,
    ScoredTrend,
    TrendSnapshot,
    topic_key,
)

logger = logging.getLogger(__name__)


def normalize_entity(value: str) -> str:
    """Lowercase, strip punctuation, collapse whitespace."""
    cleaned = ''.join(ch if ch.isalnum() else ' ' for ch in (value or '').lower())
    return ' '.join(cleaned.split())


def entity_matches(watched: str, candidates: Iterable[str]) -> bool:
    """
    Whole-token containment in either direction on normalized names, so
    "Sanders" matches "Bernie Sanders" but "ICE" does not match "police".
    """
    needle = normalize_entity(watched)
    if not needle:
        return False
    for candidate in candidates:
        other = normalize_entity(candidate)
        if not other:
            continue
        if f' {needle} ' in f' {other} ' or f' {other} ' in f' {needle} ':
            return True
    return False


def priority_bucket(score: int) -> str:
    if score >= PRIORITY_HIGH_THRESHOLD:
        return PRIORITY_HIGH
    if score >= PRIORITY_MEDIUM_THRESHOLD:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def affinity_points(scores: List[float]) -> int:
    """Mean of the shared affinities, scaled and hard-capped."""
    if not scores:
        return 0
    mean = sum(scores) / len(scores)
    return max(0, min(int(mean * AFFINITY_SCALE + 0.5), AFFINITY_MAX_POINTS))


def _trend_text(trend: TrendSnapshot) -> str:
    return normalize_entity(' '.join((trend.title,) + trend.context_terms))


def _blocking_entry(candidates: Tuple[str, ...], org: OrganizationContext) -> Optional[str]:
    for item in org.watchlist:
        if item.is_block and entity_matches(item.name, candidates):
            return item.name
    return None


def score_trend(trend: TrendSnapshot, org: Optional[OrganizationContext]) -> ScoredTrend:
    """
    Compute the Relevance Result for (org, trend).

    Raises OrganizationNotFoundError when org is None; missing profile
    fields simply contribute nothing.
    """
    if org is None:
        raise OrganizationNotFoundError(None)

    result = ScoredTrend(
        organization_id=org.id,
        trend_id=trend.id,
        title=trend.title,
        policy_domains=trend.policy_domains,
    )

    candidates = trend.entities + (trend.title,)
    blocked_by = _blocking_entry(candidates, org)
    if blocked_by:
        result.blocked = True
        result.flags.append(FLAG_BLOCKED)
        result.reasons.append(f'Blocked: "{blocked_by}" is on the block list')
        result.priority_bucket = PRIORITY_LOW
        return result

    score = 0

    # 1. Policy-domain overlap
    declared = {topic_key(d) for d in org.policy_domains}
    matched_domains = [d for d in trend.policy_domains if topic_key(d) in declared]
    if matched_domains:
        points = min(len(matched_domains) * DOMAIN_POINTS_PER_MATCH, DOMAIN_MAX_POINTS)
        score += points
        result.matched_domains = matched_domains
        result.breakdown['domain'] = points
        result.reasons.append(f"Policy domain match: {', '.join(matched_domains)} (+{points} pts)")

    # 2. Focus-area phrases
    text = _trend_text(trend)
    matched_focus = [
        phrase for phrase in org.focus_areas
        if normalize_entity(phrase) and normalize_entity(phrase) in text
    ]
    if matched_focus:
        points = min(len(matched_focus) * FOCUS_POINTS_PER_MATCH, FOCUS_MAX_POINTS)
        score += points
        result.breakdown['focus_area'] = points
        result.reasons.append(f"Focus area match: {', '.join(matched_focus[:3])} (+{points} pts)")

    # 3. Watchlist
    matched_watchlist = [
        item.name for item in org.watchlist
        if not item.is_block and entity_matches(item.name, candidates)
    ]
    if matched_watchlist:
        points = min(len(matched_watchlist) * WATCHLIST_POINTS_PER_MATCH, WATCHLIST_MAX_POINTS)
        score += points
        result.matched_watchlist = matched_watchlist
        result.flags.append(FLAG_WATCHLIST_MATCH)
        result.breakdown['watchlist'] = points
        result.reasons.append(f"Watchlist: {', '.join(matched_watchlist)} (+{points} pts)")

    # 4. Learned affinity (average of shared topics, capped)
    shared = [org.affinities[key] for key in trend.topic_keys if key in org.affinities]
    if shared:
        points = affinity_points([a.score for a in shared])
        mean = sum(a.score for a in shared) / len(shared)
        score += points
        result.breakdown['affinity'] = points
        result.reasons.append(
            f"Learned affinity: {', '.join(a.topic for a in shared)} avg {mean:.2f} (+{points} pts)"
        )
        if any(a.times_used >= PROVEN_TOPIC_MIN_USES and a.score >= PROVEN_TOPIC_MIN_SCORE for a in shared):
            result.flags.append(FLAG_PROVEN_TOPIC)

    # 5. Exploration: declared interest not yet proven in real campaigns
    unexplored = [d for d in matched_domains if org.times_used(d) < EXPLORATION_MAX_USES]
    if unexplored:
        score += EXPLORATION_BONUS
        result.flags.append(FLAG_NEW_OPPORTUNITY)
        result.breakdown['exploration'] = EXPLORATION_BONUS
        result.reasons.append(
            f"New opportunity: {', '.join(unexplored)} not yet used in campaigns (+{EXPLORATION_BONUS} pts)"
        )

    # 6. Geography
    scope = {g.upper() for g in org.geographies if g}
    matched_geos = sorted(scope & {g.upper() for g in trend.geographies if g})
    if matched_geos:
        score += GEOGRAPHY_BONUS
        result.matched_geographies = matched_geos
        result.breakdown['geography'] = GEOGRAPHY_BONUS
        result.reasons.append(f"Geographic relevance: {', '.join(matched_geos)} (+{GEOGRAPHY_BONUS} pts)")

    # 7. Breaking news only boosts trends that are already relevant
    if trend.is_breaking and score >= BREAKING_MIN_SCORE:
        score += BREAKING_BONUS
        result.flags.append(FLAG_BREAKING)
        result.breakdown['breaking'] = BREAKING_BONUS
        result.reasons.append(f"Breaking news (+{BREAKING_BONUS} pts)")

    result.score = max(0, min(score, MAX_SCORE))
    result.priority_bucket = priority_bucket(result.score)
    return result


def score_organization(org: OrganizationContext, trends: Iterable[TrendSnapshot]) -> List[ScoredTrend]:
    """Score every trend for one organization. Pure; safe to run in a worker thread."""
    return [score_trend(trend, org) for trend in trends]
