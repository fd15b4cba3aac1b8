"""
In-memory snapshots passed between the database layer and the pure
scoring/selection code.

Worker threads only ever see these frozen values, never ORM rows, so no
session or mutable state is shared across workers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple


def topic_key(value: str) -> str:
    """Affinity table key for a domain or topic term."""
    return ' '.join((value or '').lower().split())


@dataclass(frozen=True)
class TrendSnapshot:
    id: int
    title: str
    policy_domains: Tuple[str, ...] = ()
    geographies: Tuple[str, ...] = ()
    politicians: Tuple[str, ...] = ()
    organizations: Tuple[str, ...] = ()
    legislation: Tuple[str, ...] = ()
    context_terms: Tuple[str, ...] = ()
    is_breaking: bool = False
    confidence_score: float = 0.0
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, trend) -> 'TrendSnapshot':
        return cls(
            id=trend.id,
            title=trend.title,
            policy_domains=tuple(trend.policy_domains or ()),
            geographies=tuple(trend.geographies or ()),
            politicians=tuple(trend.politicians_mentioned or ()),
            organizations=tuple(trend.organizations_mentioned or ()),
            legislation=tuple(trend.legislation_mentioned or ()),
            context_terms=tuple(trend.context_terms or ()),
            is_breaking=bool(trend.is_breaking),
            confidence_score=trend.confidence_score or 0.0,
            updated_at=trend.updated_at,
        )

    @property
    def entities(self) -> Tuple[str, ...]:
        return self.politicians + self.organizations + self.legislation

    @property
    def topic_keys(self) -> List[str]:
        """Domains and topic terms as affinity keys, deduplicated, in order."""
        keys = []
        for value in self.policy_domains + self.context_terms:
            key = topic_key(value)
            if key and key not in keys:
                keys.append(key)
        return keys


@dataclass(frozen=True)
class WatchlistItem:
    name: str
    rule_type: str = 'track'

    @property
    def is_block(self) -> bool:
        return self.rule_type == 'block'


@dataclass(frozen=True)
class AffinitySnapshot:
    topic: str
    score: float
    times_used: int = 0
    source: str = 'learned_outcome'


@dataclass(frozen=True)
class OrganizationContext:
    id: int
    policy_domains: Tuple[str, ...] = ()
    focus_areas: Tuple[str, ...] = ()
    geographies: Tuple[str, ...] = ()
    watchlist: Tuple[WatchlistItem, ...] = ()
    affinities: Dict[str, AffinitySnapshot] = field(default_factory=dict)
    min_relevance_score: Optional[int] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, profile, affinities=()) -> 'OrganizationContext':
        return cls(
            id=profile.id,
            policy_domains=tuple(profile.policy_domains or ()),
            focus_areas=tuple(profile.focus_areas or ()),
            geographies=tuple(profile.geographies or ()),
            watchlist=tuple(
                WatchlistItem(name=w.entity_name, rule_type=w.rule_type or 'track')
                for w in (profile.watchlist or [])
            ),
            affinities={
                a.topic: AffinitySnapshot(
                    topic=a.topic,
                    score=a.affinity_score,
                    times_used=a.times_used or 0,
                    source=a.source,
                )
                for a in affinities
            },
            min_relevance_score=profile.min_relevance_score,
            updated_at=profile.updated_at,
        )

    def times_used(self, topic: str) -> int:
        affinity = self.affinities.get(topic_key(topic))
        return affinity.times_used if affinity else 0


@dataclass
class ScoredTrend:
    """A Relevance Result before it is persisted."""
    organization_id: int
    trend_id: int
    title: str
    policy_domains: Tuple[str, ...] = ()
    score: int = 0
    reasons: List[str] = field(default_factory=list)
    flags: List[str] = field(default_factory=list)
    matched_domains: List[str] = field(default_factory=list)
    matched_watchlist: List[str] = field(default_factory=list)
    matched_geographies: List[str] = field(default_factory=list)
    breakdown: Dict[str, int] = field(default_factory=dict)
    priority_bucket: str = 'low'
    blocked: bool = False
    selected_by: Optional[str] = None

    def has_flag(self, flag: str) -> bool:
        return flag in self.flags

    @classmethod
    def from_model(cls, result) -> 'ScoredTrend':
        return cls(
            organization_id=result.organization_id,
            trend_id=result.trend_id,
            title=result.trend.title if result.trend else '',
            policy_domains=tuple(result.trend.policy_domains or ()) if result.trend else (),
            score=result.score,
            reasons=list(result.reasons or []),
            flags=list(result.flags or []),
            matched_domains=list(result.matched_domains or []),
            matched_watchlist=list(result.matched_watchlist or []),
            matched_geographies=list(result.matched_geographies or []),
            breakdown=dict(result.score_breakdown or {}),
            priority_bucket=result.priority_bucket,
            blocked='blocked' in (result.flags or []),
        )

    def to_dict(self) -> dict:
        data = {
            'trend_id': self.trend_id,
            'title': self.title,
            'score': self.score,
            'priority': self.priority_bucket,
            'reasons': list(self.reasons),
            'flags': list(self.flags),
            'policy_domains': list(self.policy_domains),
            'matched_domains': list(self.matched_domains),
            'matched_watchlist': list(self.matched_watchlist),
            'matched_geographies': list(self.matched_geographies),
            'score_breakdown': dict(self.breakdown),
        }
        if self.selected_by:
            data['selected_by'] = self.selected_by
        return data
