"""
Diversity Selector

Builds an organization's slate from scored trends in three greedy passes,
each consuming what it picks:

1. Coverage: for every declared domain (in declared order), the best
   unselected trend tagged with it.
2. Exploration: remaining "new-opportunity" trends, best first.
3. Score fill: best remaining trends until the slate is full.

The slate is then re-sorted by score. Ordering everywhere is score
descending, ties broken by ascending trend id, so equal inputs always give
the same slate.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from relevance_engine.relevance.constants import (
    FLAG_NEW_OPPORTUNITY,
    FILTER_BELOW_THRESHOLD,
    FILTER_BLOCKED,
    FILTER_SLATE_FULL,
    SELECTED_BY_COVERAGE,
    SELECTED_BY_EXPLORATION,
    SELECTED_BY_SCORE,
)
from relevance_engine.relevance.records import ScoredTrend, topic_key

logger = logging.getLogger(__name__)


def ranking_key(result: ScoredTrend) -> Tuple[int, int]:
    """Score descending, then trend id ascending."""
    return (-result.score, result.trend_id)


@dataclass
class SlateSelection:
    selected: List[ScoredTrend] = field(default_factory=list)
    filtered: List[Tuple[ScoredTrend, str]] = field(default_factory=list)


class DiversitySelector:
    """
    Usage:
        selector = DiversitySelector(slate_size=10, min_score=15)
        selection = selector.select(results, declared_domains=profile.policy_domains)
    """

    DEFAULT_SLATE_SIZE = 10
    DEFAULT_MIN_SCORE = 15

    def __init__(self, slate_size: Optional[int] = None, min_score: Optional[int] = None):
        self.slate_size = self.DEFAULT_SLATE_SIZE if slate_size is None else max(0, slate_size)
        self.min_score = self.DEFAULT_MIN_SCORE if min_score is None else min_score

    def partition(self, results: Sequence[ScoredTrend]) -> Tuple[List[ScoredTrend], List[Tuple[ScoredTrend, str]]]:
        eligible, filtered = [], []
        for result in results:
            if result.blocked:
                filtered.append((result, FILTER_BLOCKED))
            elif result.score < self.min_score:
                filtered.append((result, FILTER_BELOW_THRESHOLD))
            else:
                eligible.append(result)
        eligible.sort(key=ranking_key)
        return eligible, filtered

    def select(self, results: Sequence[ScoredTrend], declared_domains: Sequence[str] = ()) -> SlateSelection:
        eligible, filtered = self.partition(results)
        selection = SlateSelection(filtered=filtered)
        chosen = set()

        def take(result: ScoredTrend, pass_name: str) -> None:
            result.selected_by = pass_name
            selection.selected.append(result)
            chosen.add(result.trend_id)

        def is_full() -> bool:
            return len(selection.selected) >= self.slate_size

        if declared_domains:
            # Pass 1: coverage
            for domain in declared_domains:
                if is_full():
                    break
                key = topic_key(domain)
                for result in eligible:
                    if result.trend_id in chosen:
                        continue
                    if key in {topic_key(d) for d in result.policy_domains}:
                        take(result, SELECTED_BY_COVERAGE)
                        break

            # Pass 2: exploration
            for result in eligible:
                if is_full():
                    break
                if result.trend_id not in chosen and result.has_flag(FLAG_NEW_OPPORTUNITY):
                    take(result, SELECTED_BY_EXPLORATION)

        # Pass 3: score fill
        for result in eligible:
            if is_full():
                break
            if result.trend_id not in chosen:
                take(result, SELECTED_BY_SCORE)

        selection.selected.sort(key=ranking_key)
        selection.filtered.extend(
            (result, FILTER_SLATE_FULL) for result in eligible if result.trend_id not in chosen
        )
        return selection
