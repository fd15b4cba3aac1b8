"""
Domain Classifier

Tags a trend with policy domains, geography and named entities using a
ReferenceTables snapshot:

1. Policy domains: domains pre-assigned to the trend's sources, plus every
   domain whose keyword list has at least two distinct hits in the text.
   When neither yields anything the optional semantic fallback is asked and
   its answer is taken as-is.
2. Geography: gazetteer scan (cities, states, international locations);
   the narrowest level found wins, national/US when nothing matches.
3. Entities: canonical names and aliases from the snapshot, plus bill
   numbers ("H.R. 1234", "S. 567") as legislation.

Classification is a pure function of (text, sources, snapshot); output sets
are sorted so repeated runs produce identical tags.
"""

import hashlib
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from relevance_engine.lib.time import utcnow_naive
from relevance_engine.relevance.constants import (
    MIN_KEYWORD_MATCHES,
    DEFAULT_GEOGRAPHY,
    INTERNATIONAL_GEOGRAPHY,
    GEO_LEVEL_LOCAL,
    GEO_LEVEL_STATE,
    GEO_LEVEL_INTERNATIONAL,
    GEO_LEVEL_NATIONAL,
    GEO_LEVEL_PRIORITY,
)
from relevance_engine.relevance.reference import ReferenceTables

logger = logging.getLogger(__name__)

SemanticFallback = Callable[[str], List[str]]

_LEFT = r'(?<![A-Za-z0-9])'
_RIGHT = r'(?![A-Za-z0-9])'

HOUSE_BILL_PATTERN = re.compile(r'(?<![A-Za-z.])H\.?\s?R\.?\s?(\d{1,5})(?!\d)')
SENATE_BILL_PATTERN = re.compile(r'(?<![A-Za-z.])S\.\s?(\d{1,5})(?!\d)')


def is_acronym(term: str) -> bool:
    """ALL-CAPS reference entries match case-sensitively."""
    return term.isupper()


def term_regex(term: str) -> str:
    """Word-bounded regex source for a reference term."""
    body = r'\s+'.join(re.escape(word) for word in term.split())
    if is_acronym(term):
        return f'{_LEFT}{body}{_RIGHT}'
    return f'{_LEFT}(?i:{body}){_RIGHT}'


def compile_terms(terms: Iterable[str]) -> Optional[re.Pattern]:
    """One alternation over all terms, longest first, or None if empty."""
    ordered = sorted(set(terms), key=lambda t: (-len(t), t))
    if not ordered:
        return None
    return re.compile('|'.join(f'(?:{term_regex(t)})' for t in ordered))


def normalize_text(text: str) -> str:
    return ' '.join((text or '').split())


def _lookup_key(term: str) -> str:
    return term if is_acronym(term) else ' '.join(term.lower().split())


@dataclass(frozen=True)
class TrendTags:
    policy_domains: Tuple[str, ...] = ()
    geographies: Tuple[str, ...] = (DEFAULT_GEOGRAPHY,)
    geo_level: str = GEO_LEVEL_NATIONAL
    politicians: Tuple[str, ...] = ()
    organizations: Tuple[str, ...] = ()
    legislation: Tuple[str, ...] = ()
    evidence_by_domain: Dict[str, List[str]] = field(default_factory=dict)
    used_semantic_fallback: bool = False


class DomainClassifier:
    """
    Usage:
        classifier = DomainClassifier(load_reference_tables())
        tags = classifier.classify("Rent control fight in Oakland", ...)
    """

    def __init__(self, reference: ReferenceTables, semantic_fallback: Optional[SemanticFallback] = None):
        self.reference = reference
        self.semantic_fallback = semantic_fallback

        self._domain_patterns = [
            (domain, [(kw, re.compile(term_regex(kw))) for kw in keywords])
            for domain, keywords in reference.domain_keywords
        ]

        # Cities, state names, unambiguous state codes and countries share one
        # alternation so longer names are consumed first ("west virginia",
        # "kansas city", "new mexico").
        self._places: Dict[str, Tuple[str, str]] = {}
        for name, code in reference.states:
            self._places[_lookup_key(name)] = (GEO_LEVEL_STATE, code)
        for code in {code for _, code in reference.states}:
            if code not in reference.ambiguous_state_codes:
                self._places[code] = (GEO_LEVEL_STATE, code)
        for name, code in reference.cities:
            self._places[_lookup_key(name)] = (GEO_LEVEL_LOCAL, code)
        for name in reference.international:
            self._places[_lookup_key(name)] = (GEO_LEVEL_INTERNATIONAL, INTERNATIONAL_GEOGRAPHY)
        self._place_pattern = compile_terms(self._places.keys())

        ambiguous = sorted(reference.ambiguous_state_codes)
        self._ambiguous_state_pattern = (
            re.compile(r',\s*(' + '|'.join(ambiguous) + r')' + _RIGHT) if ambiguous else None
        )

        self._entity_patterns = [
            (entity, compile_terms(entity.surface_forms))
            for entity in reference.entities
        ]

    @property
    def version(self) -> str:
        return self.reference.version

    # -- domains -------------------------------------------------------------

    def match_domain_keywords(self, text: str) -> Dict[str, List[str]]:
        """Distinct keyword hits per domain (all domains with any hit)."""
        hits = {}
        for domain, patterns in self._domain_patterns:
            matched = sorted({kw for kw, pattern in patterns if pattern.search(text)})
            if matched:
                hits[domain] = matched
        return hits

    def _order_domains(self, domains: Iterable[str]) -> Tuple[str, ...]:
        known = self.reference.policy_domains
        unique = {d.strip() for d in domains if d and d.strip()}
        ordered = [d for d in known if d in unique]
        ordered += sorted(unique - set(known))
        return tuple(ordered)

    def classify_domains(self, text: str, source_domains: Sequence[str] = ()) -> Tuple[Tuple[str, ...], Dict[str, List[str]], bool]:
        keyword_hits = self.match_domain_keywords(text)
        evidence = {d: kws for d, kws in keyword_hits.items() if len(kws) >= MIN_KEYWORD_MATCHES}

        domains = set(source_domains or []) | set(evidence)
        if domains:
            return self._order_domains(domains), evidence, False

        if self.semantic_fallback is None:
            return (), evidence, False

        suggested = self.semantic_fallback(text) or []
        return self._order_domains(suggested), evidence, True

    # -- geography -----------------------------------------------------------

    def classify_geography(self, text: str) -> Tuple[Tuple[str, ...], str]:
        found: Dict[str, set] = {level: set() for level in GEO_LEVEL_PRIORITY}

        if self._place_pattern is not None:
            for match in self._place_pattern.finditer(text):
                matched = match.group(0)
                # "TEXAS" matched the case-insensitive "texas" entry
                place = self._places.get(matched) or self._places.get(' '.join(matched.lower().split()))
                if place is None:
                    continue
                level, code = place
                found[level].add(code)

        if self._ambiguous_state_pattern is not None:
            for match in self._ambiguous_state_pattern.finditer(text):
                found[GEO_LEVEL_STATE].add(match.group(1))

        codes = set()
        for level in (GEO_LEVEL_LOCAL, GEO_LEVEL_STATE, GEO_LEVEL_INTERNATIONAL):
            codes |= found[level]

        if not codes:
            return (DEFAULT_GEOGRAPHY,), GEO_LEVEL_NATIONAL

        level = next(level for level in GEO_LEVEL_PRIORITY if found[level])
        return tuple(sorted(codes)), level

    # -- entities ------------------------------------------------------------

    def classify_entities(self, text: str) -> Tuple[Tuple[str, ...], Tuple[str, ...], Tuple[str, ...]]:
        politicians, organizations, legislation = set(), set(), set()

        for entity, pattern in self._entity_patterns:
            if pattern is None or not pattern.search(text):
                continue
            if entity.entity_type == 'politician':
                politicians.add(entity.canonical_name)
            elif entity.entity_type == 'legislation':
                legislation.add(entity.canonical_name)
            else:
                organizations.add(entity.canonical_name)

        for match in HOUSE_BILL_PATTERN.finditer(text):
            legislation.add(f"H.R. {int(match.group(1))}")
        for match in SENATE_BILL_PATTERN.finditer(text):
            legislation.add(f"S. {int(match.group(1))}")

        return tuple(sorted(politicians)), tuple(sorted(organizations)), tuple(sorted(legislation))

    # -- entry points --------------------------------------------------------

    def classify(self, title: str, description: str = '', context_terms: Sequence[str] = (),
                 source_domains: Sequence[str] = (), headlines: Sequence[str] = ()) -> TrendTags:
        text = normalize_text(' . '.join(
            [title or '', description or ''] + list(context_terms or []) + list(headlines or [])
        ))

        domains, evidence, used_fallback = self.classify_domains(text, source_domains)
        if not domains:
            logger.warning(f"No policy domain for trend text: {title[:80]!r}")

        geographies, geo_level = self.classify_geography(text)
        politicians, organizations, legislation = self.classify_entities(text)

        return TrendTags(
            policy_domains=domains,
            geographies=geographies,
            geo_level=geo_level,
            politicians=politicians,
            organizations=organizations,
            legislation=legislation,
            evidence_by_domain=evidence,
            used_semantic_fallback=used_fallback,
        )

    def classify_trend(self, trend) -> TrendTags:
        return self.classify(**trend_inputs(trend))


def trend_inputs(trend) -> dict:
    """Classifier inputs for a Trend row: its text and evidentiary sources."""
    source_domains = set()
    headlines = []
    for item in trend.evidence or []:
        if item.headline:
            headlines.append(item.headline)
        if item.source is not None:
            source_domains.update(item.source.policy_domains or [])
    return {
        'title': trend.title,
        'description': trend.description or '',
        'context_terms': list(trend.context_terms or []),
        'source_domains': sorted(source_domains),
        'headlines': sorted(headlines),
    }


def content_hash(inputs: dict) -> str:
    """Stable hash of classifier inputs; unchanged hash + version means no retag."""
    encoded = json.dumps(inputs, sort_keys=True, separators=(',', ':')).encode('utf-8')
    return hashlib.sha256(encoded).hexdigest()


def apply_tags(trend, tags: TrendTags, version: str, inputs_hash: str) -> None:
    """Overwrite the trend's tag fields. Resolved trends are left untouched."""
    if trend.resolved_at is not None:
        logger.debug(f"Trend {trend.id} is resolved, not retagging")
        return

    trend.policy_domains = list(tags.policy_domains)
    trend.geographies = list(tags.geographies)
    trend.geo_level = tags.geo_level
    trend.politicians_mentioned = list(tags.politicians)
    trend.organizations_mentioned = list(tags.organizations)
    trend.legislation_mentioned = list(tags.legislation)
    trend.evidence_by_domain = dict(tags.evidence_by_domain)
    trend.tagger_version = version
    trend.content_hash = inputs_hash
    trend.tagged_at = utcnow_naive()


def needs_tagging(trend, version: str, inputs_hash: str) -> bool:
    if trend.resolved_at is not None:
        return False
    return trend.tagger_version != version or trend.content_hash != inputs_hash
