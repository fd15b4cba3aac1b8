"""
Versioned reference snapshot for trend tagging.

A ReferenceTables value bundles keyword lists, gazetteers and entity lists
for one tagging run. It is built once per batch (static tables merged with
the political_entity knowledge base) and passed explicitly to the
classifier; nothing in the engine reads a module-level entity list.

The version is a content hash, so two snapshots built from the same data
compare equal and trends tagged with an unchanged snapshot can be skipped.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from relevance_engine.relevance import reference_data

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityRecord:
    canonical_name: str
    entity_type: str  # politician/organization/agency/legislation
    aliases: Tuple[str, ...] = ()

    @property
    def surface_forms(self) -> Tuple[str, ...]:
        return (self.canonical_name,) + self.aliases


@dataclass(frozen=True)
class ReferenceTables:
    domain_keywords: Tuple[Tuple[str, Tuple[str, ...]], ...]
    states: Tuple[Tuple[str, str], ...]
    ambiguous_state_codes: frozenset
    cities: Tuple[Tuple[str, str], ...]
    international: Tuple[str, ...]
    entities: Tuple[EntityRecord, ...]
    version: str

    @property
    def policy_domains(self) -> List[str]:
        return [domain for domain, _ in self.domain_keywords]

    def keywords_for(self, domain: str) -> Tuple[str, ...]:
        for name, keywords in self.domain_keywords:
            if name == domain:
                return keywords
        return ()


def _dedupe(values: Iterable[str]) -> Tuple[str, ...]:
    seen = set()
    result = []
    for value in values:
        value = (value or '').strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return tuple(result)


def _compute_version(payload: dict) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(',', ':')).encode('utf-8')
    return hashlib.sha256(encoded).hexdigest()[:16]


def build_reference_tables(
    domain_keywords: Optional[Dict[str, List[str]]] = None,
    states: Optional[Dict[str, str]] = None,
    cities: Optional[Dict[str, str]] = None,
    international: Optional[List[str]] = None,
    entities: Optional[Iterable[Tuple[str, str, List[str]]]] = None,
    extra_entities: Optional[Iterable[Tuple[str, str, List[str]]]] = None,
) -> ReferenceTables:
    """
    Build an immutable snapshot. Any table left as None falls back to the
    curated defaults in reference_data; extra_entities (knowledge-base rows)
    are merged over the entity list, replacing same-named entries.
    """
    domain_keywords = domain_keywords if domain_keywords is not None else reference_data.POLICY_DOMAIN_KEYWORDS
    states = states if states is not None else reference_data.US_STATES
    cities = cities if cities is not None else reference_data.MAJOR_CITIES
    international = international if international is not None else reference_data.INTERNATIONAL_LOCATIONS
    entities = entities if entities is not None else reference_data.WELL_KNOWN_ENTITIES

    merged: Dict[str, EntityRecord] = {}
    for canonical_name, entity_type, aliases in list(entities) + list(extra_entities or []):
        merged[canonical_name] = EntityRecord(
            canonical_name=canonical_name,
            entity_type=entity_type,
            aliases=_dedupe(aliases or []),
        )

    domain_table = tuple(
        (domain, _dedupe(keywords)) for domain, keywords in domain_keywords.items()
    )
    state_table = tuple(sorted((name.lower(), code.upper()) for name, code in states.items()))
    city_table = tuple(sorted((name.lower(), code.upper()) for name, code in cities.items()))
    international_table = _dedupe(international)
    entity_table = tuple(merged[name] for name in sorted(merged))
    ambiguous = frozenset(reference_data.AMBIGUOUS_STATE_CODES)

    version = _compute_version({
        'domains': [[d, list(k)] for d, k in domain_table],
        'states': [list(s) for s in state_table],
        'ambiguous': sorted(ambiguous),
        'cities': [list(c) for c in city_table],
        'international': list(international_table),
        'entities': [[e.canonical_name, e.entity_type, list(e.aliases)] for e in entity_table],
    })

    return ReferenceTables(
        domain_keywords=domain_table,
        states=state_table,
        ambiguous_state_codes=ambiguous,
        cities=city_table,
        international=international_table,
        entities=entity_table,
        version=version,
    )


def load_reference_tables() -> ReferenceTables:
    """
    Build the snapshot for a batch run: curated tables plus the active rows
    of the political_entity knowledge base. Requires an app context.
    """
    from relevance_engine.models import PoliticalEntity

    rows = PoliticalEntity.query.filter_by(is_active=True).order_by(PoliticalEntity.canonical_name).all()
    extra = [(row.canonical_name, row.entity_type, row.aliases or []) for row in rows]
    tables = build_reference_tables(extra_entities=extra)
    logger.info(f"Loaded reference snapshot {tables.version} ({len(tables.entities)} entities, {len(extra)} from knowledge base)")
    return tables
