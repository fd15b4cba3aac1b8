"""
Pytest configuration and shared fixtures.
"""

import pytest
import os
import sys

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set DATABASE_URL before Config class is imported (it validates at class-definition time)
os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')


@pytest.fixture
def app():
    """Create application for testing."""
    from relevance_engine import create_app
    app = create_app('testing')
    app.config['TESTING'] = True
    return app


@pytest.fixture
def app_context(app):
    """Application context for testing."""
    with app.app_context():
        yield


@pytest.fixture
def db(app, app_context):
    """Database for testing."""
    from relevance_engine import db as _db

    _db.create_all()
    yield _db
    _db.session.remove()
    _db.drop_all()


@pytest.fixture
def client(app, db):
    """Flask test client with database tables created."""
    return app.test_client()


# ---------------------------------------------------------------------------
# Snapshot builders for the pure scoring/selection tests
# ---------------------------------------------------------------------------

def make_trend(trend_id=1, title='Untitled trend', **kwargs):
    """TrendSnapshot with tuple fields filled from lists."""
    from relevance_engine.relevance.records import TrendSnapshot

    for key in ('policy_domains', 'geographies', 'politicians', 'organizations', 'legislation', 'context_terms'):
        if key in kwargs:
            kwargs[key] = tuple(kwargs[key])
    return TrendSnapshot(id=trend_id, title=title, **kwargs)


def make_org(org_id=1, affinities=None, watchlist=None, **kwargs):
    """
    OrganizationContext. affinities maps topic -> score or (score, times_used);
    watchlist is a list of names or (name, rule_type) pairs.
    """
    from relevance_engine.relevance.records import (
        AffinitySnapshot,
        OrganizationContext,
        WatchlistItem,
        topic_key,
    )

    snapshots = {}
    for topic, value in (affinities or {}).items():
        score, times_used = value if isinstance(value, tuple) else (value, 0)
        key = topic_key(topic)
        snapshots[key] = AffinitySnapshot(topic=key, score=score, times_used=times_used)

    items = []
    for entry in watchlist or []:
        name, rule_type = entry if isinstance(entry, tuple) else (entry, 'track')
        items.append(WatchlistItem(name=name, rule_type=rule_type))

    for key in ('policy_domains', 'focus_areas', 'geographies'):
        if key in kwargs:
            kwargs[key] = tuple(kwargs[key])
    return OrganizationContext(id=org_id, affinities=snapshots, watchlist=tuple(items), **kwargs)


def make_scored(trend_id, score, policy_domains=(), flags=(), blocked=False, organization_id=1):
    """ScoredTrend as produced by the scorer."""
    from relevance_engine.relevance.records import ScoredTrend

    return ScoredTrend(
        organization_id=organization_id,
        trend_id=trend_id,
        title=f'Trend {trend_id}',
        policy_domains=tuple(policy_domains),
        score=score,
        flags=list(flags),
        blocked=blocked,
    )
