"""
Tests for relevance result and filter log persistence.
"""

import pytest
from datetime import datetime, timedelta

from conftest import make_scored
from relevance_engine.relevance.store import (
    append_filter_log,
    cleanup_filter_logs,
    load_results,
    replace_results,
)

NOW = datetime(2026, 3, 10, 3, 0, 0)


@pytest.fixture
def setup(db):
    from relevance_engine.models import OrganizationProfile, Trend
    org = OrganizationProfile(name='Voters First', policy_domains=['Voting Rights'])
    trends = [Trend(trend_key=f'trend-{i}', title=f'Trend {i}') for i in range(3)]
    db.session.add(org)
    db.session.add_all(trends)
    db.session.commit()
    return org, trends


class TestReplaceResults:

    def test_results_are_superseded(self, db, setup):
        org, trends = setup
        replace_results(org.id, [make_scored(t.id, 40, organization_id=org.id) for t in trends], NOW)
        db.session.commit()

        replace_results(org.id, [make_scored(trends[0].id, 70, organization_id=org.id)], NOW)
        db.session.commit()

        rows = load_results(org.id)
        assert [(r.trend_id, r.score) for r in rows] == [(trends[0].id, 70)]

    def test_load_results_orders_and_skips_inactive(self, db, setup):
        org, trends = setup
        replace_results(org.id, [
            make_scored(trends[0].id, 20, organization_id=org.id),
            make_scored(trends[1].id, 60, organization_id=org.id),
            make_scored(trends[2].id, 60, organization_id=org.id),
        ], NOW)
        trends[2].is_active = False
        db.session.commit()

        rows = load_results(org.id)
        assert [r.trend_id for r in rows] == [trends[1].id, trends[0].id]


class TestFilterLog:

    def test_append(self, db, setup):
        from relevance_engine.models import FilterLogEntry

        org, trends = setup
        count = append_filter_log(org.id, [
            (make_scored(trends[0].id, 3), 'below_threshold'),
            (make_scored(trends[1].id, 0, blocked=True), 'blocked'),
        ], now=NOW)
        db.session.commit()

        assert count == 2
        assert sorted(e.reason for e in FilterLogEntry.query.all()) == ['below_threshold', 'blocked']

    def test_cleanup_respects_retention(self, db, setup):
        from relevance_engine.models import FilterLogEntry

        org, trends = setup
        append_filter_log(org.id, [(make_scored(trends[0].id, 3), 'below_threshold')],
                          now=NOW - timedelta(days=40))
        append_filter_log(org.id, [(make_scored(trends[1].id, 3), 'below_threshold')],
                          now=NOW - timedelta(days=1))
        db.session.commit()

        deleted = cleanup_filter_logs(retention_days=30, now=NOW)

        assert deleted == 1
        remaining = FilterLogEntry.query.all()
        assert [e.trend_id for e in remaining] == [trends[1].id]
