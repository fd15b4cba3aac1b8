"""
Tests for the batch relevance refresh.

Covers:
- Tagging pass skips unchanged trends
- Per-organization scoring on the worker pool
- Run records, filter logs and partial failure
"""

import pytest
from datetime import timedelta
from unittest.mock import patch

from conftest import make_org, make_trend
from relevance_engine.lib.time import utcnow_naive
from relevance_engine.relevance.batch import (
    build_classifier,
    load_organization_context,
    refresh_relevance,
    score_all,
    selector_for,
    tag_trends,
)
from relevance_engine.relevance.exceptions import OrganizationNotFoundError
from relevance_engine.relevance.reference import load_reference_tables
from relevance_engine.relevance.scorer import score_organization


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def housing_source(db):
    from relevance_engine.models import NewsSource
    source = NewsSource(name='Shelterforce', policy_domains=['Housing'])
    db.session.add(source)
    db.session.commit()
    return source


@pytest.fixture
def trends(db, housing_source):
    from relevance_engine.models import Trend, TrendEvidence
    housing = Trend(
        trend_key='oakland-rent-control',
        title='Rent control and eviction fight in Oakland',
        context_terms=['rent control'],
    )
    healthcare = Trend(
        trend_key='medicaid-cuts',
        title='Medicare and Medicaid cuts loom',
    )
    db.session.add_all([housing, healthcare])
    db.session.flush()
    db.session.add(TrendEvidence(
        trend_id=housing.id,
        source_id=housing_source.id,
        headline='Oakland council weighs rent cap',
    ))
    db.session.commit()
    return housing, healthcare


@pytest.fixture
def organizations(db):
    from relevance_engine.models import OrganizationProfile, WatchlistEntity
    tenants = OrganizationProfile(name='East Bay Tenants', policy_domains=['Housing'], geographies=['CA'])
    clinic = OrganizationProfile(name='Community Clinics', policy_domains=['Healthcare'], geographies=['US'])
    db.session.add_all([tenants, clinic])
    db.session.flush()
    db.session.add(WatchlistEntity(organization_id=clinic.id, entity_name='Medicaid', rule_type='track'))
    db.session.commit()
    return tenants, clinic


# ---------------------------------------------------------------------------
# Tagging
# ---------------------------------------------------------------------------

class TestTagTrends:

    def test_tags_then_skips_unchanged(self, app, db, trends):
        housing, healthcare = trends
        classifier = build_classifier(load_reference_tables(), app.config)

        first = tag_trends(classifier)
        assert first == {'tagged': 2, 'skipped': 0, 'failed': 0}
        assert housing.policy_domains == ['Housing']
        assert housing.geographies == ['CA']
        assert housing.geo_level == 'local'
        assert healthcare.policy_domains == ['Healthcare']
        assert housing.tagger_version == classifier.version

        second = tag_trends(classifier)
        assert second == {'tagged': 0, 'skipped': 2, 'failed': 0}

    def test_changed_content_is_retagged(self, app, db, trends):
        housing, _ = trends
        classifier = build_classifier(load_reference_tables(), app.config)
        tag_trends(classifier)

        housing.description = 'Tenant rights groups and landlords clash over the measure'
        db.session.commit()
        assert tag_trends(classifier)['tagged'] == 1

    def test_force_retags_everything(self, app, db, trends):
        classifier = build_classifier(load_reference_tables(), app.config)
        tag_trends(classifier)
        assert tag_trends(classifier, force=True)['tagged'] == 2

    def test_resolved_trends_are_not_tagged(self, app, db, trends):
        from relevance_engine.lib.time import utcnow_naive

        housing, healthcare = trends
        healthcare.resolved_at = utcnow_naive()
        db.session.commit()

        stats = tag_trends(build_classifier(load_reference_tables(), app.config))
        assert stats['tagged'] == 1
        assert healthcare.policy_domains is None or healthcare.policy_domains == []


# ---------------------------------------------------------------------------
# Scoring on the worker pool
# ---------------------------------------------------------------------------

class TestScoreAll:

    def test_scores_every_organization(self):
        orgs = [make_org(1, policy_domains=['Housing']), make_org(2, policy_domains=['Healthcare'])]
        trend_set = [make_trend(10, policy_domains=['Housing']), make_trend(11, policy_domains=['Healthcare'])]

        results, errors = score_all(orgs, trend_set, max_workers=2)
        assert errors == {}
        assert [r.score for r in results[1]] == [30, 0]
        assert [r.score for r in results[2]] == [0, 30]

    def test_one_failure_does_not_affect_others(self):
        orgs = [make_org(1, policy_domains=['Housing']), make_org(2)]

        def flaky(org, trend_set):
            if org.id == 2:
                raise ValueError('boom')
            return score_organization(org, trend_set)

        with patch('relevance_engine.relevance.batch.score_organization', side_effect=flaky):
            results, errors = score_all(orgs, [make_trend(10, policy_domains=['Housing'])])

        assert list(results) == [1]
        assert errors == {2: 'boom'}

    def test_no_organizations(self):
        assert score_all([], [make_trend()]) == ({}, {})


class TestSelectorFor:

    def test_profile_threshold_overrides_config(self, app):
        org = make_org(min_relevance_score=40)
        assert selector_for(org, app.config).min_score == 40
        assert selector_for(make_org(), app.config).min_score == app.config['MIN_SLATE_SCORE']

    def test_missing_organization(self, db):
        with pytest.raises(OrganizationNotFoundError):
            load_organization_context(999)


# ---------------------------------------------------------------------------
# Refresh
# ---------------------------------------------------------------------------

class TestRefreshRelevance:

    def test_full_refresh(self, app, db, trends, organizations):
        from relevance_engine.models import FilterLogEntry, RelevanceResult

        housing, healthcare = trends
        tenants, clinic = organizations

        run = refresh_relevance()

        assert run.status == 'completed'
        assert run.trends_tagged == 2
        assert run.trends_considered == 2
        assert run.organizations_processed == 2
        assert run.organizations_failed == 0
        assert run.finished_at is not None

        tenant_result = RelevanceResult.query.filter_by(organization_id=tenants.id, trend_id=housing.id).one()
        # domain 20 + exploration 10 + geography 5
        assert tenant_result.score == 35
        assert tenant_result.priority_bucket == 'medium'
        assert 'new-opportunity' in tenant_result.flags

        clinic_result = RelevanceResult.query.filter_by(organization_id=clinic.id, trend_id=healthcare.id).one()
        # domain 20 + watchlist 10 + exploration 10 + geography 5
        assert clinic_result.score == 45
        assert clinic_result.matched_watchlist == ['Medicaid']

        log = FilterLogEntry.query.filter_by(organization_id=tenants.id, trend_id=healthcare.id).one()
        assert log.reason == 'below_threshold'
        assert log.run_id == run.id

    def test_results_postdate_tagging(self, app, db, trends, organizations):
        from relevance_engine.models import OrganizationProfile, RelevanceRefreshRun
        from relevance_engine.relevance.service import cache_is_stale
        from relevance_engine.relevance.store import load_results

        tenants, clinic = organizations
        tenant_id = tenants.id
        started = utcnow_naive() - timedelta(minutes=5)

        run = refresh_relevance(now=started)

        assert db.session.get(RelevanceRefreshRun, run.id).started_at == started
        rows = load_results(tenant_id)
        assert rows
        assert all(r.computed_at >= r.trend.updated_at for r in rows)
        assert not cache_is_stale(db.session.get(OrganizationProfile, tenant_id), rows)

    def test_rerun_supersedes_results(self, app, db, trends, organizations):
        from relevance_engine.models import RelevanceResult

        refresh_relevance()
        second = refresh_relevance()

        assert second.trends_tagged == 0
        assert RelevanceResult.query.count() == 4

    def test_partial_failure_recorded(self, app, db, trends, organizations):
        from relevance_engine.models import RelevanceResult

        tenants, clinic = organizations
        tenant_id, clinic_id = tenants.id, clinic.id

        def flaky(org, trend_set):
            if org.id == clinic_id:
                raise RuntimeError('scoring exploded')
            return score_organization(org, trend_set)

        with patch('relevance_engine.relevance.batch.score_organization', side_effect=flaky):
            run = refresh_relevance()

        assert run.status == 'partial'
        assert run.organizations_processed == 1
        assert run.organizations_failed == 1
        assert run.failures == [{'organization_id': clinic_id, 'error': 'scoring exploded'}]
        assert RelevanceResult.query.filter_by(organization_id=tenant_id).count() == 2
        assert RelevanceResult.query.filter_by(organization_id=clinic_id).count() == 0

    def test_inactive_organizations_skipped(self, app, db, trends, organizations):
        tenants, clinic = organizations
        clinic.is_active = False
        db.session.commit()

        run = refresh_relevance()
        assert run.organizations_processed == 1
