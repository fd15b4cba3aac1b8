"""
Tests for relevance_engine.relevance.feedback module.

Covers:
- EMA update and clamping
- Correlation strength and overlap helpers
- Campaign performance vs baseline
- The learning pipeline end to end against the test database
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from relevance_engine.relevance import feedback
from relevance_engine.relevance.feedback import (
    campaign_performance,
    correlation_strength,
    domain_overlap,
    ema_update,
    engagement_score,
    outcome_label,
    performance_signal,
    run_learning_pipeline,
    topic_overlap,
    upsert_affinity,
)

NOW = datetime(2026, 3, 10, 12, 0, 0)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def organization(db):
    from relevance_engine.models import OrganizationProfile
    org = OrganizationProfile(name='Tenant Union', policy_domains=['Housing'])
    db.session.add(org)
    db.session.commit()
    return org


@pytest.fixture
def housing_trend(db):
    from relevance_engine.models import Trend
    sent_at = NOW - timedelta(days=1)
    trend = Trend(
        trend_key='rent-control-oakland',
        title='Rent control fight in Oakland',
        policy_domains=['Housing'],
        context_terms=['rent control'],
        confidence_score=0.8,
        first_seen_at=sent_at - timedelta(hours=10),
        last_seen_at=sent_at - timedelta(hours=2),
    )
    db.session.add(trend)
    db.session.commit()
    return trend


def make_campaign(db, organization, **kwargs):
    from relevance_engine.models import Campaign
    values = dict(
        organization_id=organization.id,
        campaign_type='email',
        subject='Protect renters now',
        status='completed',
        sent_at=NOW - timedelta(days=1),
        policy_domains=['Housing'],
        extracted_topics=['rent control'],
    )
    values.update(kwargs)
    campaign = Campaign(**values)
    db.session.add(campaign)
    db.session.commit()
    return campaign


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

class TestAffinityMath:

    def test_positive_campaign_moves_neutral_affinity(self):
        assert performance_signal(40) == pytest.approx(0.9)
        assert ema_update(0.5, performance_signal(40)) == pytest.approx(0.62)

    def test_signal_is_clamped(self):
        assert performance_signal(250) == 1.0
        assert performance_signal(-90) == 0.0
        assert performance_signal(0) == 0.5

    def test_ema_respects_bounds(self):
        assert ema_update(0.95, 1.0) == pytest.approx(0.95)
        assert ema_update(0.2, 0.0) == pytest.approx(0.2)

    def test_outcome_labels(self):
        assert outcome_label(31) == 'high_performer'
        assert outcome_label(30) == 'performer'
        assert outcome_label(0) == 'neutral'
        assert outcome_label(-19) == 'neutral'
        assert outcome_label(-20) == 'underperformer'


class TestCorrelationHelpers:

    def test_strength_weights(self):
        assert correlation_strength(1, 0, False, 0) == pytest.approx(0.4)
        assert correlation_strength(0, 1, True, 5) == pytest.approx(0.6)
        assert correlation_strength(3, 2, True, 10) == 1.0

    def test_domain_overlap_case_insensitive(self):
        assert domain_overlap(['Housing', 'Education'], ['housing']) == ['Housing']
        assert domain_overlap(None, ['housing']) == []

    def test_topic_overlap_is_substring_tolerant(self):
        assert topic_overlap(['rent control', 'tenant'], ['Rent Control laws']) == ['rent control']
        assert topic_overlap(['rent control laws'], ['rent control']) == ['rent control laws']
        assert topic_overlap(['zoning'], ['rent control']) == []

    def test_engagement_score(self):
        assert engagement_score(100, 20, 5, 1) == pytest.approx(0.22)
        assert engagement_score(0, 0, 0, 0) is None


# ---------------------------------------------------------------------------
# Campaign performance
# ---------------------------------------------------------------------------

class TestCampaignPerformance:

    def test_explicit_value_wins(self, db, organization):
        campaign = make_campaign(db, organization, performance_vs_baseline=-12.5, sends=100, opens=90)
        assert campaign_performance(campaign, NOW) == -12.5

    def test_no_metrics_is_neutral(self, db, organization):
        campaign = make_campaign(db, organization)
        assert campaign_performance(campaign, NOW) == 0.0

    def test_channel_default_baseline(self, db, organization):
        campaign = make_campaign(db, organization, sends=100, opens=20, clicks=5, conversions=1)
        # 0.22 against the email default of 0.05
        assert campaign_performance(campaign, NOW) == pytest.approx(340.0)

    def test_organization_baseline_with_history(self, db, organization):
        for days_ago in (5, 6, 7):
            make_campaign(db, organization, sent_at=NOW - timedelta(days=days_ago),
                          sends=100, opens=20, clicks=5, conversions=1)
        campaign = make_campaign(db, organization, sends=100, opens=20, clicks=5, conversions=1)
        assert campaign_performance(campaign, NOW) == pytest.approx(0.0)


# ---------------------------------------------------------------------------
# Learning pipeline
# ---------------------------------------------------------------------------

class TestLearningPipeline:

    def test_positive_campaign_updates_affinities(self, db, organization, housing_trend):
        from relevance_engine.models import TopicAffinity, TrendCampaignCorrelation

        campaign = make_campaign(db, organization, performance_vs_baseline=40.0)
        stats = run_learning_pipeline(now=NOW)

        assert stats['campaigns_processed'] == 1
        assert stats['correlations'] == 1
        assert stats['affinities_updated'] == 2

        housing = TopicAffinity.query.filter_by(organization_id=organization.id, topic='housing').one()
        assert housing.affinity_score == pytest.approx(0.62)
        assert housing.times_used == 1
        assert housing.last_used_at == NOW
        assert housing.source == 'learned_outcome'
        assert TopicAffinity.query.filter_by(topic='rent control').count() == 1

        record = TrendCampaignCorrelation.query.one()
        assert record.trend_id == housing_trend.id
        assert record.campaign_id == campaign.id
        assert record.correlation_score == pytest.approx(0.8)
        assert record.outcome_label == 'high_performer'
        assert record.time_delta_hours == pytest.approx(10.0)

    def test_campaign_processed_once(self, db, organization, housing_trend):
        from relevance_engine.models import Campaign

        campaign = make_campaign(db, organization, performance_vs_baseline=40.0)
        run_learning_pipeline(now=NOW)
        assert db.session.get(Campaign, campaign.id).feedback_processed_at == NOW

        stats = run_learning_pipeline(now=NOW)
        assert stats['campaigns_processed'] == 0

    def test_failed_affinity_update_does_not_block_others(self, db, organization, housing_trend):
        from relevance_engine.models import Campaign, TopicAffinity

        real_apply = feedback.apply_outcome

        def apply_or_fail(affinity, performance, now):
            if affinity.topic == 'housing':
                raise OperationalError('UPDATE topic_affinity', {}, Exception('lock timeout'))
            real_apply(affinity, performance, now)

        campaign = make_campaign(db, organization, performance_vs_baseline=40.0)
        with patch.object(feedback, 'apply_outcome', side_effect=apply_or_fail):
            stats = run_learning_pipeline(now=NOW)

        assert stats['campaigns_processed'] == 1
        assert stats['affinities_updated'] == 1
        assert stats['affinities_failed'] == 1
        rows = TopicAffinity.query.filter_by(organization_id=organization.id).all()
        assert [(r.topic, r.affinity_score) for r in rows] == [('rent control', pytest.approx(0.62))]
        assert db.session.get(Campaign, campaign.id).feedback_processed_at == NOW

    def test_repeated_outcomes_accumulate(self, db, organization, housing_trend):
        from relevance_engine.models import TopicAffinity

        make_campaign(db, organization, performance_vs_baseline=40.0)
        make_campaign(db, organization, performance_vs_baseline=40.0,
                      sent_at=NOW - timedelta(days=1) + timedelta(minutes=30))
        run_learning_pipeline(now=NOW)

        housing = TopicAffinity.query.filter_by(topic='housing').one()
        assert housing.times_used == 2
        # 0.5 -> 0.62 -> 0.704
        assert housing.affinity_score == pytest.approx(0.704)
        assert housing.avg_performance == pytest.approx(40.0)

    def test_admin_override_keeps_score(self, db, organization, housing_trend):
        from relevance_engine.models import TopicAffinity

        override = TopicAffinity(
            organization_id=organization.id,
            topic='housing',
            affinity_score=0.8,
            times_used=0,
            source=TopicAffinity.SOURCE_OVERRIDE,
        )
        db.session.add(override)
        db.session.commit()

        make_campaign(db, organization, performance_vs_baseline=-50.0)
        run_learning_pipeline(now=NOW)

        refreshed = TopicAffinity.query.filter_by(topic='housing').one()
        assert refreshed.affinity_score == 0.8
        assert refreshed.times_used == 1
        assert refreshed.last_used_at == NOW

    def test_trend_outside_window_is_ignored(self, db, organization):
        from relevance_engine.models import Trend, TrendCampaignCorrelation

        sent_at = NOW - timedelta(days=1)
        db.session.add(Trend(
            trend_key='old-housing',
            title='Old housing story',
            policy_domains=['Housing'],
            first_seen_at=sent_at - timedelta(hours=100),
            last_seen_at=sent_at - timedelta(hours=72),
        ))
        db.session.commit()

        make_campaign(db, organization, performance_vs_baseline=40.0)
        stats = run_learning_pipeline(now=NOW)
        assert stats['campaigns_processed'] == 1
        assert stats['correlations'] == 0
        assert TrendCampaignCorrelation.query.count() == 0

    def test_unrelated_trend_is_not_correlated(self, db, organization):
        from relevance_engine.models import Trend

        sent_at = NOW - timedelta(days=1)
        db.session.add(Trend(
            trend_key='border-bill',
            title='Border bill stalls',
            policy_domains=['Immigration'],
            context_terms=['asylum'],
            first_seen_at=sent_at - timedelta(hours=5),
            last_seen_at=sent_at - timedelta(hours=1),
        ))
        db.session.commit()

        make_campaign(db, organization, performance_vs_baseline=40.0)
        assert run_learning_pipeline(now=NOW)['correlations'] == 0

    def test_only_completed_campaigns(self, db, organization, housing_trend):
        make_campaign(db, organization, status='sent', performance_vs_baseline=40.0)
        make_campaign(db, organization, status='draft', sent_at=None)
        assert run_learning_pipeline(now=NOW)['campaigns_processed'] == 0

    def test_lookback_window(self, db, organization, housing_trend):
        make_campaign(db, organization, performance_vs_baseline=40.0, sent_at=NOW - timedelta(days=10))
        assert run_learning_pipeline(now=NOW, lookback_days=7)['campaigns_processed'] == 0


class TestUpsertAffinity:

    def test_creates_then_updates(self, db, organization):
        from relevance_engine.models import TopicAffinity

        upsert_affinity(organization.id, 'Housing', 40.0, NOW)
        db.session.commit()
        upsert_affinity(organization.id, 'housing', 0.0, NOW)
        db.session.commit()

        rows = TopicAffinity.query.filter_by(organization_id=organization.id).all()
        assert len(rows) == 1
        assert rows[0].topic == 'housing'
        assert rows[0].times_used == 2
        assert rows[0].best_performance == 40.0
